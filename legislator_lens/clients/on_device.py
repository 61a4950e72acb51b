"""
On-device model capabilities
Abstract interfaces for locally running models plus the scoped session helper
every on-device role goes through.
"""
import asyncio
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from ..core.cancellation import CancelSignal, run_cancellable
from ..core.exceptions import SessionTimeoutError, UnavailableError
from ..core.log import get_logger
from ..models.availability import Availability

logger = get_logger(__name__)

DEFAULT_SESSION_TIMEOUT = 30


class ModelSession(ABC):
    """A live, stateful handle on a local model. Must be destroyed after use."""

    @abstractmethod
    async def destroy(self) -> None:
        pass


class LanguageModelSession(ModelSession):

    @abstractmethod
    async def prompt(self, message: str) -> str:
        """Send one message and return the complete response text."""
        pass


class SummarizerSession(ModelSession):

    @abstractmethod
    async def summarize(self, text: str, summary_type: str = "key-points") -> str:
        pass


class WriterSession(ModelSession):

    @abstractmethod
    async def write(self, prompt: str) -> str:
        """Write new text from a writing task description."""
        pass


class OnDeviceCapability(ABC):
    """
    One on-device capability (summarizer, prompt, writer, ...).
    Implementations bind to a concrete local runtime.
    """
    name: str = "capability"

    @abstractmethod
    async def availability(self) -> Availability:
        pass

    @abstractmethod
    async def create(self, **options) -> ModelSession:
        """
        Create a session. May trigger a model download when the capability
        is DOWNLOADABLE, which is why callers bound it with a timeout.
        """
        pass


@asynccontextmanager
async def open_session(
    capability: OnDeviceCapability,
    timeout: float = DEFAULT_SESSION_TIMEOUT,
    signal: Optional[CancelSignal] = None,
    **options
) -> AsyncIterator[ModelSession]:
    """
    Acquire a session for the duration of a block and always release it.

    :param capability: the capability to open a session on
    :param timeout: upper bound in seconds for session creation
    :param signal: optional cancellation token
    :param options: forwarded to capability.create()
    :raises UnavailableError: the capability reports UNAVAILABLE
    :raises SessionTimeoutError: creation took longer than `timeout`
    :raises AnalysisCancelledError: the signal fired during creation
    """
    state = await capability.availability()
    if not state.usable:
        raise UnavailableError(f"On-device capability '{capability.name}' is not available on this device")

    logger.debug(f"LegislatorLens[OnDevice]: creating '{capability.name}' session (status: {state.value})")
    try:
        session = await run_cancellable(asyncio.wait_for(capability.create(**options), timeout), signal)
    except asyncio.TimeoutError as e:
        raise SessionTimeoutError(
            f"'{capability.name}' session creation timed out after {timeout} seconds. "
            "The model may still be downloading."
        ) from e

    try:
        yield session
    finally:
        try:
            await session.destroy()
        except Exception as e:
            logger.error(f"LegislatorLens[OnDevice]: error destroying '{capability.name}' session: {e}")
