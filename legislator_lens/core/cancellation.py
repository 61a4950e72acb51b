"""
Legislator Lens - cooperative cancellation
A CancelSignal is handed down from the caller to every suspension point.
"""
import asyncio
import logging
from typing import Awaitable, Optional, TypeVar

from .exceptions import AnalysisCancelledError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CancelSignal:
    """Caller-owned cancellation token backed by an asyncio.Event."""

    def __init__(self):
        self._event = asyncio.Event()
        self.reason: Optional[str] = None

    def cancel(self, reason: str = "cancelled by caller"):
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self):
        await self._event.wait()

    def raise_if_cancelled(self):
        if self.cancelled:
            raise AnalysisCancelledError(self.reason or "cancelled by caller")


async def run_cancellable(aw: Awaitable[T], signal: Optional[CancelSignal] = None) -> T:
    """
    Await `aw`, aborting it as soon as `signal` fires.

    :param aw: coroutine or future doing the actual work
    :param signal: optional cancellation token
    :return: the result of `aw`
    :raises AnalysisCancelledError: the signal fired before `aw` finished
    """
    if signal is None:
        return await aw

    work = asyncio.ensure_future(aw)
    if signal.cancelled:
        work.cancel()
        await asyncio.gather(work, return_exceptions=True)
        signal.raise_if_cancelled()

    waiter = asyncio.ensure_future(signal.wait())
    try:
        await asyncio.wait({work, waiter}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        work.cancel()
        raise
    finally:
        waiter.cancel()

    if work.done():
        return work.result()

    work.cancel()
    # let the in-flight request unwind before reporting
    await asyncio.gather(work, return_exceptions=True)
    logger.info(f"LegislatorLens[Cancellation]: in-flight call aborted ({signal.reason})")
    raise AnalysisCancelledError(signal.reason or "cancelled by caller")
