"""
Legislator Lens - shared role plumbing
Prompt template loading, model calls and structured-output parsing shared by
the on-device and cloud analysis roles.
"""
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..clients.on_device import OnDeviceCapability, open_session
from ..core.cancellation import CancelSignal, run_cancellable
from ..core.exceptions import ClientError, LegislatorLensError, MalformedResponseError
from ..core.json_parser import parse_model_json
from ..core.log import log_llm_interaction
from ..core.text_budget import resolve_encoding
from ..models.availability import Availability

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

PROMPTS_DIR = Path(__file__).parent.parent / "prompts"


class Analyst:
    """Common base: config, prompt templates, parsing"""
    component = "Analyst"

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        max_tokens_k = self.config.get("max_bill_tokens_k", 4)
        self.max_tokens = max_tokens_k * 1024
        self.encoding = resolve_encoding(self.config.get("use_tokenizer", True))

    def _load_prompt(self, filename: str, fallback: str) -> str:
        """Load a prompt template, falling back to a minimal inline one"""
        prompt_path = PROMPTS_DIR / filename
        try:
            template = prompt_path.read_text(encoding="utf-8")
            logger.debug(f"LegislatorLens[{self.component}]: loaded prompt template {filename}")
            return template
        except FileNotFoundError:
            logger.error(f"LegislatorLens[{self.component}]: prompt file not found {prompt_path}")
            return fallback

    def _parse(self, text: str, expected_type=None) -> Any:
        return parse_model_json(text, expected_type=expected_type, source=self.component)

    def _validate(self, model: Type[M], data: Any) -> M:
        """Shape-check parsed JSON; shape errors count as malformed output."""
        try:
            return model.model_validate(data)
        except PydanticValidationError as e:
            logger.warning(f"LegislatorLens[{self.component}]: response failed validation: {e.error_count()} errors")
            raise MalformedResponseError(f"{self.component} response has an unexpected shape: {e}") from e


class OnDeviceAnalyst(Analyst):
    """
    Base for roles backed by an on-device capability.
    Every call opens its own session and destroys it afterwards.
    """

    def __init__(self, capability: OnDeviceCapability, config: Dict[str, Any]):
        super().__init__(config)
        self.capability = capability
        self.session_timeout = self.config.get("session_timeout_seconds", 30)

    async def availability(self) -> Availability:
        return await self.capability.availability()

    async def _prompt(self, prompt: str, signal: Optional[CancelSignal] = None,
                      system_prompt: Optional[str] = None) -> str:
        """
        Run one prompt in a fresh session.

        :raises LegislatorLensError: session, cancellation and backend errors;
            anything else from the backend is wrapped as ClientError
        """
        try:
            async with open_session(self.capability, timeout=self.session_timeout,
                                    signal=signal, system_prompt=system_prompt) as session:
                response = await run_cancellable(session.prompt(prompt), signal)
        except LegislatorLensError:
            raise
        except Exception as e:
            logger.error(f"LegislatorLens[{self.component}]: model call failed: {e}", exc_info=True)
            raise ClientError(f"{self.component} model call failed: {e}") from e

        log_llm_interaction(self.component, prompt, response)
        return response


class CloudAnalyst(Analyst):
    """
    Base for roles backed by a cloud text model.

    :param provider: object exposing `available` and
        `text_chat(prompt=..., temperature=..., max_output_tokens=...)`
    """

    def __init__(self, provider, config: Dict[str, Any]):
        super().__init__(config)
        self.provider = provider

    def availability(self) -> Availability:
        if self.provider is not None and self.provider.available:
            return Availability.READY
        return Availability.UNAVAILABLE

    async def _chat(self, prompt: str, temperature: float, max_output_tokens: int,
                    signal: Optional[CancelSignal] = None) -> str:
        if self.provider is None:
            raise ClientError(f"{self.component}: cloud provider not configured")
        try:
            response = await run_cancellable(
                self.provider.text_chat(prompt=prompt, temperature=temperature,
                                        max_output_tokens=max_output_tokens),
                signal,
            )
        except LegislatorLensError:
            raise
        except Exception as e:
            logger.error(f"LegislatorLens[{self.component}]: cloud call failed: {e}", exc_info=True)
            raise ClientError(f"{self.component} cloud call failed: {e}") from e

        text = response.completion_text
        log_llm_interaction(self.component, prompt, text)
        return text
