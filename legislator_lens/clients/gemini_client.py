"""
Gemini cloud client
Wraps the google-genai SDK behind the same text_chat(prompt=...) surface the
roles use for every text model.
"""
from dataclasses import dataclass
from typing import Dict, Optional

from google import genai
from google.genai import errors as genai_errors

from ..core.exceptions import ClientError, QuotaExceededError, UnavailableError
from ..core.log import get_logger
from ..models.availability import Availability

logger = get_logger(__name__)


@dataclass
class LLMResponse:
    completion_text: str


class GeminiClient:
    """
    Async facade over genai.Client.

    Requests go through the SDK's async surface (`client.aio`), so cancelling
    the awaiting task aborts the HTTP request itself.
    """

    def __init__(self, config: Dict, client: Optional[genai.Client] = None):
        self.config = config
        self.api_key = config.get("gemini_api_key")
        self.model = config.get("gemini_model", "gemini-2.0-flash")
        self._client = client

    @property
    def available(self) -> bool:
        return bool(self.api_key) or self._client is not None

    def availability(self) -> Availability:
        return Availability.READY if self.available else Availability.UNAVAILABLE

    def _get_client(self) -> genai.Client:
        if self._client is None:
            if not self.api_key:
                raise UnavailableError("Gemini API key not configured")
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def text_chat(self, prompt: str, temperature: float = 0.7,
                        max_output_tokens: int = 2048) -> LLMResponse:
        """
        Send a single prompt and return the complete response text.

        :raises UnavailableError: no API key configured
        :raises QuotaExceededError: the API answered 429 / RESOURCE_EXHAUSTED
        :raises ClientError: any other API or transport failure
        """
        client = self._get_client()
        try:
            response = await client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config={
                    "temperature": temperature,
                    "max_output_tokens": max_output_tokens,
                },
            )
        except genai_errors.APIError as e:
            if e.code == 429:
                logger.warning(f"LegislatorLens[Gemini]: quota exceeded: {e}")
                raise QuotaExceededError(f"Gemini quota exceeded: {e}") from e
            logger.error(f"LegislatorLens[Gemini]: API error: {e}")
            raise ClientError(f"Gemini API error: {e}") from e
        except Exception as e:
            logger.error(f"LegislatorLens[Gemini]: request failed: {e}", exc_info=True)
            raise ClientError(f"Gemini request failed: {e}") from e

        return LLMResponse(completion_text=response.text or "")
