"""
Ollama-backed on-device capabilities.
A local Ollama server stands in for the on-device model runtime: models run on
the user's own machine and are reached over its loopback REST API.
"""
from typing import Any, Dict, List, Optional, Set

import httpx

from ..core.exceptions import ClientError, LegislatorLensError, QuotaExceededError
from ..core.log import get_logger
from ..models.availability import Availability
from .on_device import LanguageModelSession, OnDeviceCapability, SummarizerSession, WriterSession

logger = get_logger(__name__)

DEFAULT_SYSTEM_PROMPT = """You are a legislative analyst helping citizens understand congressional bills.
Provide clear, unbiased analysis in plain language.
Focus on explaining impacts, stakeholders, and key provisions.
Always maintain political neutrality and cite specific bill sections when relevant.
Format responses in clean, readable JSON when requested."""

DEFAULT_SHARED_CONTEXT = "Congressional legislation analysis. Focus on policy impact and key provisions."

SUMMARY_INSTRUCTIONS = {
    "key-points": "Summarize the text as 3-5 key points in a {format} bulleted list.",
    "tl;dr": "Give a TL;DR of the text in 2-3 sentences.",
    "teaser": "Write a one-paragraph teaser that makes a citizen want to learn more about the text.",
    "headline": "Write a single headline of 10-15 words capturing the essence of the text.",
}

LENGTH_HINTS = {
    "short": "Be brief.",
    "medium": "Use a moderate amount of detail.",
    "long": "Be thorough.",
}

DEFAULT_WRITER_CONTEXT = "Professional correspondence to elected representatives about legislation"

TONE_HINTS = {
    "formal": "Write in a formal register.",
    "neutral": "Write in a plain, neutral register.",
    "casual": "Write in a warm, conversational register.",
}


class OllamaRuntime:
    """
    Thin async client for a local Ollama server
    """

    def __init__(self, config: Dict):
        self.config = config
        self.api_base = config.get("ollama_api_base", "http://localhost:11434").rstrip("/")
        self.model_name = config.get("on_device_model", "gemma3:1b")
        timeout_seconds = config.get("retrieval", {}).get("timeout_seconds", 10)
        self.timeout = httpx.Timeout(timeout_seconds)
        # generation on small hardware is slow; only connect time is bounded
        self.generate_timeout = httpx.Timeout(None, connect=timeout_seconds)
        self._pulling: Set[str] = set()

    async def _post(self, path: str, payload: Dict, timeout: httpx.Timeout) -> Dict[str, Any]:
        try:
            async with httpx.AsyncClient(timeout=timeout) as client:
                response = await client.post(f"{self.api_base}{path}", json=payload)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 429:
                raise QuotaExceededError(f"Ollama is overloaded: {e}") from e
            raise ClientError(f"Ollama request {path} failed: {e}") from e
        except httpx.HTTPError as e:
            raise ClientError(f"Ollama request {path} failed: {e}") from e

    async def list_models(self) -> Optional[List[str]]:
        """Installed model names, or None when the server is unreachable."""
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(f"{self.api_base}/api/tags")
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            logger.debug(f"LegislatorLens[Ollama]: server not reachable at {self.api_base}: {e}")
            return None
        return [model.get("name", "") for model in data.get("models", [])]

    async def availability(self) -> Availability:
        if self.model_name in self._pulling:
            return Availability.DOWNLOADING
        models = await self.list_models()
        if models is None:
            return Availability.UNAVAILABLE
        # "gemma3" is installed as "gemma3:latest"
        wanted = {self.model_name, f"{self.model_name}:latest"}
        if wanted.intersection(models):
            return Availability.READY
        return Availability.DOWNLOADABLE

    async def ensure_model(self):
        """Pull the configured model unless it is already installed."""
        if await self.availability() is Availability.READY:
            return
        logger.info(f"LegislatorLens[Ollama]: pulling model '{self.model_name}'...")
        self._pulling.add(self.model_name)
        try:
            await self._post("/api/pull", {"model": self.model_name, "stream": False},
                             timeout=self.generate_timeout)
        finally:
            self._pulling.discard(self.model_name)
        logger.info(f"LegislatorLens[Ollama]: model '{self.model_name}' ready")

    async def chat(self, messages: List[Dict[str, str]], options: Dict[str, Any]) -> str:
        data = await self._post(
            "/api/chat",
            {"model": self.model_name, "messages": messages, "stream": False, "options": options},
            timeout=self.generate_timeout,
        )
        message = data.get("message") or {}
        return message.get("content", "")


class OllamaPromptSession(LanguageModelSession):
    """Conversation with a system prompt; keeps history like a browser model session."""

    def __init__(self, runtime: OllamaRuntime, system_prompt: str, options: Dict[str, Any]):
        self.runtime = runtime
        self.options = options
        self.messages: List[Dict[str, str]] = [{"role": "system", "content": system_prompt}]
        self.destroyed = False

    async def prompt(self, message: str) -> str:
        if self.destroyed:
            raise LegislatorLensError("Session already destroyed")
        self.messages.append({"role": "user", "content": message})
        reply = await self.runtime.chat(self.messages, self.options)
        self.messages.append({"role": "assistant", "content": reply})
        return reply

    async def destroy(self) -> None:
        self.messages.clear()
        self.destroyed = True


class OllamaSummarizerSession(SummarizerSession):

    def __init__(self, runtime: OllamaRuntime, shared_context: str, format: str, length: str):
        self.runtime = runtime
        self.shared_context = shared_context
        self.format = format
        self.length = length
        self.destroyed = False

    async def summarize(self, text: str, summary_type: str = "key-points") -> str:
        if self.destroyed:
            raise LegislatorLensError("Session already destroyed")
        if summary_type not in SUMMARY_INSTRUCTIONS:
            raise ValueError(f"Unsupported summary type: {summary_type}")
        instruction = SUMMARY_INSTRUCTIONS[summary_type].format(format=self.format)
        system = f"{self.shared_context}\n{instruction} {LENGTH_HINTS.get(self.length, '')}".strip()
        messages = [
            {"role": "system", "content": system},
            {"role": "user", "content": text},
        ]
        summary = await self.runtime.chat(messages, {"temperature": 0.3})
        return summary.strip()

    async def destroy(self) -> None:
        self.destroyed = True


class OllamaWriterSession(WriterSession):

    def __init__(self, runtime: OllamaRuntime, shared_context: str, tone: str, length: str):
        self.runtime = runtime
        self.shared_context = shared_context
        self.tone = tone
        self.length = length
        self.destroyed = False

    async def write(self, prompt: str) -> str:
        if self.destroyed:
            raise LegislatorLensError("Session already destroyed")
        system = f"{self.shared_context}\n{TONE_HINTS.get(self.tone, '')} {LENGTH_HINTS.get(self.length, '')}".strip()
        messages = [
            {"role": "system", "content": system},
            {"role": "user", "content": prompt},
        ]
        text = await self.runtime.chat(messages, {"temperature": self.runtime.config.get("temperature", 0.7)})
        return text.strip()

    async def destroy(self) -> None:
        self.destroyed = True


class OllamaLanguageModel(OnDeviceCapability):
    """Prompt capability"""
    name = "prompt"

    def __init__(self, runtime: OllamaRuntime):
        self.runtime = runtime

    async def availability(self) -> Availability:
        return await self.runtime.availability()

    async def create(self, system_prompt: Optional[str] = None, temperature: Optional[float] = None,
                     top_k: Optional[int] = None, **_) -> OllamaPromptSession:
        await self.runtime.ensure_model()
        options = {
            "temperature": temperature if temperature is not None else self.runtime.config.get("temperature", 0.7),
            "top_k": top_k if top_k is not None else self.runtime.config.get("top_k", 40),
        }
        return OllamaPromptSession(self.runtime, system_prompt or DEFAULT_SYSTEM_PROMPT, options)


class OllamaSummarizer(OnDeviceCapability):
    """Summarizer capability"""
    name = "summarizer"

    def __init__(self, runtime: OllamaRuntime):
        self.runtime = runtime

    async def availability(self) -> Availability:
        return await self.runtime.availability()

    async def create(self, shared_context: Optional[str] = None, format: str = "markdown",
                     length: str = "medium", **_) -> OllamaSummarizerSession:
        await self.runtime.ensure_model()
        return OllamaSummarizerSession(self.runtime, shared_context or DEFAULT_SHARED_CONTEXT, format, length)


class OllamaWriter(OnDeviceCapability):
    """Writer capability"""
    name = "writer"

    def __init__(self, runtime: OllamaRuntime):
        self.runtime = runtime

    async def availability(self) -> Availability:
        return await self.runtime.availability()

    async def create(self, shared_context: Optional[str] = None, tone: str = "formal",
                     length: str = "medium", **_) -> OllamaWriterSession:
        await self.runtime.ensure_model()
        return OllamaWriterSession(self.runtime, shared_context or DEFAULT_WRITER_CONTEXT, tone, length)
