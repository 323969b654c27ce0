"""
Narrative (free-text summary) service clients.

The gap engine depends only on the ``NarrativeService`` protocol:

    await service.summarize(prompt) -> str      # raises NarrativeServiceError

Two HTTP implementations are provided:

  OllamaNarrativeService  POST {OLLAMA_BASE_URL}/api/generate
  GroqNarrativeService    POST https://api.groq.com/openai/v1/chat/completions

``get_narrative_service()`` picks Groq when GROQ_API is configured, Ollama
otherwise.  Unlike the extraction helpers, these clients never swallow errors
into an empty string: every non-success outcome raises NarrativeServiceError
and the caller decides on the fallback.
"""
from __future__ import annotations

import logging
from typing import Optional, Protocol

import httpx

from gapscope.config import settings

logger = logging.getLogger(__name__)

GROQ_CHAT_URL = "https://api.groq.com/openai/v1/chat/completions"


class NarrativeServiceError(RuntimeError):
    """The narrative service failed, timed out, or returned an unusable body."""


class NarrativeService(Protocol):
    """Injected text-generation capability."""

    async def summarize(self, prompt: str) -> str:
        ...


class _HTTPNarrativeService:
    """Shared httpx plumbing for the concrete clients."""

    def __init__(
        self,
        model: str,
        timeout: Optional[float] = None,
        max_tokens: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.model = model
        self.request_timeout = float(timeout if timeout is not None else settings.NARRATIVE_TIMEOUT)
        self.max_tokens = max_tokens if max_tokens is not None else settings.NARRATIVE_MAX_TOKENS
        self.timeout = httpx.Timeout(self.request_timeout, connect=5.0)
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def _post_json(self, url: str, payload: dict, headers: Optional[dict] = None) -> dict:
        """POST *payload* and return the decoded JSON body, or raise NarrativeServiceError."""
        try:
            async with self._client() as client:
                resp = await client.post(url, json=payload, headers=headers)
        except httpx.TimeoutException as exc:
            raise NarrativeServiceError(
                f"request timed out after {self.request_timeout:.0f} s"
            ) from exc
        except httpx.HTTPError as exc:
            raise NarrativeServiceError(f"connection error: {exc}") from exc

        if resp.status_code != 200:
            raise NarrativeServiceError(
                f"HTTP {resp.status_code}: {resp.text[:200]}"
            )
        try:
            body = resp.json()
        except ValueError as exc:
            raise NarrativeServiceError("response body is not valid JSON") from exc
        if not isinstance(body, dict):
            raise NarrativeServiceError("response body is not a JSON object")
        return body

    @staticmethod
    def _require_text(text: object) -> str:
        if not isinstance(text, str) or not text.strip():
            raise NarrativeServiceError("empty response")
        return text.strip()


class OllamaNarrativeService(_HTTPNarrativeService):
    """Narrative summaries via a local Ollama /api/generate endpoint."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        **kwargs,
    ) -> None:
        super().__init__(model or settings.OLLAMA_LLM_MODEL, **kwargs)
        self.base_url = (base_url or settings.OLLAMA_BASE_URL).rstrip("/")

    async def summarize(self, prompt: str) -> str:
        body = await self._post_json(
            f"{self.base_url}/api/generate",
            {
                "model": self.model,
                "prompt": prompt,
                "stream": False,
                "options": {"num_predict": self.max_tokens, "temperature": 0.3},
            },
        )
        return self._require_text(body.get("response"))

    async def check_health(self) -> bool:
        """Return True when Ollama answers GET /api/tags."""
        try:
            async with self._client() as client:
                resp = await client.get(f"{self.base_url}/api/tags")
            return resp.status_code == 200
        except httpx.HTTPError as exc:
            logger.warning("Ollama health check failed: %s", exc)
            return False


class GroqNarrativeService(_HTTPNarrativeService):
    """Narrative summaries via Groq's OpenAI-compatible chat completions API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        url: str = GROQ_CHAT_URL,
        **kwargs,
    ) -> None:
        super().__init__(model or settings.GROQ_MODEL, **kwargs)
        self.api_key = api_key or settings.GROQ_API
        self.url = url

    async def summarize(self, prompt: str) -> str:
        if not self.api_key:
            raise NarrativeServiceError("GROQ_API is not configured")
        body = await self._post_json(
            self.url,
            {
                "model": self.model,
                "messages": [{"role": "user", "content": prompt}],
                "max_tokens": self.max_tokens,
                "temperature": 0.3,
            },
            headers={"Authorization": f"Bearer {self.api_key}"},
        )
        try:
            text = body["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise NarrativeServiceError("malformed chat completion body") from exc
        return self._require_text(text)

    async def check_health(self) -> bool:
        # No cheap unauthenticated probe; report configured-ness only
        return bool(self.api_key)


def get_narrative_service() -> NarrativeService:
    """FastAPI dependency / factory for the configured narrative backend."""
    if settings.GROQ_API:
        return GroqNarrativeService()
    return OllamaNarrativeService()
