"""Tests for the Ollama / Groq narrative clients (httpx MockTransport, no network)."""
import json

import httpx
import pytest

from gapscope.config import settings
from gapscope.services.narrative import (
    GroqNarrativeService,
    NarrativeServiceError,
    OllamaNarrativeService,
    get_narrative_service,
)


def _transport(handler) -> httpx.MockTransport:
    return httpx.MockTransport(handler)


@pytest.mark.asyncio
async def test_ollama_summarize_posts_prompt_and_model():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"response": "  Coverage is thin.  "})

    svc = OllamaNarrativeService(
        base_url="http://ollama.test", model="test-model", transport=_transport(handler)
    )
    text = await svc.summarize("Summarise these gaps")

    assert text == "Coverage is thin."
    assert seen["url"] == "http://ollama.test/api/generate"
    assert seen["body"]["model"] == "test-model"
    assert seen["body"]["prompt"] == "Summarise these gaps"
    assert seen["body"]["stream"] is False


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status_code, body",
    [
        (500, {"text": "model not loaded"}),
        (200, {"json": {"response": ""}}),
        (200, {"json": {"unexpected": True}}),
        (200, {"text": "not json"}),
    ],
)
async def test_ollama_failures_raise(status_code, body):
    svc = OllamaNarrativeService(
        base_url="http://ollama.test",
        transport=_transport(lambda request: httpx.Response(status_code, **body)),
    )
    with pytest.raises(NarrativeServiceError):
        await svc.summarize("prompt")


@pytest.mark.asyncio
async def test_ollama_timeout_raises_service_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    svc = OllamaNarrativeService(base_url="http://ollama.test", transport=_transport(handler))
    with pytest.raises(NarrativeServiceError, match="timed out"):
        await svc.summarize("prompt")


@pytest.mark.asyncio
async def test_ollama_check_health():
    up = OllamaNarrativeService(
        base_url="http://ollama.test",
        transport=_transport(lambda request: httpx.Response(200, json={"models": []})),
    )

    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    down = OllamaNarrativeService(base_url="http://ollama.test", transport=_transport(refuse))

    assert await up.check_health() is True
    assert await down.check_health() is False


@pytest.mark.asyncio
async def test_groq_summarize_parses_chat_completion():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200, json={"choices": [{"message": {"content": "Groq summary"}}]}
        )

    svc = GroqNarrativeService(api_key="secret", model="groq-model", transport=_transport(handler))
    text = await svc.summarize("prompt")

    assert text == "Groq summary"
    assert seen["auth"] == "Bearer secret"
    assert seen["body"]["model"] == "groq-model"
    assert seen["body"]["messages"] == [{"role": "user", "content": "prompt"}]


@pytest.mark.asyncio
async def test_groq_malformed_body_raises():
    svc = GroqNarrativeService(
        api_key="secret",
        transport=_transport(lambda request: httpx.Response(200, json={"choices": []})),
    )
    with pytest.raises(NarrativeServiceError):
        await svc.summarize("prompt")


@pytest.mark.asyncio
async def test_groq_without_api_key_raises(monkeypatch):
    monkeypatch.setattr(settings, "GROQ_API", None)
    svc = GroqNarrativeService()
    with pytest.raises(NarrativeServiceError):
        await svc.summarize("prompt")


def test_factory_prefers_groq_when_configured(monkeypatch):
    monkeypatch.setattr(settings, "GROQ_API", "secret")
    assert isinstance(get_narrative_service(), GroqNarrativeService)

    monkeypatch.setattr(settings, "GROQ_API", None)
    assert isinstance(get_narrative_service(), OllamaNarrativeService)
