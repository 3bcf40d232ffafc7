# tests/test_api_basic.py
import asyncio
import httpx
import pytest
import respx
from typing import AsyncIterator

import askstream.api.routers.ask as ask_router
from askstream.providers.base import ApiError, ConnectionConfig, UnreachableBackendError
from askstream.providers.registry import ProviderIdentity

CFG = ConnectionConfig(api_key="k", api_url="https://api.openai.com/v1/chat/completions", model="gpt-4o")


def fake_prepare(gen_factory, identity=ProviderIdentity.OPENAI):
    def prepare_and_stream(*, message, provider=None, model=None, api_url=None, max_tokens=None, environment=None):
        return identity, CFG, gen_factory()
    return prepare_and_stream

@pytest.mark.asyncio
async def test_health(client):
    r = await client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"

@pytest.mark.asyncio
async def test_providers(client):
    # Lists every built-in provider with its family and credential needs.
    r = await client.get("/providers")
    assert r.status_code == 200
    providers = {p["name"]: p for p in r.json()["providers"]}
    assert list(providers) == ["anthropic", "openai", "gemini", "ollama", "perplexity", "groq", "mistral", "cohere", "together"]
    assert providers["ollama"]["requires_api_key"] is False
    assert providers["groq"]["family"] == "openai"
    assert providers["gemini"]["default_model"] == "gemini-1.5-flash"

@pytest.mark.asyncio
async def test_ask_stream_ok(client, monkeypatch):
    # Fragments are streamed back as plain text, in order.
    async def gen() -> AsyncIterator[str]:
        yield "he"
        await asyncio.sleep(0)
        yield "llo"
    monkeypatch.setattr(ask_router, "prepare_and_stream", fake_prepare(gen))
    r = await client.post("/ask", json={"message": "say hello", "provider": "openai"})
    assert r.status_code == 200
    assert r.text == "hello"
    assert r.headers["x-provider"] == "openai"
    assert r.headers["x-model"] == "gpt-4o"

@pytest.mark.asyncio
async def test_unknown_provider_400(client, clean_env):
    r = await client.post("/ask", json={"message": "hi", "provider": "nope"})
    assert r.status_code == 400
    assert "Available" in r.json()["detail"]

@pytest.mark.asyncio
async def test_missing_credential_400(client, clean_env):
    # Detected before any request leaves the process.
    r = await client.post("/ask", json={"message": "hi", "provider": "anthropic"})
    assert r.status_code == 400
    assert "ANTHROPIC_API_KEY" in r.json()["detail"]

@pytest.mark.asyncio
async def test_api_error_502_keeps_status_and_body(client, monkeypatch):
    async def gen() -> AsyncIterator[str]:
        raise ApiError(401, '{"error":"invalid key"}')
        yield ""
    monkeypatch.setattr(ask_router, "prepare_and_stream", fake_prepare(gen))
    r = await client.post("/ask", json={"message": "hi"})
    assert r.status_code == 502
    assert r.json()["detail"] == {"status": 401, "body": '{"error":"invalid key"}'}

@pytest.mark.asyncio
async def test_unreachable_backend_502(client, monkeypatch):
    async def gen() -> AsyncIterator[str]:
        raise UnreachableBackendError("http://localhost:11434/api/chat")
        yield ""
    monkeypatch.setattr(ask_router, "prepare_and_stream", fake_prepare(gen, ProviderIdentity.OLLAMA))
    r = await client.post("/ask", json={"message": "hi", "provider": "ollama"})
    assert r.status_code == 502
    assert "localhost:11434" in r.json()["detail"]

@pytest.mark.asyncio
async def test_validation_422(client):
    # Empty message and non-positive max_tokens are rejected by the schema.
    r = await client.post("/ask", json={"message": ""})
    assert r.status_code == 422
    r = await client.post("/ask", json={"message": "hi", "max_tokens": 0})
    assert r.status_code == 422

@pytest.mark.asyncio
async def test_custom_api_url_never_receives_server_key(client, clean_env):
    # A caller-chosen endpoint must not be paired with a key from the server's env.
    clean_env.setenv("OPENAI_API_KEY", "sk-SERVER-SECRET")
    with respx.mock(assert_all_called=False) as mock:
        stolen = mock.post("https://attacker.example/steal").mock(
            return_value=httpx.Response(200, content=b"data: [DONE]\n")
        )
        r = await client.post(
            "/ask", json={"message": "hi", "provider": "openai", "api_url": "https://attacker.example/steal"}
        )
    assert r.status_code == 400
    assert "attacker.example" in r.json()["detail"]
    assert not stolen.called

@pytest.mark.asyncio
async def test_known_api_url_override_is_allowed(client, clean_env):
    clean_env.setenv("GROQ_API_KEY", "gsk")
    url = "https://api.groq.com/openai/v1/chat/completions"
    with respx.mock(assert_all_called=False) as mock:
        route = mock.post(url).mock(
            return_value=httpx.Response(200, content=b'data: {"choices":[{"delta":{"content":"ok"}}]}\n')
        )
        r = await client.post("/ask", json={"message": "hi", "provider": "groq", "api_url": url})
    assert r.status_code == 200
    assert r.text == "ok"
    assert route.called
