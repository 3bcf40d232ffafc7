# tests/conftest.py
import logging
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from askstream.main import app as asgi_app

PROVIDER_KEY_VARS = [
    "ANTHROPIC_API_KEY",
    "OPENAI_API_KEY",
    "GEMINI_API_KEY",
    "PERPLEXITY_API_KEY",
    "GROQ_API_KEY",
    "MISTRAL_API_KEY",
    "COHERE_API_KEY",
    "TOGETHER_API_KEY",
    "ASK_API_KEY",
    "ASK_API_URL",
    "ASK_MODEL",
    "ASK_MAX_TOKENS",
]


@pytest.fixture
def clean_env(monkeypatch):
    # a developer's real keys must never leak into a test
    for name in PROVIDER_KEY_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch

@pytest_asyncio.fixture
async def app():
    return asgi_app

@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

@pytest.fixture
def caplog_info(caplog):
    caplog.set_level(logging.INFO)
    return caplog
