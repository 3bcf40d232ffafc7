import httpx
from typing import Any, AsyncIterator, Dict, Optional
from askstream.providers.base import (
    ConnectionConfig,
    ModelNotAvailableError,
    ProviderError,
    RequestEnvelope,
    StreamEvent,
    UnreachableBackendError,
)
from askstream.providers.streaming import NdjsonFraming
from askstream.providers.transport import open_stream
from askstream.services.prompt import build_system_prompt

FRAMING = NdjsonFraming()


def _apply_defaults(config: ConnectionConfig) -> Dict[str, Any]:
    # map the token budget onto Ollama's option name
    return {"num_predict": config.max_tokens}


def build_request(config: ConnectionConfig, query: str, system_prompt: str) -> RequestEnvelope:
    return RequestEnvelope(
        url=config.api_url,
        headers={"content-type": "application/json"},
        body={
            "model": config.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": query},
            ],
            "stream": True,
            "options": _apply_defaults(config),
        },
    )


def _classify_status(config: ConnectionConfig):
    def classify(status: int, body: str) -> Optional[ProviderError]:
        lowered = body.lower()
        if status == 404 or ("model" in lowered and "not found" in lowered):
            return ModelNotAvailableError(config.model)
        return None
    return classify


def _classify_connect(config: ConnectionConfig):
    def classify(_exc: httpx.ConnectError) -> Optional[ProviderError]:
        return UnreachableBackendError(config.api_url)
    return classify


def stream(config: ConnectionConfig, query: str) -> AsyncIterator[StreamEvent]:
    return open_stream(
        build_request(config, query, build_system_prompt()),
        FRAMING,
        classify_status=_classify_status(config),
        classify_connect=_classify_connect(config),
    )
