# single-system-string family: top-level "system" field, x-api-key header

from typing import AsyncIterator

from askstream.providers.base import ConnectionConfig, RequestEnvelope, StreamEvent
from askstream.providers.streaming import EventStreamFraming, anthropic_text
from askstream.providers.transport import open_stream
from askstream.services.prompt import build_system_prompt

API_VERSION = "2023-06-01"

FRAMING = EventStreamFraming(anthropic_text)


def build_request(config: ConnectionConfig, query: str, system_prompt: str) -> RequestEnvelope:
    return RequestEnvelope(
        url=config.api_url,
        headers={
            "content-type": "application/json",
            "x-api-key": config.api_key,
            "anthropic-version": API_VERSION,
        },
        body={
            "model": config.model,
            "max_tokens": config.max_tokens,
            "messages": [{"role": "user", "content": query}],
            "stream": True,
            "system": system_prompt,
        },
    )


def stream(config: ConnectionConfig, query: str) -> AsyncIterator[StreamEvent]:
    return open_stream(build_request(config, query, build_system_prompt()), FRAMING)
