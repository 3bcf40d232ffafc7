# structured-contents family: model goes in the path, key in the query string
# alt=sse switches the response to event-stream framing

from typing import AsyncIterator

from askstream.providers.base import ConnectionConfig, RequestEnvelope, StreamEvent
from askstream.providers.streaming import EventStreamFraming, gemini_text
from askstream.providers.transport import open_stream
from askstream.services.prompt import build_system_prompt

FRAMING = EventStreamFraming(gemini_text)


def build_request(config: ConnectionConfig, query: str, system_prompt: str) -> RequestEnvelope:
    base = config.api_url.rstrip("/")
    return RequestEnvelope(
        url=f"{base}/{config.model}:streamGenerateContent",
        params={"key": config.api_key, "alt": "sse"},
        headers={"content-type": "application/json"},
        body={
            "contents": [{"role": "user", "parts": [{"text": query}]}],
            "generationConfig": {"maxOutputTokens": config.max_tokens},
            "systemInstruction": {"parts": [{"text": system_prompt}]},
        },
    )


def stream(config: ConnectionConfig, query: str) -> AsyncIterator[StreamEvent]:
    return open_stream(build_request(config, query, build_system_prompt()), FRAMING)
