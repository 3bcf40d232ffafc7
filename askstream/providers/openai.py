# system-role-message family; shared by every OpenAI-compatible backend
# (openai, perplexity, groq, mistral, cohere, together, custom)

from typing import AsyncIterator

from askstream.providers.base import ConnectionConfig, RequestEnvelope, StreamEvent
from askstream.providers.streaming import EventStreamFraming, openai_text
from askstream.providers.transport import open_stream
from askstream.services.prompt import build_system_prompt

FRAMING = EventStreamFraming(openai_text)


def build_request(config: ConnectionConfig, query: str, system_prompt: str) -> RequestEnvelope:
    return RequestEnvelope(
        url=config.api_url,
        headers={
            "content-type": "application/json",
            "authorization": f"Bearer {config.api_key}",
        },
        body={
            "model": config.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": query},
            ],
            "stream": True,
            "max_tokens": config.max_tokens,
        },
    )


def stream(config: ConnectionConfig, query: str) -> AsyncIterator[StreamEvent]:
    return open_stream(build_request(config, query, build_system_prompt()), FRAMING)
