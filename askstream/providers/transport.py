# sends one RequestEnvelope over httpx and relays the decoded body as events
# non-success statuses are read in full and raised verbatim, never decoded

import logging
from typing import AsyncIterator, Callable, Optional

import httpx

from askstream.core import config
from askstream.providers.base import (
    ApiError,
    ProviderError,
    ProviderTransportError,
    RequestEnvelope,
    StreamEvent,
)
from askstream.providers.streaming import Framing, decode_stream

logger = logging.getLogger(__name__)

StatusClassifier = Callable[[int, str], Optional[ProviderError]]
ConnectClassifier = Callable[[httpx.ConnectError], Optional[ProviderError]]


def _timeout() -> httpx.Timeout:
    return httpx.Timeout(config.TIMEOUT_SECONDS, connect=config.CONNECT_TIMEOUT_SECONDS)


async def open_stream(
    envelope: RequestEnvelope,
    framing: Framing,
    *,
    classify_status: Optional[StatusClassifier] = None,
    classify_connect: Optional[ConnectClassifier] = None,
) -> AsyncIterator[StreamEvent]:
    # url is logged without params; gemini carries the key there
    logger.info("POST %s", envelope.url)
    try:
        async with httpx.AsyncClient(timeout=_timeout()) as client:
            async with client.stream(
                envelope.method,
                envelope.url,
                json=envelope.body,
                headers=envelope.headers,
                params=envelope.params or None,
            ) as r:
                if not r.is_success:
                    body = (await r.aread()).decode("utf-8", errors="replace")
                    logger.warning("provider returned %s for %s", r.status_code, envelope.url)
                    refined = classify_status(r.status_code, body) if classify_status else None
                    raise refined or ApiError(r.status_code, body)
                async for event in decode_stream(r.aiter_bytes(), framing):
                    yield event
    except httpx.ConnectError as e:
        refined = classify_connect(e) if classify_connect else None
        if refined is not None:
            raise refined from e
        raise ProviderTransportError(f"Could not connect to {envelope.url}: {e}") from e
    except httpx.RequestError as e:
        raise ProviderTransportError(f"HTTP error talking to {envelope.url}: {e}") from e
