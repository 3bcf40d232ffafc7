"""Incremental decoding of provider streaming bodies.

Network chunk boundaries never line up with protocol frames, so framing is
driven by :class:`DecodeBuffer` rather than by chunks: bytes go in, complete
lines come out, and at most one unterminated line stays pending.

Two framings are supported:

* :class:`EventStreamFraming` for ``data: {...}`` lines (Anthropic, OpenAI
  compatible, Gemini with ``alt=sse``). Each family supplies an extractor that
  pulls text out of its own JSON event shape.
* :class:`NdjsonFraming` for bare JSON-object lines carrying a ``done`` flag
  (Ollama).

Lines that are not data, fail to parse, or carry no text are skipped. Those
are keepalives and metadata events, not errors.
"""

from __future__ import annotations

import codecs
import json
import logging
from typing import Any, AsyncIterable, AsyncIterator, Callable, Iterable, List, Optional

import httpx

from askstream.providers.base import Completed, Failed, StreamEvent, TextFragment

logger = logging.getLogger(__name__)

DATA_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"

Extractor = Callable[[Any], Iterable[str]]


class DecodeBuffer:
    """Accumulates decoded text and hands back complete, stripped lines.

    ``pending`` is the only state: the text after the last newline seen so
    far. It never contains a newline once :meth:`feed` returns.
    """

    def __init__(self) -> None:
        # incremental so a UTF-8 sequence split across chunks is not mangled
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self.pending = ""

    def feed(self, chunk: bytes) -> List[str]:
        text = self.pending + self._decoder.decode(chunk)
        *lines, self.pending = text.split("\n")
        return [line.strip() for line in lines]

    def discard(self) -> str:
        # residual unterminated text is never treated as a frame
        leftover, self.pending = self.pending, ""
        self._decoder.reset()
        return leftover


class EventStreamFraming:
    def __init__(self, extract: Extractor) -> None:
        self.extract = extract

    def decode_line(self, line: str) -> List[StreamEvent]:
        if not line.startswith(DATA_PREFIX):
            return []
        payload = line[len(DATA_PREFIX):].lstrip()
        if payload == DONE_SENTINEL:
            # end of stream is signalled by the transport closing
            return []
        try:
            event = json.loads(payload)
        except json.JSONDecodeError:
            logger.debug("skipping malformed event-stream line: %.200s", payload)
            return []
        return [TextFragment(t) for t in _texts(self.extract, event)]


class NdjsonFraming:
    def decode_line(self, line: str) -> List[StreamEvent]:
        if not line:
            return []
        try:
            data = json.loads(line)
        except json.JSONDecodeError:
            logger.debug("skipping malformed ndjson line: %.200s", line)
            return []
        if not isinstance(data, dict):
            return []
        events: List[StreamEvent] = [TextFragment(t) for t in _texts(ollama_text, data)]
        err = data.get("error")
        if isinstance(err, str) and err:
            events.append(Failed(err))
        elif data.get("done") is True:
            events.append(Completed())
        return events


Framing = EventStreamFraming | NdjsonFraming


def _texts(extract: Extractor, event: Any) -> List[str]:
    try:
        found = list(extract(event))
    except (AttributeError, IndexError, KeyError, TypeError):
        # shape did not match this family's event layout
        return []
    return [t for t in found if isinstance(t, str) and t]


# --- per-family text extractors -------------------------------------------

def anthropic_text(event: Any) -> List[str]:
    if event.get("type") != "content_block_delta":
        return []
    delta = event.get("delta") or {}
    if delta.get("type") != "text_delta":
        return []
    return [delta.get("text")]


def openai_text(event: Any) -> List[str]:
    choices = event.get("choices") or []
    if not choices:
        return []
    delta = choices[0].get("delta") or {}
    return [delta.get("content")]


def gemini_text(event: Any) -> List[str]:
    candidates = event.get("candidates") or []
    if not candidates:
        return []
    content = candidates[0].get("content") or {}
    return [part.get("text") for part in content.get("parts") or []]


def ollama_text(event: Any) -> List[str]:
    message = event.get("message") or {}
    return [message.get("content")]


# --- driver ----------------------------------------------------------------

async def decode_stream(
    chunks: AsyncIterable[bytes],
    framing: Framing,
) -> AsyncIterator[StreamEvent]:
    """Turn raw body chunks into events, ending with ``Completed`` or ``Failed``.

    Stops pulling chunks as soon as a terminal event is produced, even if the
    source has more data buffered.
    """
    buf = DecodeBuffer()
    it = chunks.__aiter__()
    try:
        while True:
            try:
                chunk = await it.__anext__()
            except StopAsyncIteration:
                break
            except httpx.RequestError as e:
                logger.warning("stream interrupted: %s", e)
                yield Failed(f"stream interrupted: {e}")
                return
            for line in buf.feed(chunk):
                for event in framing.decode_line(line):
                    yield event
                    if isinstance(event, (Completed, Failed)):
                        return
        leftover = buf.discard()
        if leftover.strip():
            logger.debug("discarding %d bytes of unterminated trailing data", len(leftover))
        yield Completed()
    finally:
        buf.discard()
        aclose: Optional[Callable[[], Any]] = getattr(it, "aclose", None)
        if aclose is not None:
            await aclose()
