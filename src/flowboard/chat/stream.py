"""Incremental decoding of chat completion event streams.

The backend streams lines of the form ``data: {json}``; each JSON payload
carries a text delta at ``choices[0].delta.content`` and the stream ends
with ``data: [DONE]``. Bytes arrive in arbitrary chunks, so both lines and
multi-byte characters may be split across chunk boundaries.
"""

import codecs
import json
from collections.abc import AsyncIterable, AsyncIterator
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..config import STREAM_DATA_PREFIX, STREAM_DONE_SENTINEL, STREAM_ENCODING


class FrameKind(Enum):
    """Classification of one stream line."""

    DELTA = "delta"
    DONE = "done"
    IGNORED = "ignored"
    PARTIAL = "partial"


@dataclass(frozen=True)
class StreamFrame:
    """One decoded line of the event stream."""

    kind: FrameKind
    text: str = ""


def _extract_delta(payload: Any) -> str:
    """Pull ``choices[0].delta.content`` out of a payload, or ''."""
    if not isinstance(payload, dict):
        return ""
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices:
        return ""
    first = choices[0]
    if not isinstance(first, dict):
        return ""
    delta = first.get("delta")
    if not isinstance(delta, dict):
        return ""
    content = delta.get("content")
    return content if isinstance(content, str) else ""


def classify_line(line: str) -> StreamFrame:
    """Classify one complete line (without its line terminator).

    Returns:
        IGNORED for blank lines, ``:`` comments and non-data fields,
        DONE for the sentinel, PARTIAL when the payload is not valid JSON,
        DELTA otherwise (``text`` may be empty when the payload has no content)
    """
    if not line.strip() or line.startswith(":"):
        return StreamFrame(FrameKind.IGNORED)
    if not line.startswith(STREAM_DATA_PREFIX):
        return StreamFrame(FrameKind.IGNORED)

    data = line[len(STREAM_DATA_PREFIX):].strip()
    if data == STREAM_DONE_SENTINEL:
        return StreamFrame(FrameKind.DONE)

    try:
        payload = json.loads(data)
    except json.JSONDecodeError:
        return StreamFrame(FrameKind.PARTIAL)
    return StreamFrame(FrameKind.DELTA, _extract_delta(payload))


class StreamDecoder:
    """Turns raw response bytes into text deltas.

    Feed it chunks in arrival order; it keeps whatever does not yet form a
    complete line (and any half-received UTF-8 sequence) for the next call.

    Usage:
        decoder = StreamDecoder()
        for chunk in chunks:
            for delta in decoder.feed(chunk):
                print(delta, end="")
            if decoder.done:
                break
    """

    def __init__(self, encoding: str = STREAM_ENCODING):
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._buffer = ""
        self._done = False

    @property
    def done(self) -> bool:
        """True once the end-of-stream sentinel has been seen."""
        return self._done

    @property
    def pending(self) -> str:
        """Text received but not yet consumed as a complete line."""
        return self._buffer

    def feed(self, chunk: bytes) -> list[str]:
        """Consume a chunk and return the non-empty deltas it completed.

        Once the sentinel has been seen, further chunks are ignored.
        """
        if self._done:
            return []
        self._buffer += self._decoder.decode(chunk)
        return self._drain()

    def _drain(self) -> list[str]:
        deltas: list[str] = []
        while not self._done:
            newline = self._buffer.find("\n")
            if newline == -1:
                break
            line = self._buffer[:newline]
            self._buffer = self._buffer[newline + 1:]
            if line.endswith("\r"):
                line = line[:-1]

            frame = classify_line(line)
            if frame.kind is FrameKind.DONE:
                self._done = True
            elif frame.kind is FrameKind.PARTIAL:
                # Unreachable with intact line framing; hold the line for the next chunk.
                self._buffer = line + "\n" + self._buffer
                break
            elif frame.kind is FrameKind.DELTA and frame.text:
                deltas.append(frame.text)
        return deltas


async def iter_deltas(
    source: AsyncIterable[bytes],
    decoder: StreamDecoder | None = None
) -> AsyncIterator[str]:
    """Lazily decode an async byte source into text deltas.

    Stops at the end-of-stream sentinel without pulling further chunks,
    or when the source is exhausted. Transport errors raised by the source
    propagate to the caller.

    Args:
        source: Async iterable of raw response body chunks
        decoder: Optional decoder instance (a fresh one by default)

    Yields:
        Non-empty text deltas in arrival order
    """
    decoder = decoder or StreamDecoder()
    async for chunk in source:
        for delta in decoder.feed(chunk):
            yield delta
        if decoder.done:
            break
