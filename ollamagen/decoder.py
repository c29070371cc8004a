from __future__ import annotations

import codecs
import json
import logging
import typing as t

from ollamagen.exceptions import ChunkParseWarning
from ollamagen.types.wire import ChatCompletionChunk

logger = logging.getLogger("ollamagen.decoder")

DONE_SENTINEL = "data: [DONE]"
DATA_PREFIX = "data: "


def parse_line(line: str) -> ChatCompletionChunk | None:
    """Decode one complete stream line.

    Args:
        line: A complete line, without its terminating newline.

    Returns:
        The decoded chunk, or None for blank lines and the ``data: [DONE]``
        sentinel.

    Raises:
        ValueError: If the payload is not a valid chunk object
            (``json.JSONDecodeError`` and ``pydantic.ValidationError`` are
            both ValueError subclasses).
    """
    line = line.strip()
    if not line or line == DONE_SENTINEL:
        return None
    if line.startswith(DATA_PREFIX):
        line = line[len(DATA_PREFIX) :]
    payload = json.loads(line)
    if not isinstance(payload, dict):
        raise ValueError(f"expected a JSON object, got {type(payload).__name__}")
    return ChatCompletionChunk.model_validate(payload)


async def decode_stream(
    byte_stream: t.AsyncIterable[bytes],
    *,
    on_close: t.Callable[[], t.Awaitable[None]] | None = None,
) -> t.AsyncGenerator[ChatCompletionChunk, None]:
    """Decode a newline-delimited, optionally ``data:``-prefixed stream of
    JSON chunk events.

    Reads may split lines and even UTF-8 characters anywhere; text is decoded
    incrementally and only complete lines are parsed. A line that fails to
    parse is logged at WARNING and skipped; the log record carries
    ``warning_category="ChunkParseWarning"``. Reporting never interrupts the
    stream, whatever the active warning filters. An unterminated line left
    when the input ends is discarded.

    The byte source is closed and ``on_close`` is awaited on every exit path:
    exhaustion, error, and early ``aclose()`` by the consumer.

    Args:
        byte_stream: Raw response body chunks.
        on_close: Callback releasing the underlying resource.

    Yields:
        Decoded chunks, one per complete non-blank, non-sentinel line.
    """
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    buffer = ""
    line_count = 0
    try:
        async for data in byte_stream:
            buffer += decoder.decode(data)
            *lines, buffer = buffer.split("\n")
            for line in lines:
                line_count += 1
                try:
                    chunk = parse_line(line)
                except ValueError as e:
                    logger.warning(
                        "Skipping unparsable stream line %s: %s (line: %r)",
                        line_count,
                        e,
                        line,
                        extra={"warning_category": ChunkParseWarning.__name__},
                    )
                    continue
                if chunk is not None:
                    yield chunk
        # Any tail left here is an incomplete line by definition
        if buffer.strip():
            logger.debug("Discarding unterminated trailing line (%s chars)", len(buffer))
    finally:
        aclose = getattr(byte_stream, "aclose", None)
        try:
            if aclose is not None:
                await aclose()
        finally:
            if on_close is not None:
                await on_close()
