from __future__ import annotations

import logging
import typing as t
import warnings

import pytest

from ollamagen import ChunkParseWarning
from ollamagen.decoder import decode_stream
from ollamagen.decoder import parse_line
from tests.helpers import aiter_bytes
from tests.helpers import chunk_payload
from tests.helpers import sse

LINE = b'data: {"id":"x","object":"chat.completion.chunk","model":"m","choices":[{"delta":{"content":"Hi"},"finish_reason":null}]}\n'


async def _collect(chunks: t.Iterable[bytes], **kwargs: t.Any) -> list[t.Any]:
    return [chunk async for chunk in decode_stream(aiter_bytes(chunks), **kwargs)]


class _Closer:
    def __init__(self) -> None:
        self.calls = 0

    async def __call__(self) -> None:
        self.calls += 1


@pytest.mark.asyncio
async def test_line_split_at_every_position() -> None:
    for i in range(1, len(LINE)):
        decoded = await _collect([LINE[:i], LINE[i:]])

        assert len(decoded) == 1, i
        assert decoded[0].choices[0].delta.content == "Hi"


@pytest.mark.asyncio
async def test_multibyte_characters_split_across_reads() -> None:
    line = sse(chunk_payload("héllo ☃ 👋"))
    snowman = line.index("☃".encode())
    wave = line.index("👋".encode())

    decoded = await _collect([line[: snowman + 1], line[snowman + 1 : wave + 2], line[wave + 2 :]])

    assert [c.choices[0].delta.content for c in decoded] == ["héllo ☃ 👋"]


@pytest.mark.asyncio
async def test_one_byte_at_a_time() -> None:
    body = sse(chunk_payload("a")) + sse(chunk_payload("b")) + b"data: [DONE]\n"

    decoded = await _collect([body[i : i + 1] for i in range(len(body))])

    assert [c.choices[0].delta.content for c in decoded] == ["a", "b"]


@pytest.mark.asyncio
async def test_unprefixed_lines_and_crlf() -> None:
    body = b'{"id":"1","model":"m","choices":[{"delta":{"content":"x"}}]}\r\n\r\n'

    decoded = await _collect([body])

    assert decoded[0].id == "1"


@pytest.mark.asyncio
async def test_done_sentinel_and_blank_lines_are_dropped(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="ollamagen.decoder"):
        decoded = await _collect([b"\n   \n", b"data: [DONE]\n"])

    assert decoded == []
    assert not caplog.records


@pytest.mark.asyncio
async def test_trailing_incomplete_line_is_dropped(caplog: pytest.LogCaptureFixture) -> None:
    body = sse(chunk_payload("done")) + b'data: {"id":"x","choices":[{"delta":{"content":"cut'

    with caplog.at_level(logging.WARNING, logger="ollamagen.decoder"):
        decoded = await _collect([body])

    assert [c.choices[0].delta.content for c in decoded] == ["done"]
    assert not caplog.records


@pytest.mark.asyncio
async def test_malformed_line_is_skipped_with_warning(caplog: pytest.LogCaptureFixture) -> None:
    body = sse(chunk_payload("one")) + b"data: {not json}\n" + sse(chunk_payload("two"))

    with caplog.at_level(logging.WARNING, logger="ollamagen.decoder"):
        decoded = await _collect([body])

    assert [c.choices[0].delta.content for c in decoded] == ["one", "two"]
    assert len(caplog.records) == 1
    assert "{not json}" in caplog.records[0].getMessage()
    assert caplog.records[0].warning_category == ChunkParseWarning.__name__


@pytest.mark.asyncio
async def test_malformed_line_does_not_abort_under_error_filter() -> None:
    body = sse(chunk_payload("one")) + b"data: {bad}\n" + sse(chunk_payload("two"))

    with warnings.catch_warnings():
        warnings.simplefilter("error")
        decoded = await _collect([body])

    assert [c.choices[0].delta.content for c in decoded] == ["one", "two"]


@pytest.mark.parametrize("line", ["data: [1, 2]", 'data: "text"', 'data: {"choices": "nope"}', "data: [done]"])
def test_parse_line_rejects_non_chunks(line: str) -> None:
    with pytest.raises(ValueError):
        parse_line(line)


@pytest.mark.asyncio
async def test_release_on_exhaustion() -> None:
    closer = _Closer()

    await _collect([sse(chunk_payload("a"))], on_close=closer)

    assert closer.calls == 1


@pytest.mark.asyncio
async def test_release_on_source_error() -> None:
    closer = _Closer()

    async def failing() -> t.AsyncIterator[bytes]:
        yield sse(chunk_payload("a"))
        raise ConnectionResetError("peer went away")

    decoded = []
    with pytest.raises(ConnectionResetError):
        async for chunk in decode_stream(failing(), on_close=closer):
            decoded.append(chunk)

    assert len(decoded) == 1
    assert closer.calls == 1


@pytest.mark.asyncio
async def test_release_on_early_abandonment() -> None:
    closer = _Closer()
    source_closed = False

    async def endless() -> t.AsyncIterator[bytes]:
        nonlocal source_closed
        try:
            while True:
                yield sse(chunk_payload("tick"))
        finally:
            source_closed = True

    stream = decode_stream(endless(), on_close=closer)
    first = await stream.__anext__()
    await stream.aclose()

    assert first.choices[0].delta.content == "tick"
    assert source_closed
    assert closer.calls == 1
