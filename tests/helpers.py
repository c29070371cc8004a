"""Test helpers: wire payload builders and HTTP doubles."""

from __future__ import annotations

import json
import typing as t

import httpx

from ollamagen import OllamaConfig
from ollamagen import OllamaContentGenerator

BASE_URL = "http://ollama.test"


def sse(payload: t.Mapping[str, t.Any]) -> bytes:
    """Encode one stream event line the way the service sends it."""
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n".encode()


def chunk_payload(
    content: str | None = None,
    *,
    finish_reason: str | None = None,
    id: str = "chatcmpl-1",  # pylint: disable=redefined-builtin
    model: str = "devstral:24b",
    **delta: t.Any,
) -> dict[str, t.Any]:
    if content is not None:
        delta["content"] = content
    return {
        "id": id,
        "object": "chat.completion.chunk",
        "created": 1730000000,
        "model": model,
        "choices": [{"index": 0, "delta": delta, "finish_reason": finish_reason}],
    }


def completion_payload(
    content: str | None = "Hello!",
    *,
    finish_reason: str | None = "stop",
    tool_calls: list[dict[str, t.Any]] | None = None,
    usage: dict[str, int] | None = None,
) -> dict[str, t.Any]:
    message = {"role": "assistant", "content": content}  # type: dict[str, t.Any]
    if tool_calls is not None:
        message["tool_calls"] = tool_calls
    payload = {
        "id": "chatcmpl-42",
        "object": "chat.completion",
        "created": 1730000000,
        "model": "devstral:24b",
        "choices": [{"index": 0, "message": message, "finish_reason": finish_reason}],
    }  # type: dict[str, t.Any]
    if usage is not None:
        payload["usage"] = usage
    return payload


async def aiter_bytes(chunks: t.Iterable[bytes]) -> t.AsyncIterator[bytes]:
    for chunk in chunks:
        yield chunk


class TrackingStream(httpx.AsyncByteStream):
    """Response body that records whether it was released."""

    def __init__(self, chunks: t.Sequence[bytes]):
        self.chunks = chunks
        self.read = 0
        self.closed = False

    async def __aiter__(self) -> t.AsyncIterator[bytes]:
        for chunk in self.chunks:
            self.read += 1
            yield chunk

    async def aclose(self) -> None:
        self.closed = True


class Recorder:
    """MockTransport handler that records requests and replays responses."""

    def __init__(self, *responses: httpx.Response | Exception):
        self.responses = list(responses)
        self.requests = []  # type: t.List[httpx.Request]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def last_json(self) -> dict[str, t.Any]:
        return json.loads(self.requests[-1].content)


def make_generator(recorder: Recorder, **config: t.Any) -> OllamaContentGenerator:
    client = httpx.AsyncClient(transport=httpx.MockTransport(recorder))
    return OllamaContentGenerator(OllamaConfig(base_url=BASE_URL, **config), http_client=client)
