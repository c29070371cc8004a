from __future__ import annotations

import contextlib
import logging
import math
import os
import typing as t

import httpx

from ollamagen.assembly import assemble_chunk
from ollamagen.assembly import assemble_response
from ollamagen.decoder import decode_stream
from ollamagen.exceptions import MissingBodyError
from ollamagen.exceptions import TransportError
from ollamagen.exceptions import UnsupportedOperationError
from ollamagen.generator import ContentGenerator
from ollamagen.mapping import build_messages
from ollamagen.mapping import build_request
from ollamagen.transport import ChatCompletionsTransport
from ollamagen.types.content import CountTokensRequest
from ollamagen.types.content import EmbedContentRequest
from ollamagen.types.content import GenerateContentRequest
from ollamagen.types.response import CountTokensResponse
from ollamagen.types.response import GenerateContentResponse
from ollamagen.types.stream import AsyncStream
from ollamagen.types.wire import ChatCompletion
from ollamagen.types.wire import ChatCompletionRequest

logger = logging.getLogger("ollamagen.generator.ollama")

CHAT_COMPLETIONS_ENDPOINT = "/v1/chat/completions"
DEFAULT_BASE_URL = "http://localhost:11434"
DEFAULT_MODEL = "devstral:24b"
CHARS_PER_TOKEN = 4


class OllamaConfig(t.NamedTuple):
    """Configuration for the Ollama content generator."""

    base_url: str = DEFAULT_BASE_URL
    """Service base URL; the chat-completions endpoint is appended."""

    model: str = DEFAULT_MODEL
    """Model used when a request names none."""

    timeout: float | None = None
    """Request timeout in seconds. None waits indefinitely."""

    max_retries: int = 0
    """Extra attempts after a connection-level failure."""

    default_headers: t.Mapping[str, str] | None = None
    """Additional headers for all requests."""

    @classmethod
    def from_env(
        cls,
        environ: t.Mapping[str, str] | None = None,
        **overrides: t.Any,
    ) -> OllamaConfig:
        """Build a configuration from ``OLLAMA_BASE_URL`` / ``OLLAMA_MODEL``.

        Explicit overrides win over the environment, which wins over the
        defaults. Empty values count as unset.

        Args:
            environ: Environment mapping. Defaults to ``os.environ``.
            **overrides: Field values taking precedence.

        Returns:
            The resolved configuration.
        """
        environ = os.environ if environ is None else environ
        fields = {
            "base_url": environ.get("OLLAMA_BASE_URL") or None,
            "model": environ.get("OLLAMA_MODEL") or None,
        }
        fields.update({k: v for k, v in overrides.items() if v is not None and v != ""})
        return cls(**{k: v for k, v in fields.items() if v is not None})


class OllamaContentGenerator(ContentGenerator):
    """Content generator backed by Ollama's OpenAI-compatible API.

    Translates unified requests into ``POST /v1/chat/completions`` calls and
    the answers (single JSON body or ``data:``-prefixed line stream) back
    into unified responses.

    Attributes:
        config: The resolved configuration.
        transport: HTTP transport used for all calls.

    Args:
        config: Explicit configuration; use `OllamaConfig.from_env` to read
            the process environment.
        http_client: Optional pre-configured httpx.AsyncClient. When given,
            the caller keeps ownership and closes it.

    Example:
        ```python
        generator = OllamaContentGenerator(
            OllamaConfig(base_url="http://gpu-box:11434", model="qwen3:8b")
        )
        response = await generator.generate_content(
            GenerateContentRequest(
                contents=[Content(role="user", parts=[TextPart(text="2+2?")])],
                config=GenerateContentConfig(temperature=0.2),
            ),
            "prompt-1",
        )
        print(response.text)
        await generator.close()
        ```

    Note:
        - No retries on HTTP error statuses; they surface as TransportError
        - Streaming forwards text deltas only; tool-call deltas are not
          rebuilt into function-call parts
        - count_tokens is a length-based estimate, not a tokenizer
    """

    def __init__(
        self,
        config: OllamaConfig = OllamaConfig(),
        *,
        http_client: httpx.AsyncClient | None = None,
    ):
        super().__init__()
        self.config = config
        logger.debug(
            "Initializing OllamaContentGenerator with model=%s, base_url=%s",
            config.model,
            config.base_url,
        )
        self.transport = ChatCompletionsTransport(
            config.base_url,
            timeout=config.timeout,
            http_client=http_client,
            default_headers=config.default_headers,
            max_retries=config.max_retries,
        )

    def _build_request(self, request: GenerateContentRequest, *, stream: bool) -> ChatCompletionRequest:
        return build_request(
            request.contents,
            model=request.model or self.config.model,
            stream=stream,
            config=request.config,
        )

    async def generate_content(
        self, request: GenerateContentRequest, user_prompt_id: str, /
    ) -> GenerateContentResponse:
        """Generate a complete response.

        Raises:
            TransportError: On a non-success status. The body is kept as raw
                text and never parsed.
            NoCandidateError: If the response has no choices.
            MalformedToolArgumentsError: If a tool call has invalid arguments.
        """
        body = self._build_request(request, stream=False)
        logger.debug(
            "[%s] generate_content: model=%s, messages=%s, tools=%s",
            user_prompt_id,
            body["model"],
            len(body["messages"]),
            len(body.get("tools", ())),
        )

        response = await self.transport.post_json(CHAT_COMPLETIONS_ENDPOINT, body)
        if not response.is_success:
            raise TransportError(response.status_code, response.text)

        return assemble_response(ChatCompletion.model_validate(response.json()))

    async def generate_content_stream(
        self, request: GenerateContentRequest, user_prompt_id: str, /
    ) -> AsyncStream[GenerateContentResponse]:
        """Generate a response incrementally.

        Errors about the call itself are raised here, before any item is
        produced. The HTTP response is released when the stream is exhausted,
        fails, or is closed by the consumer.

        Raises:
            TransportError: On a non-success status.
            MissingBodyError: If the response carries no body.
        """
        body = self._build_request(request, stream=True)
        logger.debug(
            "[%s] generate_content_stream: model=%s, messages=%s, tools=%s",
            user_prompt_id,
            body["model"],
            len(body["messages"]),
            len(body.get("tools", ())),
        )

        response = await self.transport.open_stream(CHAT_COMPLETIONS_ENDPOINT, body)
        if not response.is_success:
            try:
                await response.aread()
            finally:
                await response.aclose()
            raise TransportError(response.status_code, response.text)
        if response.status_code == 204 or response.headers.get("content-length") == "0":
            await response.aclose()
            raise MissingBodyError("No response body from Ollama")

        async def _stream_gen() -> t.AsyncGenerator[GenerateContentResponse, None]:
            count = 0
            chunks = decode_stream(response.aiter_bytes(), on_close=response.aclose)
            async with contextlib.aclosing(chunks):
                async for chunk in chunks:
                    partial = assemble_chunk(chunk)
                    if partial is None:
                        continue
                    count += 1
                    yield partial
            logger.debug("[%s] Stream finished after %s partial responses", user_prompt_id, count)

        return AsyncStream(_stream_gen(), on_close=response.aclose)

    async def count_tokens(self, request: CountTokensRequest, /) -> CountTokensResponse:
        """Estimate the token count of the request contents.

        The service has no tokenizer endpoint, so this is the summed length
        of the mapped message contents divided by four, rounded up. Do not
        rely on it being exact.
        """
        messages = build_messages(request.contents)
        chars = sum(len(message["content"]) for message in messages)
        return CountTokensResponse(total_tokens=math.ceil(chars / CHARS_PER_TOKEN))

    async def embed_content(self, request: EmbedContentRequest, /) -> t.NoReturn:
        """Not supported.

        Raises:
            UnsupportedOperationError: Always. Embeddings live behind a
                different endpoint this adapter does not model.
        """
        raise UnsupportedOperationError(
            "embed_content is not supported by the Ollama chat-completions adapter; "
            "use the Ollama embeddings API directly"
        )

    async def close(self) -> None:
        await self.transport.close()
