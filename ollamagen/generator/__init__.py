from __future__ import annotations

import abc

from ollamagen.types.content import CountTokensRequest
from ollamagen.types.content import EmbedContentRequest
from ollamagen.types.content import GenerateContentRequest
from ollamagen.types.response import CountTokensResponse
from ollamagen.types.response import GenerateContentResponse
from ollamagen.types.stream import AsyncStream
from ollamagen.utils import AsyncContextMixin


class ContentGenerator(AsyncContextMixin, abc.ABC):
    """Abstract base class for content generators.

    A ContentGenerator serves requests written against the unified content
    schema (contents made of text, function-call and function-response
    parts) and answers with unified responses, whatever the provider behind
    it speaks on the wire.

    Implementations are stateless across calls: every call builds its own
    wire request and its own stream state. Optional lifecycle management is
    available via init/close (or ``async with``) for implementations holding
    connection pools.

    Example:
        ```python
        async with OllamaContentGenerator(OllamaConfig.from_env()) as generator:
            request = GenerateContentRequest(
                contents=[Content(role="user", parts=[TextPart(text="Hi!")])],
            )

            # Single-shot
            response = await generator.generate_content(request, "prompt-1")
            print(response.text)

            # Streaming
            stream = await generator.generate_content_stream(request, "prompt-2")
            async with stream:
                async for partial in stream:
                    print(partial.text, end="", flush=True)
        ```
    """

    @abc.abstractmethod
    async def generate_content(
        self, request: GenerateContentRequest, user_prompt_id: str, /
    ) -> GenerateContentResponse:
        """Generate a complete response.

        Args:
            request: The unified request.
            user_prompt_id: Opaque caller token, passed through to logs only.

        Returns:
            The assembled unified response.
        """

    @abc.abstractmethod
    async def generate_content_stream(
        self, request: GenerateContentRequest, user_prompt_id: str, /
    ) -> AsyncStream[GenerateContentResponse]:
        """Generate a response incrementally.

        The call itself completes once the service has accepted the request;
        partial responses are then produced lazily as the consumer iterates.

        Args:
            request: The unified request.
            user_prompt_id: Opaque caller token, passed through to logs only.

        Returns:
            A single-pass stream of partial unified responses.
        """

    @abc.abstractmethod
    async def count_tokens(self, request: CountTokensRequest, /) -> CountTokensResponse:
        """Count (or estimate) the tokens of the request contents."""

    @abc.abstractmethod
    async def embed_content(self, request: EmbedContentRequest, /) -> object:
        """Compute embeddings for the request contents."""
