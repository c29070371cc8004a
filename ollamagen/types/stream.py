from __future__ import annotations

import types
import typing as t

from ollamagen.exceptions import StreamConsumedError

_T = t.TypeVar("_T")
_U = t.TypeVar("_U")


class AsyncStream(t.AsyncIterator[_T], t.Generic[_T]):
    """Lazy, single-pass async stream with functional operations.

    Items are produced only when the consumer asks for the next one, so an
    abandoned stream never drains its source eagerly. Once the stream is
    exhausted or closed it cannot be iterated again.

    Closing the stream (``aclose()``, or leaving an ``async with`` block)
    closes the source iterator and then runs the ``on_close`` callback, which
    is where the owner releases the underlying resource (e.g. an HTTP
    response). The callback also runs when the source was never started.

    Type Parameters:
        _T: The type of items emitted by this stream.

    Example:
        ```python
        stream = await generator.generate_content_stream(request, "prompt-1")

        async with stream:
            async for response in stream:
                print(response.text, end="", flush=True)

        # Functional operations
        texts = stream.map(lambda r: r.text or "")
        full_text = await texts.reduce(lambda acc, s: acc + s, "")
        ```

    Note:
        - Iterating a completed or closed stream raises StreamConsumedError
        - Transformation operations create new streams sharing the source;
          closing a derived stream closes the stream it was derived from
    """

    def __init__(
        self,
        source: t.AsyncIterable[_T],
        *,
        on_close: t.Callable[[], t.Awaitable[None]] | None = None,
    ):
        self._source = source
        self._on_close = on_close
        self._iterator = None  # type: t.Optional[t.AsyncIterator[_T]]
        self._error = None  # type: t.Optional[Exception]
        self._completed = False
        self._closed = False
        self._count = 0

    def __aiter__(self) -> AsyncStream[_T]:
        if self._completed or self._closed:
            raise StreamConsumedError("Stream has already been consumed")
        return self

    async def __anext__(self) -> _T:
        if self._closed:
            raise StopAsyncIteration
        if self._iterator is None:
            self._iterator = self._source.__aiter__()
        try:
            item = await self._iterator.__anext__()
        except StopAsyncIteration:
            self._completed = True
            raise
        except Exception as e:
            self._error = e
            self._completed = True
            raise
        self._count += 1
        return item

    async def aclose(self) -> None:
        """Close the source and release the underlying resource.

        Safe to call more than once.
        """
        if self._closed:
            return
        self._closed = True
        try:
            aclose = getattr(self._iterator or self._source, "aclose", None)
            if aclose is not None:
                await aclose()
        finally:
            if self._on_close is not None:
                await self._on_close()

    async def __aenter__(self) -> t.Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        traceback: types.TracebackType | None,
    ) -> t.Literal[False]:
        await self.aclose()
        return False

    def filter(self, predicate: t.Callable[[_T], bool]) -> AsyncStream[_T]:
        """Filter stream items by predicate.

        Args:
            predicate: Function returning True for items to keep.

        Returns:
            New stream containing only items matching predicate.
        """

        async def filtered_source() -> t.AsyncIterator[_T]:
            async for item in self:
                if predicate(item):
                    yield item

        return AsyncStream(filtered_source(), on_close=self.aclose)

    def map(self, mapper: t.Callable[[_T], _U]) -> AsyncStream[_U]:
        """Transform each stream item.

        Args:
            mapper: Function to transform each item.

        Returns:
            New stream with transformed items.
        """

        async def mapped_source() -> t.AsyncIterator[_U]:
            async for item in self:
                yield mapper(item)

        return AsyncStream(mapped_source(), on_close=self.aclose)

    def take(self, n: int, /) -> AsyncStream[_T]:
        """Take only first n items.

        The parent stream is not drained past the n-th item.

        Args:
            n: Number of items to take.

        Returns:
            New stream with at most n items.
        """

        async def take_source() -> t.AsyncIterator[_T]:
            if n <= 0:
                return
            count = 0
            async for item in self:
                yield item
                count += 1
                if count >= n:
                    break

        return AsyncStream(take_source(), on_close=self.aclose)

    async def reduce(self, func: t.Callable[[_U, _T], _U], initial: _U) -> _U:
        """Reduce stream to single value, closing it afterwards.

        Args:
            func: Reducer function (accumulator, item) -> new_accumulator.
            initial: Initial accumulator value.

        Returns:
            Final accumulated value.
        """
        result = initial
        async with self:
            async for item in self:
                result = func(result, item)
        return result

    @property
    def is_completed(self) -> bool:
        """Check if stream has been fully consumed."""
        return self._completed

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def error(self) -> Exception | None:
        """Get exception if one occurred during consumption."""
        return self._error

    @property
    def items_count(self) -> int:
        """Get number of items consumed so far."""
        return self._count
