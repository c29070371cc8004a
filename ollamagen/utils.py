from __future__ import annotations

import types
import typing as t

_K = t.TypeVar("_K")
_V = t.TypeVar("_V")


def drop_none(_dict: t.Mapping[_K, _V | None], /) -> dict[_K, _V]:
    """Return a copy of the mapping without the keys whose value is None.

    Mirrors how optional fields disappear from a JSON body when they are
    not set, instead of being sent as ``null``.

    Args:
        _dict: The mapping to filter.

    Returns:
        A new dictionary holding only the non-None entries, in order.
    """
    return {k: v for k, v in _dict.items() if v is not None}


class AsyncContextMixin:
    """A mixin class that provides asynchronous context manager
    functionality.

    Examples:
        ```python
        class MyAsyncResource(AsyncContextMixin):
            async def init(self) -> None:
                # Initialize resource
                pass

            async def close(self) -> None:
                # Clean up resource
                pass
        ```
    """

    async def init(self) -> None: ...
    async def close(self) -> None: ...

    async def __aenter__(self) -> t.Self:
        await self.init()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        traceback: types.TracebackType | None,
    ) -> t.Literal[False]:
        await self.close()
        return False
