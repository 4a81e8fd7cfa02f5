"""
Result streams handed out by the client façade.

A ``ResultStream`` is an async iterator over a source of raw GraphQL data
(normally a ``QuerySubscription``).  Each raw value is transformed, passed
to an optional success tap and yielded.  A failure from the source, or a
value the transform rejects, goes to the failure tap, closes the stream
and is re-raised to the consumer.

Live streams keep yielding every time the underlying query is refetched;
``first()`` takes a single value and unsubscribes.  Closing a stream stops
delivery but does not cancel a request already sent to the server.
"""
from typing import Any, AsyncIterator, Callable, Generic, TypeVar

T = TypeVar("T")


class ResultStream(Generic[T]):
    def __init__(
        self,
        source: AsyncIterator[Any],
        transform: Callable[[Any], T],
        on_next: Callable[[T], None] | None = None,
        on_error: Callable[[Exception], None] | None = None,
    ) -> None:
        self._source = source
        self._transform = transform
        self._on_next = on_next
        self._on_error = on_error
        self._closed = False

    def __aiter__(self) -> "ResultStream[T]":
        return self

    async def __anext__(self) -> T:
        if self._closed:
            raise StopAsyncIteration
        try:
            raw = await self._source.__anext__()
        except StopAsyncIteration:
            await self.aclose()
            raise
        except Exception as exc:
            await self._fail(exc)
            raise

        try:
            value = self._transform(raw)
        except Exception as exc:
            # A payload that cannot be transformed is a failed result too.
            await self._fail(exc)
            raise

        if self._on_next is not None:
            self._on_next(value)
        return value

    async def _fail(self, exc: Exception) -> None:
        if self._on_error is not None:
            self._on_error(exc)
        await self.aclose()

    async def first(self) -> T:
        """Return the next value, then unsubscribe."""
        try:
            return await self.__anext__()
        finally:
            await self.aclose()

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        aclose = getattr(self._source, "aclose", None)
        if aclose is not None:
            await aclose()

    async def __aenter__(self) -> "ResultStream[T]":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
