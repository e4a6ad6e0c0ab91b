"""Record streams backed by server cursors."""

from typing import Any, Awaitable, Callable, Mapping, Optional, Protocol, TypeVar

import logfire

from tagboard.domain.repository.stream import RecordStream
from tagboard.persistence.errors import mongo_errors

T = TypeVar("T")


class Cursor(Protocol):
    """The part of a driver cursor a stream relies on."""

    async def next(self) -> Mapping[str, Any]: ...

    async def close(self) -> None: ...


class CursorStream(RecordStream[T]):
    """RecordStream that decodes documents from a server cursor.

    The cursor is opened on the first advance (or on ``async with`` entry),
    so building a stream costs nothing until it is consumed. The cursor is
    closed on exhaustion and on any exception raised while advancing,
    including task cancellation.
    """

    def __init__(
        self,
        open_cursor: Callable[[], Awaitable[Cursor]],
        decode: Callable[[Mapping[str, Any]], T],
        operation: str,
    ) -> None:
        """Initialize stream.

        Args:
            open_cursor: Coroutine factory that issues the query
            decode: Converts one document into a record
            operation: Store operation name, used in error reports
        """
        self._open_cursor = open_cursor
        self._decode = decode
        self._operation = operation
        self._cursor: Optional[Cursor] = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def _ensure_cursor(self) -> Cursor:
        if self._cursor is None:
            with mongo_errors(self._operation):
                self._cursor = await self._open_cursor()
        return self._cursor

    async def __aenter__(self) -> "CursorStream[T]":
        if self._closed:
            return self
        try:
            await self._ensure_cursor()
        except BaseException:
            self._closed = True
            raise
        return self

    async def __anext__(self) -> T:
        if self._closed:
            raise StopAsyncIteration

        try:
            cursor = await self._ensure_cursor()
            with mongo_errors(self._operation):
                document = await cursor.next()
            return self._decode(document)
        except BaseException:
            # Exhaustion, decode failure, transport failure or cancellation
            await self._close_quietly()
            raise

    async def _close_quietly(self) -> None:
        """Close without replacing the exception already propagating."""
        try:
            await self.aclose()
        except Exception as e:
            logfire.warn(
                "Cursor close failed",
                operation=self._operation,
                error=str(e),
                error_type=type(e).__name__,
            )

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._cursor is not None:
            cursor, self._cursor = self._cursor, None
            with mongo_errors(self._operation):
                await cursor.close()
