"""Lazy record sequences returned by queries."""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

T = TypeVar("T")


class RecordStream(ABC, Generic[T]):
    """Forward-only, finite, asynchronous sequence of records.

    Each advance may wait on the network. The underlying server cursor is
    released when the stream is exhausted, when an advance fails, when the
    stream is closed, or when an ``async with`` block around it exits. Use
    ``async with`` when a consumer may stop early:

        async with repository.find(tag_filter("tag1")) as posts:
            async for post in posts:
                ...
    """

    @abstractmethod
    async def __anext__(self) -> T:
        """Return the next record or raise StopAsyncIteration."""
        pass

    @abstractmethod
    async def aclose(self) -> None:
        """Release the server cursor. Safe to call more than once."""
        pass

    def __aiter__(self) -> "RecordStream[T]":
        return self

    async def __aenter__(self) -> "RecordStream[T]":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def to_list(self) -> list[T]:
        """Drain the stream into a list."""
        async with self:
            return [record async for record in self]
