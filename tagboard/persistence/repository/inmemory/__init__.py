"""In-memory database for testing."""

from .database import InMemoryCollection, InMemoryCursor, InMemoryDatabase

__all__ = [
    "InMemoryCollection",
    "InMemoryCursor",
    "InMemoryDatabase",
]
