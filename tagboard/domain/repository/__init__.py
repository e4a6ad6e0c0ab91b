"""Repository interfaces for the tagboard domain.

Repository interfaces are defined in the domain layer (dependency inversion).
Implementations live in the persistence layer.
"""

from tagboard.domain.repository.post import PostRepository
from tagboard.domain.repository.store import DocumentStore
from tagboard.domain.repository.stream import RecordStream

__all__ = [
    "DocumentStore",
    "PostRepository",
    "RecordStream",
]
