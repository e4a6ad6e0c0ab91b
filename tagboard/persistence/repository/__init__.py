"""MongoDB repository implementations."""

from tagboard.persistence.repository.post import MongoPostRepository
from tagboard.persistence.repository.store import MongoDocumentStore

__all__ = [
    "MongoDocumentStore",
    "MongoPostRepository",
]
