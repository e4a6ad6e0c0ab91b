"""Post repository interface."""

from abc import ABC, abstractmethod
from typing import Iterable, Optional

from tagboard.domain.model import (
    DeleteOutcome,
    InsertOutcome,
    Post,
    TagGroup,
    UpdateOutcome,
)
from tagboard.domain.query import Filter, Mutation, Pipeline, SortSpec
from tagboard.domain.repository.stream import RecordStream
from tagboard.domain.value import IndexSpec, PostId


class PostRepository(ABC):
    """Repository for the posts collection.

    Translates between Post records and stored documents. Filters, mutations
    and pipelines are forwarded to the store without interpretation.
    """

    @abstractmethod
    async def create_index(self, spec: IndexSpec) -> str:
        """Declare an index.

        Redeclaring an identical index is a no-op.

        Args:
            spec: Index declaration

        Returns:
            The index name

        Raises:
            IndexConflictError: If a different index holds the name or key pattern
        """
        pass

    @abstractmethod
    async def insert_many(
        self, posts: Iterable[Post], ordered: bool = False
    ) -> InsertOutcome:
        """Insert posts, assigning identifiers to those without one.

        Unordered inserts continue past failing records, so every valid post
        is stored. When any record fails, the error of the first failure is
        raised with ``outcome`` holding the stored posts and the failures.

        Args:
            posts: Posts to insert
            ordered: Stop at the first failing record

        Returns:
            Outcome listing the stored posts

        Raises:
            ValidationError: If the validator rejected a record
            AlreadyExistsError: If a record's identifier is already taken
        """
        pass

    @abstractmethod
    def find(
        self,
        filter: Optional[Filter] = None,
        sort: Optional[SortSpec] = None,
        limit: int = 0,
        skip: int = 0,
    ) -> RecordStream[Post]:
        """Stream posts matching ``filter``.

        Nothing is sent to the store until the stream is first advanced.
        Order is unspecified unless ``sort`` is given.

        Args:
            filter: Filter document (None matches every post)
            sort: Ordered (field, direction) pairs
            limit: Maximum number of posts (0 for no limit)
            skip: Number of matching posts to skip
        """
        pass

    @abstractmethod
    async def find_by_id(self, post_id: PostId) -> Optional[Post]:
        """Find a post by ID.

        Args:
            post_id: The post's unique identifier

        Returns:
            The post if found, None otherwise
        """
        pass

    @abstractmethod
    async def count(self, filter: Optional[Filter] = None) -> int:
        """Count posts matching ``filter``."""
        pass

    @abstractmethod
    async def update_many(self, filter: Filter, mutation: Mutation) -> UpdateOutcome:
        """Apply ``mutation`` to every post matching ``filter``.

        Not transactional: posts updated before a failure stay updated.

        Raises:
            ValidationError: If the validator rejected an updated post
        """
        pass

    @abstractmethod
    async def delete_many(self, filter: Filter) -> DeleteOutcome:
        """Remove every post matching ``filter``.

        Matching nothing is not an error.
        """
        pass

    @abstractmethod
    def aggregate(self, pipeline: Pipeline) -> RecordStream[TagGroup]:
        """Run an aggregation pipeline whose results are tag groups.

        Raises (while streaming):
            DecodeError: If a result does not have the TagGroup shape
        """
        pass
