"""MongoDB implementation of Post repository."""

from typing import Iterable, Optional

import logfire
from pymongo.errors import BulkWriteError

from tagboard.domain.model import (
    DeleteOutcome,
    InsertOutcome,
    Post,
    TagGroup,
    UpdateOutcome,
)
from tagboard.domain.query import Filter, Mutation, Pipeline, SortSpec, id_filter
from tagboard.domain.repository import PostRepository, RecordStream
from tagboard.domain.value import IndexSpec, PostId, new_post_id
from tagboard.persistence.cursor import CursorStream
from tagboard.persistence.database import MongoConnection
from tagboard.persistence.errors import mongo_errors, translate, write_failures
from tagboard.persistence.mappers import (
    document_to_post,
    document_to_tag_group,
    post_to_document,
)


class MongoPostRepository(PostRepository):
    """MongoDB implementation of PostRepository."""

    def __init__(self, connection: MongoConnection, collection_name: str) -> None:
        """Initialize repository with a database connection.

        Args:
            connection: MongoDB connection
            collection_name: Name of the posts collection
        """
        self.connection = connection
        self.collection_name = collection_name

    @property
    def collection(self):
        return self.connection.collection(self.collection_name)

    async def create_index(self, spec: IndexSpec) -> str:
        """Declare an index (idempotent)."""
        with logfire.span(
            "post_repository.create_index",
            collection=self.collection_name,
            index=spec.index_name,
        ):
            with mongo_errors("create_index"):
                name = await self.collection.create_index(
                    spec.key_document(), **spec.options()
                )
            logfire.info("Index declared", index=name)
            return name

    async def insert_many(
        self, posts: Iterable[Post], ordered: bool = False
    ) -> InsertOutcome:
        """Insert posts, continuing past failures unless ordered."""
        # Identifiers are assigned here so stored posts can be reported
        # even when the batch partially fails
        prepared = [
            post if post.id is not None else post.with_id(new_post_id())
            for post in posts
        ]
        if not prepared:
            return InsertOutcome()

        with logfire.span(
            "post_repository.insert_many",
            collection=self.collection_name,
            count=len(prepared),
            ordered=ordered,
        ):
            documents = [post_to_document(post) for post in prepared]
            with mongo_errors("insert_many"):
                try:
                    await self.collection.insert_many(documents, ordered=ordered)
                except BulkWriteError as e:
                    failures = write_failures(e)
                    failed = {failure.index for failure in failures}
                    if ordered and failed:
                        stored = prepared[: min(failed)]
                    else:
                        stored = [
                            post
                            for index, post in enumerate(prepared)
                            if index not in failed
                        ]
                    outcome = InsertOutcome(posts=stored, failures=failures)
                    logfire.warn(
                        "Posts partially inserted",
                        inserted=len(stored),
                        failed=len(failures),
                    )
                    raise translate(e, "insert_many", outcome=outcome) from e

            logfire.info("Posts inserted", count=len(prepared))
            return InsertOutcome(posts=prepared)

    def find(
        self,
        filter: Optional[Filter] = None,
        sort: Optional[SortSpec] = None,
        limit: int = 0,
        skip: int = 0,
    ) -> RecordStream[Post]:
        """Stream posts matching a filter."""
        filter_document = dict(filter or {})
        sort_keys = [(field, int(direction)) for field, direction in sort] if sort else None

        async def open_cursor():
            logfire.debug(
                "Opening find cursor",
                collection=self.collection_name,
                filter=repr(filter_document),
            )
            return self.collection.find(
                filter_document, sort=sort_keys, limit=limit, skip=skip
            )

        return CursorStream(open_cursor, document_to_post, operation="find")

    async def find_by_id(self, post_id: PostId) -> Optional[Post]:
        """Find a post by ID."""
        with logfire.span("post_repository.find_by_id", post_id=str(post_id)):
            with mongo_errors("find_by_id"):
                document = await self.collection.find_one(id_filter(post_id))

            if document is None:
                logfire.warn("Post not found", post_id=str(post_id))
                return None

            return document_to_post(document)

    async def count(self, filter: Optional[Filter] = None) -> int:
        """Count posts matching a filter."""
        with mongo_errors("count"):
            return await self.collection.count_documents(dict(filter or {}))

    async def update_many(self, filter: Filter, mutation: Mutation) -> UpdateOutcome:
        """Apply a mutation to every matching post."""
        with logfire.span(
            "post_repository.update_many", collection=self.collection_name
        ):
            with mongo_errors("update_many"):
                result = await self.collection.update_many(dict(filter), dict(mutation))

            outcome = UpdateOutcome(
                matched_count=result.matched_count,
                modified_count=result.modified_count,
            )
            logfire.info(
                "Posts updated",
                matched=outcome.matched_count,
                modified=outcome.modified_count,
            )
            return outcome

    async def delete_many(self, filter: Filter) -> DeleteOutcome:
        """Remove every matching post."""
        with logfire.span(
            "post_repository.delete_many", collection=self.collection_name
        ):
            with mongo_errors("delete_many"):
                result = await self.collection.delete_many(dict(filter))

            logfire.info("Posts deleted", count=result.deleted_count)
            return DeleteOutcome(deleted_count=result.deleted_count)

    def aggregate(self, pipeline: Pipeline) -> RecordStream[TagGroup]:
        """Stream tag groups produced by an aggregation pipeline."""
        stages = [dict(stage) for stage in pipeline]

        async def open_cursor():
            logfire.debug(
                "Opening aggregation cursor",
                collection=self.collection_name,
                stages=len(stages),
            )
            return await self.collection.aggregate(stages)

        return CursorStream(open_cursor, document_to_tag_group, operation="aggregate")
