"""Post domain service."""

from typing import Iterable

import logfire

from tagboard.config import PostCollectionSettings
from tagboard.domain.model import (
    POST_SCHEMA,
    TAGS_INDEX,
    DeleteOutcome,
    InsertOutcome,
    Post,
    TagGroup,
    UpdateOutcome,
)
from tagboard.domain.query import group_by_tag_pipeline, set_fields, tag_filter
from tagboard.domain.repository import DocumentStore, PostRepository
from tagboard.domain.value import PostId

from .base import Service


class PostService(Service):
    """Domain service for post operations."""

    def __init__(
        self,
        post_repository: PostRepository,
        document_store: DocumentStore,
        collection_settings: PostCollectionSettings,
    ) -> None:
        """Initialize post service.

        Args:
            post_repository: Post repository
            document_store: Store managing the posts collection lifecycle
            collection_settings: Posts collection configuration
        """
        self.post_repository = post_repository
        self.document_store = document_store
        self.collection_settings = collection_settings

    async def prepare_collection(self, recreate: bool | None = None) -> str:
        """Create the posts collection with its validator and tag index.

        Args:
            recreate: Drop an existing collection first (defaults to settings)

        Returns:
            Name of the tag index
        """
        settings = self.collection_settings
        if recreate is None:
            recreate = settings.recreate

        with logfire.span(
            "post_service.prepare_collection",
            collection=settings.name,
            recreate=recreate,
            validation_level=settings.validation_level.value,
            validation_action=settings.validation_action.value,
        ):
            await self.document_store.create_collection(
                settings.name,
                POST_SCHEMA,
                validation_level=settings.validation_level,
                validation_action=settings.validation_action,
                recreate=recreate,
            )
            index_name = await self.post_repository.create_index(TAGS_INDEX)
            logfire.info(
                "Posts collection ready", collection=settings.name, index=index_name
            )
            return index_name

    async def publish(self, posts: Iterable[Post]) -> InsertOutcome:
        """Store new posts.

        Args:
            posts: Posts to store

        Returns:
            Outcome listing the stored posts with their identifiers
        """
        posts = list(posts)
        with logfire.span("post_service.publish", count=len(posts)):
            outcome = await self.post_repository.insert_many(posts)
            logfire.info("Posts published", count=len(outcome.posts))
            return outcome

    async def get_post(self, post_id: PostId) -> Post | None:
        """Get a post by ID.

        Args:
            post_id: Post ID

        Returns:
            Post if found, None otherwise
        """
        with logfire.span("post_service.get_post", post_id=str(post_id)):
            post = await self.post_repository.find_by_id(post_id)

            if post:
                logfire.info("Post found", post_id=str(post_id), title=post.title)

            return post

    async def find_by_tag(self, tag: str) -> list[Post]:
        """Get every post carrying ``tag``.

        Args:
            tag: Tag name

        Returns:
            Matching posts, in store order
        """
        with logfire.span("post_service.find_by_tag", tag=tag):
            posts = await self.post_repository.find(tag_filter(tag)).to_list()
            logfire.info("Posts found by tag", tag=tag, count=len(posts))
            return posts

    async def retitle_by_tag(self, tag: str, title: str) -> UpdateOutcome:
        """Replace the title of every post carrying ``tag``.

        Args:
            tag: Tag name
            title: New title

        Returns:
            Matched and modified counts
        """
        with logfire.span("post_service.retitle_by_tag", tag=tag):
            outcome = await self.post_repository.update_many(
                tag_filter(tag), set_fields(title=title)
            )
            logfire.info(
                "Posts retitled",
                tag=tag,
                matched=outcome.matched_count,
                modified=outcome.modified_count,
            )
            return outcome

    async def delete_by_tag(self, tag: str) -> DeleteOutcome:
        """Delete every post carrying ``tag``.

        Args:
            tag: Tag name

        Returns:
            Number of deleted posts
        """
        with logfire.span("post_service.delete_by_tag", tag=tag):
            outcome = await self.post_repository.delete_many(tag_filter(tag))
            logfire.info("Posts deleted", tag=tag, count=outcome.deleted_count)
            return outcome

    async def group_by_tag(self) -> list[TagGroup]:
        """Group post identifiers by tag.

        Returns:
            One group per distinct tag, in store order
        """
        with logfire.span("post_service.group_by_tag"):
            groups = await self.post_repository.aggregate(
                group_by_tag_pipeline()
            ).to_list()
            logfire.info("Posts grouped by tag", groups=len(groups))
            return groups
