"""Publish posts use case."""

import logfire
from pydantic import BaseModel, Field

from tagboard.application.usecase.base import BaseUseCase
from tagboard.domain.error import DocumentStoreError
from tagboard.domain.model import InsertOutcome, Post
from tagboard.domain.service import PostService


class NewPost(BaseModel):
    """Post to publish."""

    title: str
    message: str
    tags: list[str] = Field(default_factory=list)


class RejectedPost(BaseModel):
    """Post the store refused."""

    index: int
    reason: str
    fields: list[str]


class PublishPostsRequest(BaseModel):
    """Publish posts request."""

    posts: list[NewPost] = Field(min_length=1)


class PublishPostsResponse(BaseModel):
    """Publish posts response.

    ``rejected`` is empty when every post was stored.
    """

    post_ids: list[str]
    rejected: list[RejectedPost]


class PublishPostsUseCase(BaseUseCase):
    """Use case for storing a batch of new posts."""

    def __init__(self, post_service: PostService) -> None:
        """Initialize publish posts use case.

        Args:
            post_service: Post domain service
        """
        self.post_service = post_service

    async def execute(self, request: PublishPostsRequest) -> PublishPostsResponse:
        """Execute publish flow.

        Posts are stored best-effort: a rejected post does not prevent the
        others from being stored. Errors without a partial outcome (such as
        connection failures) propagate.

        Args:
            request: Posts to publish

        Returns:
            Identifiers of stored posts and the rejected ones
        """
        posts = [
            Post(title=item.title, message=item.message, tags=item.tags)
            for item in request.posts
        ]

        try:
            outcome = await self.post_service.publish(posts)
        except DocumentStoreError as e:
            if e.outcome is None:
                raise
            logfire.warn(
                "Some posts were rejected",
                error=str(e),
                rejected=len(e.outcome.failures),
            )
            outcome = e.outcome

        return self._to_response(outcome)

    @staticmethod
    def _to_response(outcome: InsertOutcome) -> PublishPostsResponse:
        return PublishPostsResponse(
            post_ids=[str(post_id) for post_id in outcome.inserted_ids],
            rejected=[
                RejectedPost(
                    index=failure.index,
                    reason=failure.message,
                    fields=list(failure.fields),
                )
                for failure in outcome.failures
            ],
        )
