"""List posts by tag use case."""

import logfire
from pydantic import BaseModel

from tagboard.application.usecase.base import BaseUseCase
from tagboard.domain.service import PostService

from .items import PostItem


class ListPostsRequest(BaseModel):
    """List posts request."""

    tag: str


class ListPostsResponse(BaseModel):
    """List posts response."""

    tag: str
    posts: list[PostItem]


class ListPostsUseCase(BaseUseCase):
    """Use case for listing the posts carrying a tag."""

    def __init__(self, post_service: PostService) -> None:
        """Initialize list posts use case.

        Args:
            post_service: Post domain service
        """
        self.post_service = post_service

    async def execute(self, request: ListPostsRequest) -> ListPostsResponse:
        """Execute list posts flow.

        Args:
            request: Tag to filter by

        Returns:
            Matching posts
        """
        with logfire.span("list_posts.execute", tag=request.tag):
            posts = await self.post_service.find_by_tag(request.tag)
            return ListPostsResponse(
                tag=request.tag,
                posts=[PostItem.from_post(post) for post in posts],
            )
