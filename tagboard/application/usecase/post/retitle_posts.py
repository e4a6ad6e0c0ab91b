"""Retitle posts use case."""

from pydantic import BaseModel

from tagboard.application.usecase.base import BaseUseCase
from tagboard.domain.service import PostService


class RetitlePostsRequest(BaseModel):
    """Retitle posts request."""

    tag: str
    title: str


class RetitlePostsResponse(BaseModel):
    """Retitle posts response."""

    matched_count: int
    modified_count: int


class RetitlePostsUseCase(BaseUseCase):
    """Use case for replacing the title of every post carrying a tag."""

    def __init__(self, post_service: PostService) -> None:
        """Initialize retitle posts use case.

        Args:
            post_service: Post domain service
        """
        self.post_service = post_service

    async def execute(self, request: RetitlePostsRequest) -> RetitlePostsResponse:
        """Execute retitle flow.

        Args:
            request: Tag and new title

        Returns:
            Matched and modified counts
        """
        outcome = await self.post_service.retitle_by_tag(request.tag, request.title)
        return RetitlePostsResponse(
            matched_count=outcome.matched_count,
            modified_count=outcome.modified_count,
        )
