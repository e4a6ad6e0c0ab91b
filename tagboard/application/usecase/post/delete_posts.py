"""Delete posts use case."""

from pydantic import BaseModel

from tagboard.application.usecase.base import BaseUseCase
from tagboard.domain.service import PostService


class DeletePostsRequest(BaseModel):
    """Delete posts request."""

    tag: str


class DeletePostsResponse(BaseModel):
    """Delete posts response."""

    deleted_count: int


class DeletePostsUseCase(BaseUseCase):
    """Use case for removing every post carrying a tag."""

    def __init__(self, post_service: PostService) -> None:
        self.post_service = post_service

    async def execute(self, request: DeletePostsRequest) -> DeletePostsResponse:
        outcome = await self.post_service.delete_by_tag(request.tag)
        return DeletePostsResponse(deleted_count=outcome.deleted_count)
