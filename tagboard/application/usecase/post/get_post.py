"""Get post use case."""

from typing import Optional

from bson import ObjectId
from pydantic import BaseModel, field_validator

from tagboard.application.usecase.base import BaseUseCase
from tagboard.domain.service import PostService
from tagboard.domain.value import PostId

from .items import PostItem


class GetPostRequest(BaseModel):
    """Get post request."""

    post_id: str  # 24-character hex ObjectId

    @field_validator("post_id")
    @classmethod
    def validate_post_id(cls, v: str) -> str:
        if not ObjectId.is_valid(v):
            raise ValueError(f"Invalid post id: {v!r}")
        return v


class GetPostUseCase(BaseUseCase):
    """Use case for retrieving a post by ID."""

    def __init__(self, post_service: PostService) -> None:
        self.post_service = post_service

    async def execute(self, request: GetPostRequest) -> Optional[PostItem]:
        """Execute get post flow.

        Returns:
            Post details if found, None otherwise
        """
        post = await self.post_service.get_post(PostId(ObjectId(request.post_id)))
        if post is None:
            return None
        return PostItem.from_post(post)
