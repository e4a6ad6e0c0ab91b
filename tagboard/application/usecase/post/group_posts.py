"""Group posts by tag use case."""

from pydantic import BaseModel

from tagboard.application.usecase.base import BaseUseCase
from tagboard.domain.service import PostService


class TagGroupItem(BaseModel):
    """Tag group in response."""

    tag: str
    post_ids: list[str]  # Sorted for stable output


class GroupPostsRequest(BaseModel):
    """Group posts request."""

    pass


class GroupPostsResponse(BaseModel):
    """Group posts response."""

    groups: list[TagGroupItem]


class GroupPostsUseCase(BaseUseCase):
    """Use case for grouping post identifiers by tag."""

    def __init__(self, post_service: PostService) -> None:
        """Initialize group posts use case.

        Args:
            post_service: Post domain service
        """
        self.post_service = post_service

    async def execute(self, request: GroupPostsRequest) -> GroupPostsResponse:
        """Execute grouping flow.

        Args:
            request: Group posts request

        Returns:
            One group per tag, ordered by tag
        """
        groups = await self.post_service.group_by_tag()
        return GroupPostsResponse(
            groups=[
                TagGroupItem(
                    tag=group.tag,
                    post_ids=sorted(str(post_id) for post_id in group.post_ids),
                )
                for group in sorted(groups, key=lambda g: g.tag)
            ]
        )
