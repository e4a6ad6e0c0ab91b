"""Post representations shared by post use cases."""

from pydantic import BaseModel

from tagboard.domain.model import Post


class PostItem(BaseModel):
    """Post in a response."""

    post_id: str
    title: str
    message: str
    tags: list[str]

    @classmethod
    def from_post(cls, post: Post) -> "PostItem":
        return cls(
            post_id=str(post.id),
            title=post.title,
            message=post.message,
            tags=list(post.tags),
        )
