"""Post entity and the validator schema of the posts collection.

The model carries field types only. Length and count bounds live in
``POST_SCHEMA`` and are enforced by the store at write time, so a post that
violates them is rejected by the store instead of being truncated here.
"""

from typing import Optional

from pydantic import Field

from tagboard.domain.model.common import DomainModel
from tagboard.domain.value import (
    IndexDirection,
    IndexSpec,
    JsonSchema,
    PostId,
    PropertySchema,
)

TITLE_MAX_LENGTH = 300
MESSAGE_MAX_LENGTH = 4000
MAX_TAGS = 5
TAG_MIN_LENGTH = 3
TAG_MAX_LENGTH = 10


class Post(DomainModel):
    """A user post.

    ``id`` is None until the post is persisted; the repository assigns one
    on insert.
    """

    id: Optional[PostId] = None
    title: str
    message: str
    tags: list[str] = Field(default_factory=list)

    def with_id(self, post_id: PostId) -> "Post":
        """Return a copy of this post carrying ``post_id``."""
        return self.model_copy(update={"id": post_id})


POST_SCHEMA = JsonSchema(
    title="Tweet object validation",
    required=["title", "message", "tags"],
    properties={
        "title": PropertySchema(bson_type="string", max_length=TITLE_MAX_LENGTH),
        "message": PropertySchema(bson_type="string", max_length=MESSAGE_MAX_LENGTH),
        "tags": PropertySchema(
            bson_type="array",
            max_items=MAX_TAGS,
            items=PropertySchema(
                bson_type="string",
                min_length=TAG_MIN_LENGTH,
                max_length=TAG_MAX_LENGTH,
            ),
        ),
    },
)

TAGS_INDEX = IndexSpec(keys=[("tags", IndexDirection.ASCENDING)])
