"""Tag grouping produced by aggregation."""

from pydantic import Field

from tagboard.domain.model.common import DomainModel
from tagboard.domain.value import PostId


class TagGroup(DomainModel):
    """One distinct tag and the posts that reference it.

    Read-only and never persisted: built fresh from each aggregation.
    """

    tag: str
    post_ids: frozenset[PostId] = Field(default_factory=frozenset)
