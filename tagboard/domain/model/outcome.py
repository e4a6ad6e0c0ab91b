"""Results of write operations."""

from typing import Optional

from pydantic import Field

from tagboard.domain.model.common import DomainModel
from tagboard.domain.model.post import Post
from tagboard.domain.value import PostId


class WriteFailure(DomainModel):
    """A single record rejected during a batch write."""

    index: int  # Position of the record in the submitted batch
    code: Optional[int] = None
    message: str
    fields: tuple[str, ...] = ()  # Offending fields, when the store reports them


class InsertOutcome(DomainModel):
    """Outcome of a batch insert.

    ``posts`` holds the records that were stored, with their identifiers.
    """

    posts: list[Post] = Field(default_factory=list)
    failures: list[WriteFailure] = Field(default_factory=list)

    @property
    def inserted_ids(self) -> list[PostId]:
        return [post.id for post in self.posts if post.id is not None]

    @property
    def succeeded(self) -> bool:
        return not self.failures


class UpdateOutcome(DomainModel):
    """Matched and modified counts of an update.

    They differ when a matched record already held the new values.
    """

    matched_count: int = Field(ge=0)
    modified_count: int = Field(ge=0)


class DeleteOutcome(DomainModel):
    """Number of records removed by a delete."""

    deleted_count: int = Field(ge=0)
