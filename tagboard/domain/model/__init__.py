"""Domain model entities for tagboard."""

from tagboard.domain.model.outcome import (
    DeleteOutcome,
    InsertOutcome,
    UpdateOutcome,
    WriteFailure,
)
from tagboard.domain.model.post import POST_SCHEMA, TAGS_INDEX, Post
from tagboard.domain.model.tag import TagGroup

__all__ = [
    "Post",
    "POST_SCHEMA",
    "TAGS_INDEX",
    "TagGroup",
    "InsertOutcome",
    "UpdateOutcome",
    "DeleteOutcome",
    "WriteFailure",
]
