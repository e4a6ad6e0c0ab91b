"""Strongly typed identifiers for tagboard domain entities.

Identifiers are 12-byte ``bson.ObjectId`` values. Using NewType keeps post
identifiers distinct from arbitrary ObjectIds in signatures.
"""

from typing import NewType

from bson import ObjectId

PostId = NewType("PostId", ObjectId)


def new_post_id() -> PostId:
    """Generate a fresh post identifier."""
    return PostId(ObjectId())
