"""Domain value objects for tagboard."""

from tagboard.domain.value.identifiers import PostId, new_post_id
from tagboard.domain.value.types import (
    IndexDirection,
    IndexSpec,
    JsonSchema,
    PropertySchema,
    ValidationAction,
    ValidationLevel,
)

__all__ = [
    # Identifiers
    "PostId",
    "new_post_id",
    # Types
    "IndexDirection",
    "IndexSpec",
    "JsonSchema",
    "PropertySchema",
    "ValidationAction",
    "ValidationLevel",
]
