"""Builders for filter, mutation and pipeline documents.

The store interprets these documents; the domain only composes them.
"""

from typing import Any, Mapping, Sequence

from tagboard.domain.value import IndexDirection, PostId

Filter = Mapping[str, Any]
Mutation = Mapping[str, Any]
Pipeline = Sequence[Mapping[str, Any]]
SortSpec = Sequence[tuple[str, IndexDirection]]


def tag_filter(tag: str) -> dict[str, Any]:
    """Match posts whose ``tags`` array contains ``tag``."""
    return {"tags": tag}


def id_filter(post_id: PostId) -> dict[str, Any]:
    """Match the post with identifier ``post_id``."""
    return {"_id": post_id}


def set_fields(**fields: Any) -> dict[str, Any]:
    """Replace the given fields on every matched post."""
    return {"$set": fields}


def group_by_tag_pipeline() -> list[dict[str, Any]]:
    """Unwind ``tags`` and collect the distinct post ids per tag.

    Results decode into ``TagGroup``.
    """
    return [
        {"$unwind": "$tags"},
        {"$group": {"_id": "$tags", "post_ids": {"$addToSet": "$_id"}}},
    ]
