"""Mappers for converting between stored documents and domain models.

Domain models are immutable Pydantic models, so mapping is explicit in both
directions. Decoding never guesses: a document that does not fit the model
raises DecodeError.
"""

from typing import Any, Dict, Mapping

from pydantic import ValidationError as PydanticValidationError

from tagboard.domain.error import DecodeError
from tagboard.domain.model import Post, TagGroup


def post_to_document(post: Post) -> Dict[str, Any]:
    """Convert Post domain model to a stored document.

    Args:
        post: Post domain model

    Returns:
        Document suitable for insertion (``_id`` omitted when unset)
    """
    document: Dict[str, Any] = {}
    if post.id is not None:
        document["_id"] = post.id
    document["title"] = post.title
    document["message"] = post.message
    document["tags"] = list(post.tags)
    return document


def document_to_post(document: Mapping[str, Any]) -> Post:
    """Convert a stored document to Post domain model.

    Args:
        document: Document as returned by the store

    Returns:
        Post domain model

    Raises:
        DecodeError: If a field is missing or has the wrong type
    """
    identifier = document.get("_id")
    try:
        return Post(
            id=document["_id"],
            title=document["title"],
            message=document["message"],
            tags=document["tags"],
        )
    except KeyError as e:
        raise DecodeError("Post", identifier, f"missing field {e.args[0]!r}") from e
    except PydanticValidationError as e:
        raise DecodeError("Post", identifier, str(e)) from e


def document_to_tag_group(document: Mapping[str, Any]) -> TagGroup:
    """Convert an aggregation result to TagGroup.

    Expects ``{"_id": <tag>, "post_ids": [<post id>, ...]}``.

    Args:
        document: Aggregation result document

    Returns:
        TagGroup domain model

    Raises:
        DecodeError: If the result does not have the tag group shape
    """
    identifier = document.get("_id")
    try:
        post_ids = document["post_ids"]
        if not isinstance(post_ids, (list, tuple, set, frozenset)):
            raise DecodeError(
                "TagGroup", identifier, f"post_ids is {type(post_ids).__name__}"
            )
        return TagGroup(tag=document["_id"], post_ids=frozenset(post_ids))
    except KeyError as e:
        raise DecodeError(
            "TagGroup", identifier, f"missing field {e.args[0]!r}"
        ) from e
    except TypeError as e:  # unhashable post id
        raise DecodeError("TagGroup", identifier, str(e)) from e
    except PydanticValidationError as e:
        raise DecodeError("TagGroup", identifier, str(e)) from e
