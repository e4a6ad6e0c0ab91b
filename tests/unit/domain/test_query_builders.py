"""Unit tests for filter, mutation and pipeline builders."""

from tagboard.domain.query import (
    group_by_tag_pipeline,
    id_filter,
    set_fields,
    tag_filter,
)
from tagboard.domain.value import new_post_id


def test_tag_filter_matches_array_membership():
    assert tag_filter("tag1") == {"tags": "tag1"}


def test_id_filter():
    post_id = new_post_id()
    assert id_filter(post_id) == {"_id": post_id}


def test_set_fields_builds_set_operator():
    assert set_fields(title="Updated title") == {"$set": {"title": "Updated title"}}


def test_group_by_tag_pipeline():
    """Pipeline should unwind tags and collect distinct post ids per tag."""
    assert group_by_tag_pipeline() == [
        {"$unwind": "$tags"},
        {"$group": {"_id": "$tags", "post_ids": {"$addToSet": "$_id"}}},
    ]


def test_new_post_ids_are_distinct():
    assert new_post_id() != new_post_id()
