"""Unit tests for PostService."""

import logfire
import pytest

from tagboard.domain.error import AlreadyExistsError, ValidationError
from tagboard.domain.query import tag_filter
from tagboard.domain.repository import DocumentStore, PostRepository
from tagboard.domain.service import PostService
from tagboard.domain.value import new_post_id
from tests.conftest import make_post, sample_posts
from tests.harness import create_env_fixture

# Unit test fixture
unit_env = create_env_fixture()


class TestPrepareCollection:
    """Tests for prepare_collection method."""

    @pytest.mark.asyncio
    async def test_creates_collection_and_tag_index(self, unit_env):
        # Arrange
        post_service = await unit_env.get(PostService)
        store = await unit_env.get(DocumentStore)

        # Act
        index_name = await post_service.prepare_collection()

        # Assert
        assert index_name == "tags_1"
        assert await store.list_collection_names() == ["posts"]

    @pytest.mark.asyncio
    async def test_recreates_by_default(self, unit_env):
        # Arrange
        post_service = await unit_env.get(PostService)
        post_repo = await unit_env.get(PostRepository)
        await post_service.prepare_collection()
        await post_service.publish(sample_posts())

        # Act
        await post_service.prepare_collection()

        # Assert
        assert await post_repo.count() == 0

    @pytest.mark.asyncio
    async def test_stream_built_before_recreate_sees_empty_collection(self, unit_env):
        # Arrange
        post_service = await unit_env.get(PostService)
        post_repo = await unit_env.get(PostRepository)
        await post_service.prepare_collection()
        await post_service.publish(sample_posts())
        stream = post_repo.find(tag_filter("tag1"))

        # Act
        await post_service.prepare_collection(recreate=True)

        # Assert
        assert await stream.to_list() == []

    @pytest.mark.asyncio
    async def test_without_recreate_existing_collection_fails(self, unit_env):
        # Arrange
        post_service = await unit_env.get(PostService)
        await post_service.prepare_collection()

        # Act & Assert
        with pytest.raises(AlreadyExistsError):
            await post_service.prepare_collection(recreate=False)

    @pytest.mark.asyncio
    async def test_collection_enforces_post_bounds(self, unit_env):
        # Arrange
        post_service = await unit_env.get(PostService)
        await post_service.prepare_collection()

        # Act & Assert
        with pytest.raises(ValidationError):
            await post_service.publish([make_post(message="x" * 4001)])


class TestPublishAndQuery:
    """Tests for publishing and tag queries."""

    @pytest.mark.asyncio
    async def test_publish_then_find_by_tag(self, unit_env):
        # Arrange
        post_service = await unit_env.get(PostService)
        await post_service.prepare_collection()

        # Act
        outcome = await post_service.publish(sample_posts())
        tagged = await post_service.find_by_tag("tag3")

        # Assert
        assert len(outcome.inserted_ids) == 3
        assert [post.title for post in tagged] == ["Hello"]

    @pytest.mark.asyncio
    async def test_get_post(self, unit_env):
        # Arrange
        post_service = await unit_env.get(PostService)
        await post_service.prepare_collection()
        outcome = await post_service.publish([make_post()])

        # Act
        found = await post_service.get_post(outcome.inserted_ids[0])
        missing = await post_service.get_post(new_post_id())

        # Assert
        assert found == outcome.posts[0]
        assert missing is None

    @pytest.mark.asyncio
    async def test_missing_post_is_reported_once(self, unit_env, monkeypatch):
        # Arrange
        post_service = await unit_env.get(PostService)
        await post_service.prepare_collection()
        warnings = []
        monkeypatch.setattr(
            logfire, "warn", lambda message, **attributes: warnings.append(message)
        )

        # Act
        await post_service.get_post(new_post_id())

        # Assert
        assert warnings.count("Post not found") == 1

    @pytest.mark.asyncio
    async def test_retitle_by_tag(self, unit_env):
        # Arrange
        post_service = await unit_env.get(PostService)
        await post_service.prepare_collection()
        await post_service.publish(sample_posts())

        # Act
        outcome = await post_service.retitle_by_tag("tag2", "Updated title")

        # Assert
        assert outcome.matched_count == 1
        assert [p.title for p in await post_service.find_by_tag("tag2")] == [
            "Updated title"
        ]
        assert [p.title for p in await post_service.find_by_tag("tag3")] == ["Hello"]

    @pytest.mark.asyncio
    async def test_delete_by_tag(self, unit_env):
        # Arrange
        post_service = await unit_env.get(PostService)
        await post_service.prepare_collection()
        await post_service.publish(sample_posts())

        # Act
        outcome = await post_service.delete_by_tag("tag2")

        # Assert
        assert outcome.deleted_count == 1
        assert await post_service.find_by_tag("tag2") == []
        assert len(await post_service.find_by_tag("tag1")) == 2

    @pytest.mark.asyncio
    async def test_group_by_tag(self, unit_env):
        # Arrange
        post_service = await unit_env.get(PostService)
        await post_service.prepare_collection()
        outcome = await post_service.publish(sample_posts())

        # Act
        groups = {group.tag: group.post_ids for group in await post_service.group_by_tag()}

        # Assert
        assert set(groups) == {"tag1", "tag2", "tag3"}
        assert groups["tag1"] == frozenset(outcome.inserted_ids)
