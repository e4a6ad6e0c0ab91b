"""Unit tests for MongoDocumentStore over the in-memory database."""

import pytest

from tagboard.domain.error import AlreadyExistsError, SchemaError
from tagboard.domain.model import POST_SCHEMA
from tagboard.domain.repository import DocumentStore, PostRepository
from tagboard.domain.value import ValidationAction, ValidationLevel
from tests.conftest import make_post
from tests.harness import create_env_fixture

# Unit test fixture
unit_env = create_env_fixture()


class TestDropCollection:
    """Tests for drop_collection."""

    @pytest.mark.asyncio
    async def test_dropping_absent_collection_succeeds(self, unit_env):
        store = await unit_env.get(DocumentStore)

        await store.drop_collection("posts")
        await store.drop_collection("posts")

        assert await store.list_collection_names() == []

    @pytest.mark.asyncio
    async def test_drop_removes_documents(self, unit_env):
        # Arrange
        store = await unit_env.get(DocumentStore)
        repo = await unit_env.get(PostRepository)
        await store.create_collection("posts", POST_SCHEMA)
        await repo.insert_many([make_post()])

        # Act
        await store.drop_collection("posts")

        # Assert
        assert await repo.count() == 0
        assert "posts" not in await store.list_collection_names()


class TestCreateCollection:
    """Tests for create_collection."""

    @pytest.mark.asyncio
    async def test_creates_validated_collection(self, unit_env):
        # Arrange
        store = await unit_env.get(DocumentStore)

        # Act
        await store.create_collection("posts", POST_SCHEMA)

        # Assert
        assert await store.list_collection_names() == ["posts"]

    @pytest.mark.asyncio
    async def test_existing_collection(self, unit_env):
        # Arrange
        store = await unit_env.get(DocumentStore)
        await store.create_collection("posts", POST_SCHEMA)

        # Act & Assert
        with pytest.raises(AlreadyExistsError) as exc_info:
            await store.create_collection("posts", POST_SCHEMA)
        assert exc_info.value.operation == "create_collection"

    @pytest.mark.asyncio
    async def test_recreate_starts_empty(self, unit_env):
        # Arrange
        store = await unit_env.get(DocumentStore)
        repo = await unit_env.get(PostRepository)
        await store.create_collection("posts", POST_SCHEMA)
        await repo.insert_many([make_post()])

        # Act
        await store.create_collection("posts", POST_SCHEMA, recreate=True)

        # Assert
        assert await repo.count() == 0

    @pytest.mark.asyncio
    async def test_accepts_raw_schema_mapping(self, unit_env):
        # Arrange
        store = await unit_env.get(DocumentStore)
        repo = await unit_env.get(PostRepository)

        # Act
        await store.create_collection(
            "posts",
            {
                "required": ["title", "message", "tags"],
                "properties": {"title": {"bsonType": "string", "maxLength": 5}},
            },
        )

        # Assert
        await repo.insert_many([make_post("short")])
        assert await repo.count() == 1

    @pytest.mark.asyncio
    async def test_malformed_descriptor(self, unit_env):
        store = await unit_env.get(DocumentStore)

        with pytest.raises(SchemaError):
            await store.create_collection("posts", {"required": []})

        with pytest.raises(SchemaError):
            await store.create_collection("posts", ["title"])

    @pytest.mark.asyncio
    async def test_schema_rejected_by_store(self, unit_env):
        # Arrange
        store = await unit_env.get(DocumentStore)

        # Act & Assert
        with pytest.raises(SchemaError) as exc_info:
            await store.create_collection(
                "posts", {"properties": {"title": {"maxLenght": 300}}}
            )
        assert exc_info.value.code == 9
        assert await store.list_collection_names() == []

    @pytest.mark.asyncio
    async def test_warn_action_accepts_invalid_posts(self, unit_env):
        # Arrange
        store = await unit_env.get(DocumentStore)
        repo = await unit_env.get(PostRepository)
        await store.create_collection(
            "posts", POST_SCHEMA, validation_action=ValidationAction.WARN
        )

        # Act
        outcome = await repo.insert_many([make_post("x" * 301)])

        # Assert
        assert outcome.succeeded
        assert await repo.count() == 1

    @pytest.mark.asyncio
    async def test_validation_off(self, unit_env):
        store = await unit_env.get(DocumentStore)
        repo = await unit_env.get(PostRepository)
        await store.create_collection(
            "posts", POST_SCHEMA, validation_level=ValidationLevel.OFF
        )

        outcome = await repo.insert_many([make_post(tags=["a"])])

        assert outcome.succeeded


class TestPing:
    """Tests for ping."""

    @pytest.mark.asyncio
    async def test_ping(self, unit_env):
        store = await unit_env.get(DocumentStore)
        await store.ping()
