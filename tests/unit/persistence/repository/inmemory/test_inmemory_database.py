"""Unit tests for the in-memory database."""

import pytest
from pymongo.errors import BulkWriteError, CollectionInvalid, OperationFailure, WriteError

from tagboard.domain.model import POST_SCHEMA
from tagboard.persistence.repository.inmemory import InMemoryDatabase


async def posts_collection(db, **options):
    return await db.create_collection(
        "posts", validator=POST_SCHEMA.to_validator(), **options
    )


class TestCollections:
    """Tests for collection lifecycle."""

    @pytest.mark.asyncio
    async def test_create_and_list(self):
        # Arrange
        db = InMemoryDatabase("mydb")

        # Act
        await posts_collection(db)

        # Assert
        assert await db.list_collection_names() == ["posts"]

    @pytest.mark.asyncio
    async def test_create_existing_collection_fails(self):
        db = InMemoryDatabase("mydb")
        await posts_collection(db)

        with pytest.raises(CollectionInvalid):
            await posts_collection(db)

    @pytest.mark.asyncio
    async def test_drop_is_idempotent(self):
        db = InMemoryDatabase("mydb")
        await posts_collection(db)

        await db.drop_collection("posts")
        await db.drop_collection("posts")

        assert await db.list_collection_names() == []

    @pytest.mark.asyncio
    async def test_handles_see_drop_and_recreate(self):
        # Arrange
        db = InMemoryDatabase("mydb")
        await posts_collection(db)
        handle = db["posts"]
        await handle.insert_many([{"title": "Post 1", "message": "m", "tags": []}])

        # Act
        await db.drop_collection("posts")
        recreated = await db.create_collection("posts")

        # Assert
        assert recreated is handle
        assert handle.documents == []
        assert handle.validator is None
        assert list(handle.indexes) == ["_id_"]

    @pytest.mark.asyncio
    async def test_first_write_creates_collection(self):
        db = InMemoryDatabase("mydb")
        await db["notes"].insert_many([{"text": "hi"}])
        assert await db.list_collection_names() == ["notes"]

    @pytest.mark.asyncio
    async def test_invalid_validation_level(self):
        with pytest.raises(OperationFailure) as exc_info:
            await posts_collection(InMemoryDatabase("mydb"), validationLevel="loose")
        assert exc_info.value.code == 2

    @pytest.mark.asyncio
    async def test_ping(self):
        assert await InMemoryDatabase("mydb").command("ping") == {"ok": 1.0}


class TestWrites:
    """Tests for inserts, updates and deletes."""

    @pytest.mark.asyncio
    async def test_unordered_insert_reports_every_failure(self):
        # Arrange
        db = InMemoryDatabase("mydb")
        posts = await posts_collection(db)
        documents = [
            {"title": "ok", "message": "m", "tags": ["tag1"]},
            {"title": "x" * 301, "message": "m", "tags": ["tag1"]},
            {"title": "ok", "message": "m", "tags": ["a"]},
            {"title": "ok", "message": "m", "tags": ["tag2"]},
        ]

        # Act
        with pytest.raises(BulkWriteError) as exc_info:
            await posts.insert_many(documents, ordered=False)

        # Assert
        details = exc_info.value.details
        assert [e["index"] for e in details["writeErrors"]] == [1, 2]
        assert {e["code"] for e in details["writeErrors"]} == {121}
        assert details["nInserted"] == 2
        assert await posts.count_documents({}) == 2

    @pytest.mark.asyncio
    async def test_ordered_insert_stops_at_first_failure(self):
        # Arrange
        db = InMemoryDatabase("mydb")
        posts = await posts_collection(db)
        documents = [
            {"title": "x" * 301, "message": "m", "tags": ["tag1"]},
            {"title": "ok", "message": "m", "tags": ["tag1"]},
        ]

        # Act
        with pytest.raises(BulkWriteError) as exc_info:
            await posts.insert_many(documents, ordered=True)

        # Assert
        assert exc_info.value.details["nInserted"] == 0
        assert await posts.count_documents({}) == 0

    @pytest.mark.asyncio
    async def test_duplicate_id(self):
        db = InMemoryDatabase("mydb")
        await db["notes"].insert_many([{"_id": 1}])

        with pytest.raises(BulkWriteError) as exc_info:
            await db["notes"].insert_many([{"_id": 1}])
        assert exc_info.value.details["writeErrors"][0]["code"] == 11000

    @pytest.mark.asyncio
    async def test_empty_insert_is_rejected(self):
        with pytest.raises(TypeError):
            await InMemoryDatabase("mydb")["notes"].insert_many([])

    @pytest.mark.asyncio
    async def test_warn_action_accepts_invalid_documents(self):
        db = InMemoryDatabase("mydb")
        posts = await posts_collection(db, validationAction="warn")

        await posts.insert_many([{"title": "x" * 301, "message": "m", "tags": []}])

        assert await posts.count_documents({}) == 1

    @pytest.mark.asyncio
    async def test_update_counts_matched_and_modified(self):
        # Arrange
        db = InMemoryDatabase("mydb")
        notes = db["notes"]
        await notes.insert_many(
            [{"_id": 1, "tag": "a", "v": 1}, {"_id": 2, "tag": "a", "v": 2}]
        )

        # Act
        result = await notes.update_many({"tag": "a"}, {"$set": {"v": 2}})

        # Assert
        assert result.matched_count == 2
        assert result.modified_count == 1

    @pytest.mark.asyncio
    async def test_update_failing_validation(self):
        # Arrange
        db = InMemoryDatabase("mydb")
        posts = await posts_collection(db)
        await posts.insert_many([{"title": "ok", "message": "m", "tags": ["tag1"]}])

        # Act
        with pytest.raises(WriteError) as exc_info:
            await posts.update_many({}, {"$set": {"title": "x" * 301}})

        # Assert
        assert exc_info.value.code == 121
        assert (await posts.find_one({}))["title"] == "ok"

    @pytest.mark.asyncio
    async def test_moderate_level_skips_already_invalid_documents(self):
        # Arrange
        db = InMemoryDatabase("mydb")
        posts = await posts_collection(db, validationLevel="moderate")
        # Stored before the validator existed
        posts.documents.append({"_id": 1, "title": "x" * 301})

        # Act
        result = await posts.update_many({"_id": 1}, {"$set": {"title": "y" * 400}})

        # Assert
        assert result.modified_count == 1

    @pytest.mark.asyncio
    async def test_update_requires_operators(self):
        with pytest.raises(ValueError):
            await InMemoryDatabase("mydb")["notes"].update_many({}, {"title": "t"})

    @pytest.mark.asyncio
    async def test_delete(self):
        db = InMemoryDatabase("mydb")
        await db["notes"].insert_many([{"tag": "a"}, {"tag": "b"}])

        first = await db["notes"].delete_many({"tag": "a"})
        second = await db["notes"].delete_many({"tag": "a"})

        assert first.deleted_count == 1
        assert second.deleted_count == 0


class TestIndexes:
    """Tests for index declarations."""

    @pytest.mark.asyncio
    async def test_redeclaring_identical_index_is_noop(self):
        notes = InMemoryDatabase("mydb")["notes"]

        assert await notes.create_index([("tags", 1)], name="tags_1") == "tags_1"
        assert await notes.create_index([("tags", 1)], name="tags_1") == "tags_1"

    @pytest.mark.asyncio
    async def test_same_name_different_options_conflicts(self):
        notes = InMemoryDatabase("mydb")["notes"]
        await notes.create_index([("tags", 1)], name="tags_1")

        with pytest.raises(OperationFailure) as exc_info:
            await notes.create_index([("tags", 1)], name="tags_1", unique=True)
        assert exc_info.value.code == 85

    @pytest.mark.asyncio
    async def test_same_name_different_keys_conflicts(self):
        notes = InMemoryDatabase("mydb")["notes"]
        await notes.create_index([("tags", 1)], name="by_tag")

        with pytest.raises(OperationFailure) as exc_info:
            await notes.create_index([("title", 1)], name="by_tag")
        assert exc_info.value.code == 86

    @pytest.mark.asyncio
    async def test_unique_index_rejects_duplicates(self):
        notes = InMemoryDatabase("mydb")["notes"]
        await notes.create_index([("title", 1)], name="title_1", unique=True)
        await notes.insert_many([{"title": "a"}])

        with pytest.raises(BulkWriteError) as exc_info:
            await notes.insert_many([{"title": "a"}])
        assert exc_info.value.details["writeErrors"][0]["code"] == 11000


class TestReads:
    """Tests for cursors and aggregation."""

    @pytest.mark.asyncio
    async def test_find_with_sort_skip_limit(self):
        # Arrange
        notes = InMemoryDatabase("mydb")["notes"]
        await notes.insert_many([{"_id": i, "n": i} for i in range(5)])

        # Act
        cursor = notes.find({"n": {"$gte": 1}}, sort=[("n", -1)], skip=1, limit=2)

        # Assert
        assert [d["_id"] async for d in cursor] == [3, 2]
        assert not cursor.alive

    @pytest.mark.asyncio
    async def test_cursor_returns_copies(self):
        notes = InMemoryDatabase("mydb")["notes"]
        await notes.insert_many([{"_id": 1, "tags": ["a"]}])

        document = await notes.find({}).next()
        document["tags"].append("b")

        assert (await notes.find_one({"_id": 1}))["tags"] == ["a"]

    @pytest.mark.asyncio
    async def test_closed_cursor_stops(self):
        notes = InMemoryDatabase("mydb")["notes"]
        await notes.insert_many([{"_id": 1}, {"_id": 2}])
        cursor = notes.find({})

        await cursor.close()

        with pytest.raises(StopAsyncIteration):
            await cursor.next()

    @pytest.mark.asyncio
    async def test_aggregate(self):
        notes = InMemoryDatabase("mydb")["notes"]
        await notes.insert_many([{"_id": 1, "tags": ["a", "b"]}, {"_id": 2, "tags": ["a"]}])

        cursor = await notes.aggregate(
            [{"$unwind": "$tags"}, {"$group": {"_id": "$tags", "ids": {"$addToSet": "$_id"}}}]
        )

        groups = {d["_id"]: sorted(d["ids"]) async for d in cursor}
        assert groups == {"a": [1, 2], "b": [1]}
