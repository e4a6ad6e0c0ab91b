"""In-memory stand-in for an async MongoDB database.

Implements the slice of the async driver API that tagboard's persistence
code uses, raising the driver's own exceptions and returning its result
types. ``MongoConnection(InMemoryDatabase("name"))`` therefore runs the
real repositories without a server.
"""

from copy import deepcopy
from typing import Any, Iterable, Mapping, Optional, Sequence

import logfire
from bson import ObjectId
from pymongo.errors import (
    BulkWriteError,
    CollectionInvalid,
    DuplicateKeyError,
    OperationFailure,
    WriteError,
)
from pymongo.results import DeleteResult, UpdateResult

from tagboard.persistence.repository.inmemory.engine import (
    BAD_VALUE,
    apply_update,
    get_path,
    match_filter,
    run_pipeline,
    sort_documents,
)
from tagboard.persistence.repository.inmemory.validator import (
    check_schema,
    validation_failure,
)

DOCUMENT_VALIDATION_FAILURE = 121
DUPLICATE_KEY = 11000
INDEX_OPTIONS_CONFLICT = 85
INDEX_KEY_SPECS_CONFLICT = 86

VALIDATION_LEVELS = ("off", "moderate", "strict")
VALIDATION_ACTIONS = ("warn", "error")


class InMemoryCursor:
    """Async cursor over a materialized result list."""

    def __init__(self, documents: Iterable[Mapping[str, Any]]) -> None:
        self._documents = [deepcopy(dict(document)) for document in documents]
        self._position = 0
        self.alive = True

    def __aiter__(self) -> "InMemoryCursor":
        return self

    async def __anext__(self) -> dict:
        return await self.next()

    async def next(self) -> dict:
        if not self.alive or self._position >= len(self._documents):
            self.alive = False
            raise StopAsyncIteration
        document = self._documents[self._position]
        self._position += 1
        return document

    async def close(self) -> None:
        self.alive = False


class InMemoryCollection:
    """A collection with validator, indexes and update semantics."""

    def __init__(self, database: "InMemoryDatabase", name: str) -> None:
        self.database = database
        self.name = name
        self.reset()

    def reset(self) -> None:
        """Return to the state of a freshly created, unvalidated collection."""
        self.documents: list[dict] = []
        self.validator: Optional[dict] = None
        self.validation_level = "strict"
        self.validation_action = "error"
        self.indexes: dict[str, dict[str, Any]] = {
            "_id_": {"key": [("_id", 1)], "unique": True, "sparse": False}
        }

    @property
    def full_name(self) -> str:
        return f"{self.database.name}.{self.name}"

    # =========================
    # Validation
    # =========================
    def _violation(
        self, document: Mapping[str, Any], previous: Optional[Mapping[str, Any]] = None
    ) -> Optional[dict]:
        if self.validator is None or self.validation_level == "off":
            return None
        if (
            previous is not None
            and self.validation_level == "moderate"
            and validation_failure(previous, self.validator) is not None
        ):
            # Moderate level leaves already-invalid documents alone
            return None

        details = validation_failure(document, self.validator)
        if details is None:
            return None
        if self.validation_action == "warn":
            logfire.warn(
                "Document failed validation",
                collection=self.full_name,
                document_id=str(document.get("_id")),
            )
            return None
        return {"failingDocumentId": document.get("_id"), "details": details}

    def _duplicate(
        self, document: Mapping[str, Any], ignore: Optional[Mapping[str, Any]] = None
    ) -> Optional[str]:
        for name, index in self.indexes.items():
            if not index["unique"]:
                continue
            key = tuple(get_path(document, path) for path, _ in index["key"])
            if index["sparse"] and all(value is None for value in key):
                continue
            for existing in self.documents:
                if existing is ignore:
                    continue
                if tuple(get_path(existing, path) for path, _ in index["key"]) == key:
                    fields = ", ".join(
                        f"{path}: {value!r}"
                        for (path, _), value in zip(index["key"], key)
                    )
                    return (
                        f"E11000 duplicate key error collection: {self.full_name} "
                        f"index: {name} dup key: {{ {fields} }}"
                    )
        return None

    # =========================
    # Writes
    # =========================
    async def insert_many(
        self, documents: Iterable[Mapping[str, Any]], ordered: bool = True
    ):
        if isinstance(documents, Mapping) or not isinstance(documents, Iterable):
            raise TypeError("documents must be a non-empty list")
        batch = [dict(document) for document in documents]
        if not batch:
            raise TypeError("documents must be a non-empty list")

        self.database.touch(self.name)
        write_errors: list[dict[str, Any]] = []
        inserted = 0
        for index, document in enumerate(batch):
            document.setdefault("_id", ObjectId())
            stored = deepcopy(document)

            error: Optional[dict[str, Any]] = None
            duplicate = self._duplicate(stored)
            if duplicate is not None:
                error = {
                    "index": index,
                    "code": DUPLICATE_KEY,
                    "errmsg": duplicate,
                    "keyValue": {"_id": stored["_id"]},
                    "op": stored,
                }
            else:
                err_info = self._violation(stored)
                if err_info is not None:
                    error = {
                        "index": index,
                        "code": DOCUMENT_VALIDATION_FAILURE,
                        "errmsg": "Document failed validation",
                        "errInfo": err_info,
                        "op": stored,
                    }

            if error is not None:
                write_errors.append(error)
                if ordered:
                    break
                continue

            self.documents.append(stored)
            inserted += 1

        if write_errors:
            raise BulkWriteError(
                {
                    "writeErrors": write_errors,
                    "writeConcernErrors": [],
                    "nInserted": inserted,
                    "nUpserted": 0,
                    "nMatched": 0,
                    "nModified": 0,
                    "nRemoved": 0,
                    "upserted": [],
                }
            )

    async def update_many(
        self, filter: Mapping[str, Any], update: Mapping[str, Any]
    ) -> UpdateResult:
        if not update or not all(key.startswith("$") for key in update):
            raise ValueError("update only works with $ operators")

        matched = 0
        modified = 0
        for position, document in enumerate(list(self.documents)):
            if not match_filter(document, filter):
                continue
            matched += 1
            updated = apply_update(document, update)
            if updated == document:
                continue

            err_info = self._violation(updated, previous=document)
            if err_info is not None:
                raise WriteError(
                    "Document failed validation",
                    DOCUMENT_VALIDATION_FAILURE,
                    {
                        "index": 0,
                        "code": DOCUMENT_VALIDATION_FAILURE,
                        "errmsg": "Document failed validation",
                        "errInfo": err_info,
                    },
                )
            duplicate = self._duplicate(updated, ignore=document)
            if duplicate is not None:
                raise DuplicateKeyError(
                    duplicate,
                    DUPLICATE_KEY,
                    {"index": 0, "code": DUPLICATE_KEY, "errmsg": duplicate},
                )

            self.documents[position] = updated
            modified += 1

        return UpdateResult(
            {"n": matched, "nModified": modified, "ok": 1.0}, acknowledged=True
        )

    async def delete_many(self, filter: Mapping[str, Any]) -> DeleteResult:
        kept = []
        removed = 0
        for document in self.documents:
            if match_filter(document, filter):
                removed += 1
            else:
                kept.append(document)
        self.documents = kept
        return DeleteResult({"n": removed, "ok": 1.0}, acknowledged=True)

    # =========================
    # Reads
    # =========================
    def _select(self, filter: Optional[Mapping[str, Any]]) -> list[dict]:
        return [
            document
            for document in self.documents
            if match_filter(document, filter or {})
        ]

    def find(
        self,
        filter: Optional[Mapping[str, Any]] = None,
        sort: Optional[Sequence[tuple[str, int]]] = None,
        limit: int = 0,
        skip: int = 0,
    ) -> InMemoryCursor:
        documents = sort_documents(self._select(filter), sort)
        if skip:
            documents = documents[skip:]
        if limit:
            documents = documents[:limit]
        return InMemoryCursor(documents)

    async def find_one(self, filter: Optional[Mapping[str, Any]] = None) -> Optional[dict]:
        for document in self._select(filter):
            return deepcopy(document)
        return None

    async def count_documents(self, filter: Mapping[str, Any]) -> int:
        return len(self._select(filter))

    async def aggregate(self, pipeline: Sequence[Mapping[str, Any]]) -> InMemoryCursor:
        if not isinstance(pipeline, (list, tuple)):
            raise TypeError("pipeline must be a list")
        return InMemoryCursor(run_pipeline(self.documents, pipeline))

    # =========================
    # Indexes
    # =========================
    async def create_index(
        self,
        keys: Mapping[str, int] | Sequence[tuple[str, int]],
        name: Optional[str] = None,
        unique: bool = False,
        sparse: bool = False,
    ) -> str:
        key = list(keys.items()) if isinstance(keys, Mapping) else list(keys)
        if not key:
            raise OperationFailure("Index keys cannot be empty.", code=BAD_VALUE)
        name = name or "_".join(f"{path}_{direction}" for path, direction in key)
        spec = {"key": key, "unique": unique, "sparse": sparse}

        self.database.touch(self.name)
        existing = self.indexes.get(name)
        if existing is not None:
            if existing == spec:
                return name
            if existing["key"] == key:
                raise OperationFailure(
                    f"An existing index has the same name as the requested index. "
                    f"Requested index: {name}",
                    code=INDEX_OPTIONS_CONFLICT,
                )
            raise OperationFailure(
                f"An existing index has the same name as the requested index "
                f"but a different key. Requested index: {name}",
                code=INDEX_KEY_SPECS_CONFLICT,
            )
        for other_name, other in self.indexes.items():
            if other["key"] == key:
                raise OperationFailure(
                    f"Index already exists with a different name: {other_name}",
                    code=INDEX_OPTIONS_CONFLICT,
                )

        if unique:
            seen = set()
            for document in self.documents:
                value = tuple(repr(get_path(document, path)) for path, _ in key)
                if value in seen:
                    raise OperationFailure(
                        f"E11000 duplicate key error collection: {self.full_name} "
                        f"index: {name}",
                        code=DUPLICATE_KEY,
                    )
                seen.add(value)

        self.indexes[name] = spec
        return name


class InMemoryDatabase:
    """Database holding in-memory collections.

    Collections spring into existence on first write, like the server's
    implicit creation; ``create_collection`` creates one explicitly. Each
    name maps to one collection object, reset in place on drop and create,
    so handles taken earlier see the change.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._collections: dict[str, InMemoryCollection] = {}
        self._created: set[str] = set()

    def __getitem__(self, name: str) -> InMemoryCollection:
        if name not in self._collections:
            self._collections[name] = InMemoryCollection(self, name)
        return self._collections[name]

    def touch(self, name: str) -> None:
        """Mark a collection as existing."""
        self._created.add(name)

    async def create_collection(
        self,
        name: str,
        validator: Optional[Mapping[str, Any]] = None,
        validationLevel: str = "strict",
        validationAction: str = "error",
        **kwargs: Any,
    ) -> InMemoryCollection:
        if name in self._created:
            raise CollectionInvalid(f"collection {name} already exists")
        if validationLevel not in VALIDATION_LEVELS:
            raise OperationFailure(
                f"Invalid validationLevel: {validationLevel}", code=BAD_VALUE
            )
        if validationAction not in VALIDATION_ACTIONS:
            raise OperationFailure(
                f"Invalid validationAction: {validationAction}", code=BAD_VALUE
            )
        if validator is not None and "$jsonSchema" in validator:
            check_schema(validator["$jsonSchema"])

        collection = self[name]
        collection.reset()
        collection.validator = deepcopy(dict(validator)) if validator else None
        collection.validation_level = validationLevel
        collection.validation_action = validationAction
        self._created.add(name)
        return collection

    async def drop_collection(self, name: str) -> None:
        if name in self._collections:
            self._collections[name].reset()
        self._created.discard(name)

    async def list_collection_names(self) -> list[str]:
        return list(self._created)

    async def command(self, command: str | Mapping[str, Any], **kwargs: Any) -> dict:
        name = command if isinstance(command, str) else next(iter(command))
        if name == "ping":
            return {"ok": 1.0}
        raise OperationFailure(f"no such command: '{name}'", code=59)
