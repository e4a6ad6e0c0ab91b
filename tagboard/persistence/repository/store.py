"""MongoDB implementation of the document store."""

from typing import Any, Mapping

import logfire
from pydantic import ValidationError as PydanticValidationError

from tagboard.domain.error import SchemaError
from tagboard.domain.repository import DocumentStore
from tagboard.domain.value import JsonSchema, ValidationAction, ValidationLevel
from tagboard.persistence.database import MongoConnection
from tagboard.persistence.errors import SCHEMA_ERROR_CODES, mongo_errors


def coerce_schema(schema: JsonSchema | Mapping[str, Any]) -> JsonSchema:
    """Accept a typed schema or a raw ``$jsonSchema`` mapping.

    Raises:
        SchemaError: If the mapping does not describe a valid schema
    """
    if isinstance(schema, JsonSchema):
        return schema
    if not isinstance(schema, Mapping):
        raise SchemaError(
            f"Schema must be a mapping, got {type(schema).__name__}",
            operation="create_collection",
        )
    try:
        return JsonSchema.model_validate(dict(schema))
    except PydanticValidationError as e:
        raise SchemaError(str(e), operation="create_collection") from e


class MongoDocumentStore(DocumentStore):
    """MongoDB implementation of DocumentStore."""

    def __init__(self, connection: MongoConnection) -> None:
        """Initialize store with a database connection.

        Args:
            connection: MongoDB connection
        """
        self.connection = connection

    async def ping(self) -> None:
        """Round-trip to the server."""
        with logfire.span("document_store.ping"):
            await self.connection.ping()

    async def list_collection_names(self) -> list[str]:
        """List collection names, sorted."""
        with mongo_errors("list_collection_names"):
            names = await self.connection.db.list_collection_names()
        return sorted(names)

    async def drop_collection(self, name: str) -> None:
        """Drop a collection (no-op when absent)."""
        with logfire.span("document_store.drop_collection", collection=name):
            with mongo_errors("drop_collection"):
                await self.connection.db.drop_collection(name)
            logfire.info("Collection dropped", collection=name)

    async def create_collection(
        self,
        name: str,
        schema: JsonSchema | Mapping[str, Any],
        validation_level: ValidationLevel = ValidationLevel.STRICT,
        validation_action: ValidationAction = ValidationAction.REJECT,
        recreate: bool = False,
    ) -> None:
        """Create a validated collection."""
        json_schema = coerce_schema(schema)

        with logfire.span(
            "document_store.create_collection",
            collection=name,
            validation_level=validation_level.value,
            validation_action=validation_action.value,
            recreate=recreate,
        ):
            if recreate:
                await self.drop_collection(name)

            with mongo_errors("create_collection", overrides=SCHEMA_ERROR_CODES):
                await self.connection.db.create_collection(
                    name,
                    validator=json_schema.to_validator(),
                    validationLevel=validation_level.value,
                    validationAction=validation_action.value,
                )
            logfire.info("Collection created", collection=name)
