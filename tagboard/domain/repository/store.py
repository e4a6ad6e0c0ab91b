"""Document store interface.

Collection lifecycle operations, at database level.
"""

from abc import ABC, abstractmethod
from typing import Any, Mapping

from tagboard.domain.value import JsonSchema, ValidationAction, ValidationLevel


class DocumentStore(ABC):
    """Lifecycle of collections in one database.

    Implementations live in the persistence layer.
    """

    @abstractmethod
    async def ping(self) -> None:
        """Round-trip to the server.

        Raises:
            DatabaseConnectionError: If the server cannot be reached
        """
        pass

    @abstractmethod
    async def list_collection_names(self) -> list[str]:
        """List collection names, sorted."""
        pass

    @abstractmethod
    async def drop_collection(self, name: str) -> None:
        """Drop a collection with its documents and indexes.

        Succeeds when the collection does not exist.

        Args:
            name: Collection name
        """
        pass

    @abstractmethod
    async def create_collection(
        self,
        name: str,
        schema: JsonSchema | Mapping[str, Any],
        validation_level: ValidationLevel = ValidationLevel.STRICT,
        validation_action: ValidationAction = ValidationAction.REJECT,
        recreate: bool = False,
    ) -> None:
        """Create a collection that enforces ``schema`` on writes.

        Args:
            name: Collection name
            schema: Validator schema, typed or as a raw ``$jsonSchema`` mapping
            validation_level: Which writes are validated
            validation_action: Whether violating writes are rejected or only logged
            recreate: Drop an existing collection of the same name first

        Raises:
            SchemaError: If the schema is malformed
            AlreadyExistsError: If the collection exists and recreate is False
        """
        pass
