"""Domain layer errors.

Every failure reported by the document store is a ``DocumentStoreError``.
Persistence implementations translate driver exceptions into these classes,
so callers never handle ``pymongo`` errors directly.
"""

from typing import TYPE_CHECKING, Optional, Sequence

if TYPE_CHECKING:
    from tagboard.domain.model.outcome import InsertOutcome


class DomainError(Exception):
    """Base domain error."""

    pass


class DocumentStoreError(DomainError):
    """Base error for document store operations."""

    def __init__(
        self,
        message: str,
        *,
        operation: Optional[str] = None,
        code: Optional[int] = None,
        outcome: Optional["InsertOutcome"] = None,
    ) -> None:
        """Initialize store error.

        Args:
            message: Human readable description
            operation: Store operation that failed (e.g. "insert_many")
            code: Server error code, when the server reported one
            outcome: Partial insert outcome, set by batch inserts only
        """
        super().__init__(message)
        self.operation = operation
        self.code = code
        self.outcome = outcome


class DatabaseConnectionError(DocumentStoreError):
    """Transport, server selection or authentication failure.

    Fatal to the current operation. Retrying is the caller's decision.
    """

    pass


class ValidationError(DocumentStoreError):
    """A write was rejected by the collection validator."""

    def __init__(self, message: str, *, fields: Sequence[str] = (), **kwargs) -> None:
        super().__init__(message, **kwargs)
        self.fields = tuple(fields)

    def __str__(self) -> str:
        message = super().__str__()
        if self.fields:
            return f"{message} (fields: {', '.join(self.fields)})"
        return message


class SchemaError(DocumentStoreError):
    """Raised when a collection schema descriptor is malformed."""

    pass


class AlreadyExistsError(DocumentStoreError):
    """Raised when a collection or a document key already exists."""

    pass


class IndexConflictError(DocumentStoreError):
    """Raised when an index declaration conflicts with an existing index."""

    pass


class DecodeError(DocumentStoreError):
    """Raised when a stored document does not match the expected record shape."""

    def __init__(self, resource: str, identifier: object, reason: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(
            f"Cannot decode {resource} {identifier}: {reason}", operation="decode"
        )
