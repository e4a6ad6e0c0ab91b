"""Translation of driver errors into domain errors.

All ``pymongo`` exceptions raised by persistence code pass through
``translate``; nothing outside this package handles them.
"""

from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Optional

from pymongo.errors import (
    BulkWriteError,
    CollectionInvalid,
    ConnectionFailure,
    OperationFailure,
    PyMongoError,
)

from tagboard.domain.error import (
    AlreadyExistsError,
    DatabaseConnectionError,
    DocumentStoreError,
    IndexConflictError,
    SchemaError,
    ValidationError,
)
from tagboard.domain.model import InsertOutcome, WriteFailure

# Server error codes
BAD_VALUE = 2
FAILED_TO_PARSE = 9
AUTHENTICATION_FAILED = 18
NAMESPACE_EXISTS = 48
INDEX_OPTIONS_CONFLICT = 85
INDEX_KEY_SPECS_CONFLICT = 86
DOCUMENT_VALIDATION_FAILURE = 121
DUPLICATE_KEY = 11000

ErrorOverrides = Mapping[int, type[DocumentStoreError]]

# Parse failures while creating a collection come from its validator
SCHEMA_ERROR_CODES: ErrorOverrides = {
    BAD_VALUE: SchemaError,
    FAILED_TO_PARSE: SchemaError,
}

_ERRORS_BY_CODE: dict[int, type[DocumentStoreError]] = {
    AUTHENTICATION_FAILED: DatabaseConnectionError,
    NAMESPACE_EXISTS: AlreadyExistsError,
    INDEX_OPTIONS_CONFLICT: IndexConflictError,
    INDEX_KEY_SPECS_CONFLICT: IndexConflictError,
    DOCUMENT_VALIDATION_FAILURE: ValidationError,
    DUPLICATE_KEY: AlreadyExistsError,
    11001: AlreadyExistsError,  # Legacy duplicate key code
}


def offending_fields(err_info: Optional[Mapping[str, Any]]) -> tuple[str, ...]:
    """Collect field names named in a validation failure's ``errInfo``.

    The server nests ``propertyName`` and ``missingProperties`` entries at
    varying depths, so the whole structure is walked.
    """
    found: list[str] = []

    def walk(node: Any) -> None:
        if isinstance(node, Mapping):
            name = node.get("propertyName")
            if isinstance(name, str) and name not in found:
                found.append(name)
            for missing in node.get("missingProperties") or ():
                if isinstance(missing, str) and missing not in found:
                    found.append(missing)
            for value in node.values():
                walk(value)
        elif isinstance(node, list):
            for item in node:
                walk(item)

    walk(err_info)
    return tuple(found)


def write_failures(error: BulkWriteError) -> list[WriteFailure]:
    """Per-record failures reported by a batch write."""
    return [
        WriteFailure(
            index=entry.get("index", 0),
            code=entry.get("code"),
            message=entry.get("errmsg", ""),
            fields=offending_fields(entry.get("errInfo")),
        )
        for entry in error.details.get("writeErrors") or []
    ]


def _from_code(
    code: Optional[int],
    message: str,
    operation: str,
    err_info: Optional[Mapping[str, Any]],
    overrides: Optional[ErrorOverrides],
    outcome: Optional[InsertOutcome],
) -> DocumentStoreError:
    error_class = DocumentStoreError
    if code is not None:
        error_class = (overrides or {}).get(code) or _ERRORS_BY_CODE.get(
            code, DocumentStoreError
        )

    if error_class is ValidationError:
        return ValidationError(
            message,
            fields=offending_fields(err_info),
            operation=operation,
            code=code,
            outcome=outcome,
        )
    return error_class(message, operation=operation, code=code, outcome=outcome)


def translate(
    error: PyMongoError,
    operation: str,
    overrides: Optional[ErrorOverrides] = None,
    outcome: Optional[InsertOutcome] = None,
) -> DocumentStoreError:
    """Map a driver exception to the domain error taxonomy.

    Args:
        error: Exception raised by the driver
        operation: Store operation that raised it
        overrides: Operation-specific error classes keyed by server code
        outcome: Partial insert outcome to attach

    Returns:
        The domain error to raise in its place
    """
    if isinstance(error, ConnectionFailure):
        return DatabaseConnectionError(str(error), operation=operation)

    if isinstance(error, CollectionInvalid):
        return AlreadyExistsError(
            str(error), operation=operation, code=NAMESPACE_EXISTS
        )

    if isinstance(error, BulkWriteError):
        write_errors = error.details.get("writeErrors") or []
        if write_errors:
            first = write_errors[0]
            return _from_code(
                first.get("code"),
                first.get("errmsg", str(error)),
                operation,
                first.get("errInfo"),
                overrides,
                outcome,
            )
        return DocumentStoreError(
            str(error), operation=operation, code=error.code, outcome=outcome
        )

    if isinstance(error, OperationFailure):
        details = error.details or {}
        return _from_code(
            error.code,
            details.get("errmsg", str(error)),
            operation,
            details.get("errInfo"),
            overrides,
            outcome,
        )

    return DocumentStoreError(str(error), operation=operation, outcome=outcome)


@contextmanager
def mongo_errors(
    operation: str, overrides: Optional[ErrorOverrides] = None
) -> Iterator[None]:
    """Raise driver exceptions from the enclosed block as domain errors.

    Usage:
        with mongo_errors("delete_many"):
            result = await collection.delete_many(filter)
    """
    try:
        yield
    except PyMongoError as e:
        raise translate(e, operation, overrides=overrides) from e
