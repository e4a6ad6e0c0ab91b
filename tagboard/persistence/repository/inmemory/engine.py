"""Query, update and aggregation evaluation for the in-memory store.

Covers the operator subset tagboard issues, with MongoDB's matching rules
for arrays: a filter on an array field matches when the array itself or
any of its elements satisfies the condition. Unsupported operators raise
``OperationFailure`` with the server's BadValue code, as the server would.
"""

import operator
from copy import deepcopy
from datetime import datetime
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence

from bson import ObjectId
from pymongo.errors import OperationFailure, WriteError

BAD_VALUE = 2
IMMUTABLE_FIELD = 66

_COMPARISONS: dict[str, Callable[[Any, Any], bool]] = {
    "$gt": operator.gt,
    "$gte": operator.ge,
    "$lt": operator.lt,
    "$lte": operator.le,
}


# =========================
# Paths
# =========================
def resolve(document: Any, path: str) -> list[Any]:
    """All values reachable at a dotted path, traversing arrays."""
    values = [document]
    for part in path.split("."):
        found: list[Any] = []
        for value in values:
            if isinstance(value, Mapping):
                if part in value:
                    found.append(value[part])
            elif isinstance(value, list):
                if part.isdigit():
                    position = int(part)
                    if position < len(value):
                        found.append(value[position])
                else:
                    found.extend(
                        item[part]
                        for item in value
                        if isinstance(item, Mapping) and part in item
                    )
        values = found
    return values


def get_path(document: Mapping[str, Any], path: str, default: Any = None) -> Any:
    """Value at a dotted path through nested documents only."""
    value: Any = document
    for part in path.split("."):
        if not isinstance(value, Mapping) or part not in value:
            return default
        value = value[part]
    return value


def set_path(document: dict, path: str, value: Any) -> None:
    parts = path.split(".")
    for part in parts[:-1]:
        document = document.setdefault(part, {})
    document[parts[-1]] = value


def unset_path(document: dict, path: str) -> None:
    parts = path.split(".")
    for part in parts[:-1]:
        document = document.get(part)
        if not isinstance(document, dict):
            return
    document.pop(parts[-1], None)


# =========================
# Filters
# =========================
def _candidates(values: Iterable[Any]) -> list[Any]:
    """Values plus the elements of array values."""
    out: list[Any] = []
    for value in values:
        out.append(value)
        if isinstance(value, list):
            out.extend(value)
    return out


def _is_operator_document(condition: Any) -> bool:
    return (
        isinstance(condition, Mapping)
        and bool(condition)
        and all(str(key).startswith("$") for key in condition)
    )


def _equals(values: list[Any], target: Any) -> bool:
    if target is None and not values:
        return True
    return any(candidate == target for candidate in _candidates(values))


def _compare(candidate: Any, target: Any, op: str) -> bool:
    try:
        return _COMPARISONS[op](candidate, target)
    except TypeError:
        # Values of different types never compare
        return False


def _apply_operator(values: list[Any], op: str, arg: Any) -> bool:
    if op == "$eq":
        return _equals(values, arg)
    if op == "$ne":
        return not _equals(values, arg)
    if op in _COMPARISONS:
        return any(_compare(candidate, arg, op) for candidate in _candidates(values))
    if op == "$in":
        return any(_equals(values, item) for item in arg)
    if op == "$nin":
        return not any(_equals(values, item) for item in arg)
    if op == "$exists":
        return bool(values) == bool(arg)
    raise OperationFailure(f"unknown operator: {op}", code=BAD_VALUE)


def _match_field(values: list[Any], condition: Any) -> bool:
    if _is_operator_document(condition):
        return all(_apply_operator(values, op, arg) for op, arg in condition.items())
    return _equals(values, condition)


def match_filter(document: Mapping[str, Any], filter: Mapping[str, Any]) -> bool:
    """Whether ``document`` satisfies ``filter``."""
    for key, condition in filter.items():
        if key == "$and":
            if not all(match_filter(document, clause) for clause in condition):
                return False
        elif key == "$or":
            if not any(match_filter(document, clause) for clause in condition):
                return False
        elif key == "$nor":
            if any(match_filter(document, clause) for clause in condition):
                return False
        elif key.startswith("$"):
            raise OperationFailure(
                f"unknown top level operator: {key}", code=BAD_VALUE
            )
        elif not _match_field(resolve(document, key), condition):
            return False
    return True


# =========================
# Updates
# =========================
def apply_update(document: Mapping[str, Any], mutation: Mapping[str, Any]) -> dict:
    """Return a copy of ``document`` with update operators applied."""
    updated = deepcopy(dict(document))
    for op, changes in mutation.items():
        for path in changes:
            if path == "_id" or path.startswith("_id."):
                message = (
                    "Performing an update on the path '_id' would modify "
                    "the immutable field '_id'"
                )
                raise WriteError(
                    message,
                    IMMUTABLE_FIELD,
                    {"index": 0, "code": IMMUTABLE_FIELD, "errmsg": message},
                )

        if op == "$set":
            for path, value in changes.items():
                set_path(updated, path, deepcopy(value))
        elif op == "$unset":
            for path in changes:
                unset_path(updated, path)
        else:
            raise WriteError(
                f"Unknown modifier: {op}",
                BAD_VALUE,
                {"index": 0, "code": BAD_VALUE, "errmsg": f"Unknown modifier: {op}"},
            )
    return updated


# =========================
# Sorting
# =========================
def _type_rank(value: Any) -> int:
    # MongoDB's cross-type comparison order
    if value is None:
        return 0
    if isinstance(value, bool):
        return 6
    if isinstance(value, (int, float)):
        return 1
    if isinstance(value, str):
        return 2
    if isinstance(value, Mapping):
        return 3
    if isinstance(value, list):
        return 4
    if isinstance(value, ObjectId):
        return 5
    if isinstance(value, datetime):
        return 7
    return 8


def _sort_key(value: Any) -> tuple[int, Any]:
    rank = _type_rank(value)
    if rank in (0, 3, 8):
        return rank, repr(value)
    if rank == 4:
        return rank, [_sort_key(item) for item in value]
    return rank, value


def sort_documents(
    documents: list[dict], sort: Optional[Sequence[tuple[str, int]] | Mapping[str, int]]
) -> list[dict]:
    """Sort in place by ordered (path, direction) keys and return the list."""
    if not sort:
        return documents
    keys = list(sort.items()) if isinstance(sort, Mapping) else list(sort)
    for path, direction in reversed(keys):
        documents.sort(
            key=lambda d: _sort_key(get_path(d, path)), reverse=int(direction) < 0
        )
    return documents


# =========================
# Aggregation
# =========================
def evaluate(document: Mapping[str, Any], expression: Any) -> Any:
    """Evaluate a field path (``"$field"``), sub-document or literal."""
    if isinstance(expression, str) and expression.startswith("$"):
        return get_path(document, expression[1:])
    if isinstance(expression, Mapping) and not _is_operator_document(expression):
        return {key: evaluate(document, value) for key, value in expression.items()}
    return expression


def _freeze(value: Any) -> Any:
    """Hashable stand-in for a group key."""
    if isinstance(value, Mapping):
        return tuple((key, _freeze(item)) for key, item in value.items())
    if isinstance(value, list):
        return tuple(_freeze(item) for item in value)
    return value


def _unwind(documents: list[dict], spec: Any) -> list[dict]:
    if isinstance(spec, Mapping):
        path = spec.get("path", "")
        preserve = bool(spec.get("preserveNullAndEmptyArrays", False))
    else:
        path, preserve = spec, False
    if not isinstance(path, str) or not path.startswith("$"):
        raise OperationFailure(
            "$unwind path must be prefixed by a '$'", code=BAD_VALUE
        )
    field = path[1:]

    out: list[dict] = []
    for document in documents:
        value = get_path(document, field)
        if isinstance(value, list) and value:
            for item in value:
                unwound = deepcopy(document)
                set_path(unwound, field, item)
                out.append(unwound)
        elif isinstance(value, list) or value is None:
            if preserve:
                out.append(deepcopy(document))
        else:
            # Non-array values unwind to themselves
            out.append(deepcopy(document))
    return out


_ACCUMULATORS = {"$addToSet"}


def _group(documents: list[dict], spec: Mapping[str, Any]) -> list[dict]:
    if "_id" not in spec:
        raise OperationFailure(
            "a group specification must include an _id", code=BAD_VALUE
        )
    accumulators: dict[str, Any] = {}
    for field, accumulator in spec.items():
        if field == "_id":
            continue
        if not isinstance(accumulator, Mapping) or len(accumulator) != 1:
            raise OperationFailure(
                f"The field '{field}' must be an accumulator object", code=BAD_VALUE
            )
        op, argument = next(iter(accumulator.items()))
        if op not in _ACCUMULATORS:
            raise OperationFailure(
                f"unknown group operator '{op}'", code=BAD_VALUE
            )
        accumulators[field] = argument

    groups: dict[Any, dict[str, Any]] = {}
    for document in documents:
        key = evaluate(document, spec["_id"])
        frozen = _freeze(key)
        if frozen not in groups:
            groups[frozen] = {"_id": key}
        group = groups[frozen]

        for field, argument in accumulators.items():
            value = evaluate(document, argument)
            bucket = group.setdefault(field, [])
            if value is not None and value not in bucket:
                bucket.append(value)
    return list(groups.values())


def run_pipeline(
    documents: Iterable[Mapping[str, Any]], pipeline: Sequence[Mapping[str, Any]]
) -> list[dict]:
    """Apply aggregation stages in order."""
    out = [deepcopy(dict(document)) for document in documents]
    for stage in pipeline:
        if not isinstance(stage, Mapping) or len(stage) != 1:
            raise OperationFailure(
                "A pipeline stage specification object must contain exactly one field.",
                code=BAD_VALUE,
            )
        op, spec = next(iter(stage.items()))
        if op == "$match":
            out = [document for document in out if match_filter(document, spec)]
        elif op == "$unwind":
            out = _unwind(out, spec)
        elif op == "$group":
            out = _group(out, spec)
        elif op == "$sort":
            out = sort_documents(out, spec)
        elif op == "$skip":
            out = out[spec:]
        elif op == "$limit":
            out = out[:spec]
        else:
            raise OperationFailure(
                f"Unrecognized pipeline stage name: '{op}'", code=BAD_VALUE
            )
    return out
