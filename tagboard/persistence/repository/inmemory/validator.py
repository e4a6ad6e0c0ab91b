"""Collection validator evaluation for the in-memory store.

Reports failures in the shape the server uses for ``errInfo.details``, so
error translation treats both stores alike.
"""

from datetime import datetime
from typing import Any, Mapping, Optional

from bson import ObjectId
from pymongo.errors import OperationFailure

from tagboard.persistence.repository.inmemory.engine import match_filter

BAD_VALUE = 2
FAILED_TO_PARSE = 9

KNOWN_KEYWORDS = {
    "additionalProperties",
    "allOf",
    "anyOf",
    "bsonType",
    "dependencies",
    "description",
    "enum",
    "exclusiveMaximum",
    "exclusiveMinimum",
    "items",
    "maxItems",
    "maxLength",
    "maxProperties",
    "maximum",
    "minItems",
    "minLength",
    "minProperties",
    "minimum",
    "multipleOf",
    "not",
    "oneOf",
    "pattern",
    "patternProperties",
    "properties",
    "required",
    "title",
    "type",
    "uniqueItems",
}

_NUMBER = (int, float)

_TYPE_CHECKS = {
    "string": lambda v: isinstance(v, str),
    "array": lambda v: isinstance(v, list),
    "object": lambda v: isinstance(v, Mapping),
    "objectId": lambda v: isinstance(v, ObjectId),
    "bool": lambda v: isinstance(v, bool),
    "boolean": lambda v: isinstance(v, bool),
    "int": lambda v: isinstance(v, int) and not isinstance(v, bool),
    "long": lambda v: isinstance(v, int) and not isinstance(v, bool),
    "integer": lambda v: isinstance(v, int) and not isinstance(v, bool),
    "double": lambda v: isinstance(v, float),
    "number": lambda v: isinstance(v, _NUMBER) and not isinstance(v, bool),
    "date": lambda v: isinstance(v, datetime),
    "null": lambda v: v is None,
}

_LENGTH_KEYWORDS = ("minLength", "maxLength", "minItems", "maxItems")


def check_schema(schema: Any) -> None:
    """Reject a ``$jsonSchema`` the server would refuse to parse.

    Raises:
        OperationFailure: With FailedToParse or BadValue, as the server does
    """
    if not isinstance(schema, Mapping):
        raise OperationFailure("$jsonSchema must be an object", code=FAILED_TO_PARSE)

    for keyword, value in schema.items():
        if keyword not in KNOWN_KEYWORDS:
            raise OperationFailure(
                f"Unknown $jsonSchema keyword: {keyword}", code=FAILED_TO_PARSE
            )
        if keyword in _LENGTH_KEYWORDS and (
            isinstance(value, bool) or not isinstance(value, int) or value < 0
        ):
            raise OperationFailure(
                f"$jsonSchema keyword '{keyword}' must be a non-negative integer",
                code=FAILED_TO_PARSE,
            )
        if keyword in ("bsonType", "type"):
            names = value if isinstance(value, list) else [value]
            for name in names:
                if name not in _TYPE_CHECKS:
                    raise OperationFailure(
                        f"Unknown type name alias: {name}", code=BAD_VALUE
                    )
        if keyword == "required" and (
            not isinstance(value, list)
            or not value
            or not all(isinstance(name, str) for name in value)
        ):
            raise OperationFailure(
                "$jsonSchema keyword 'required' must be a non-empty array of strings",
                code=FAILED_TO_PARSE,
            )
        if keyword == "properties":
            if not isinstance(value, Mapping):
                raise OperationFailure(
                    "$jsonSchema keyword 'properties' must be an object",
                    code=FAILED_TO_PARSE,
                )
            for sub_schema in value.values():
                check_schema(sub_schema)
        if keyword == "items" and isinstance(value, Mapping):
            check_schema(value)


def _type_matches(value: Any, expected: Any) -> bool:
    names = expected if isinstance(expected, list) else [expected]
    return any(_TYPE_CHECKS[name](value) for name in names)


def _reason(keyword: str, specified: Any, reason: str, value: Any) -> dict[str, Any]:
    return {
        "operatorName": keyword,
        "specifiedAs": {keyword: specified},
        "reason": reason,
        "consideredValue": value,
    }


def _value_reasons(value: Any, schema: Mapping[str, Any]) -> list[dict[str, Any]]:
    for keyword in ("bsonType", "type"):
        if keyword in schema and not _type_matches(value, schema[keyword]):
            return [_reason(keyword, schema[keyword], "type did not match", value)]

    reasons: list[dict[str, Any]] = []
    if "enum" in schema and value not in schema["enum"]:
        reasons.append(
            _reason("enum", schema["enum"], "value was not found in enum", value)
        )

    if isinstance(value, str):
        if "minLength" in schema and len(value) < schema["minLength"]:
            reasons.append(
                _reason("minLength", schema["minLength"], "specified string length was not satisfied", value)
            )
        if "maxLength" in schema and len(value) > schema["maxLength"]:
            reasons.append(
                _reason("maxLength", schema["maxLength"], "specified string length was not satisfied", value)
            )

    if isinstance(value, _NUMBER) and not isinstance(value, bool):
        if "minimum" in schema and value < schema["minimum"]:
            reasons.append(
                _reason("minimum", schema["minimum"], "comparison failed", value)
            )
        if "maximum" in schema and value > schema["maximum"]:
            reasons.append(
                _reason("maximum", schema["maximum"], "comparison failed", value)
            )

    if isinstance(value, list):
        if "minItems" in schema and len(value) < schema["minItems"]:
            reasons.append(
                _reason("minItems", schema["minItems"], "array did not match specified length", value)
            )
        if "maxItems" in schema and len(value) > schema["maxItems"]:
            reasons.append(
                _reason("maxItems", schema["maxItems"], "array did not match specified length", value)
            )
        items = schema.get("items")
        if isinstance(items, Mapping):
            for position, item in enumerate(value):
                item_reasons = _value_reasons(item, items)
                if item_reasons:
                    reasons.append(
                        {
                            "operatorName": "items",
                            "reason": "At least one item did not match the sub-schema",
                            "itemIndex": position,
                            "details": item_reasons,
                        }
                    )
                    break

    if isinstance(value, Mapping) and ("properties" in schema or "required" in schema):
        reasons.extend(_document_rules(value, schema))

    return reasons


def _document_rules(
    document: Mapping[str, Any], schema: Mapping[str, Any]
) -> list[dict[str, Any]]:
    rules: list[dict[str, Any]] = []

    required = schema.get("required") or []
    missing = [name for name in required if name not in document]
    if missing:
        rules.append(
            {
                "operatorName": "required",
                "specifiedAs": {"required": list(required)},
                "missingProperties": missing,
            }
        )

    unsatisfied = []
    for name, sub_schema in (schema.get("properties") or {}).items():
        if name not in document:
            continue
        reasons = _value_reasons(document[name], sub_schema)
        if reasons:
            unsatisfied.append({"propertyName": name, "details": reasons})
    if unsatisfied:
        rules.append(
            {"operatorName": "properties", "propertiesNotSatisfied": unsatisfied}
        )

    return rules


def validation_failure(
    document: Mapping[str, Any], validator: Optional[Mapping[str, Any]]
) -> Optional[dict[str, Any]]:
    """Describe why ``document`` fails ``validator``.

    Returns:
        The ``errInfo.details`` document, or None when the document is valid
    """
    if not validator:
        return None

    schema = validator.get("$jsonSchema")
    if schema is None:
        # Query-expression validator
        if match_filter(document, validator):
            return None
        return {"operatorName": "$expr", "specifiedAs": dict(validator)}

    rules = _document_rules(document, schema)
    if not rules:
        return None
    details: dict[str, Any] = {"operatorName": "$jsonSchema"}
    if "title" in schema:
        details["title"] = schema["title"]
    details["schemaRulesNotSatisfied"] = rules
    return details
