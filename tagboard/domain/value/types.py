"""Domain value objects for tagboard.

Value objects are immutable and defined by their values, not identity.
They describe collection configuration: validator schemas, validation
behaviour and index declarations.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import ConfigDict, Field, field_validator, model_validator

from tagboard.domain.value.common import ValueObject


class ValidationLevel(str, Enum):
    """Which writes the collection validator checks."""

    OFF = "off"  # No validation
    MODERATE = "moderate"  # Inserts and updates to already-valid documents
    STRICT = "strict"  # All inserts and updates


class ValidationAction(str, Enum):
    """What the store does with a write that fails validation.

    Values are the names the server understands.
    """

    WARN = "warn"  # Log the violation and accept the write
    REJECT = "error"  # Reject the write with an error

    @classmethod
    def _missing_(cls, value: object) -> Optional["ValidationAction"]:
        # "reject" is accepted as an alias of the server's "error"
        if isinstance(value, str) and value.lower() == "reject":
            return cls.REJECT
        return None


class IndexDirection(int, Enum):
    """Sort direction of an index key."""

    ASCENDING = 1
    DESCENDING = -1


class PropertySchema(ValueObject):
    """Constraints for a single document field.

    Recognised keys are typed; any other ``$jsonSchema`` keyword is kept
    as an extra field and forwarded to the store unchanged.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="allow",
        populate_by_name=True,
    )

    bson_type: Optional[str | list[str]] = Field(default=None, alias="bsonType")
    min_length: Optional[int] = Field(default=None, alias="minLength", ge=0)
    max_length: Optional[int] = Field(default=None, alias="maxLength", ge=0)
    min_items: Optional[int] = Field(default=None, alias="minItems", ge=0)
    max_items: Optional[int] = Field(default=None, alias="maxItems", ge=0)
    items: Optional["PropertySchema"] = None

    @model_validator(mode="after")
    def validate_bounds(self) -> "PropertySchema":
        """Validate that lower bounds do not exceed upper bounds."""
        if (
            self.min_length is not None
            and self.max_length is not None
            and self.min_length > self.max_length
        ):
            raise ValueError("minLength must not exceed maxLength")
        if (
            self.min_items is not None
            and self.max_items is not None
            and self.min_items > self.max_items
        ):
            raise ValueError("minItems must not exceed maxItems")
        return self


class JsonSchema(ValueObject):
    """A ``$jsonSchema`` validator descriptor.

    Example:
        JsonSchema(
            required=["title"],
            properties={"title": PropertySchema(bson_type="string", max_length=300)},
        )
    """

    model_config = ConfigDict(
        frozen=True,
        extra="allow",
        populate_by_name=True,
    )

    title: Optional[str] = None
    required: Optional[list[str]] = None
    properties: dict[str, PropertySchema] = Field(default_factory=dict)

    @field_validator("required")
    @classmethod
    def validate_required(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        """Validate required field names are non-empty and unique."""
        if v is None:
            return v
        if not v:
            raise ValueError("required must list at least one field")
        if len(set(v)) != len(v):
            raise ValueError("required must not repeat field names")
        return v

    def to_validator(self) -> dict[str, Any]:
        """Render the validator document sent to the store."""
        return {"$jsonSchema": self.model_dump(by_alias=True, exclude_none=True)}


class IndexSpec(ValueObject):
    """Declaration of a secondary index.

    ``keys`` is ordered: compound indexes sort by the first key, then the next.
    """

    keys: list[tuple[str, IndexDirection]] = Field(min_length=1)
    name: Optional[str] = None
    unique: bool = False
    sparse: bool = False

    @property
    def index_name(self) -> str:
        """Explicit name, or the store's default ``field_direction`` name."""
        if self.name:
            return self.name
        return "_".join(f"{field}_{direction.value}" for field, direction in self.keys)

    def key_document(self) -> list[tuple[str, int]]:
        """Keys in the driver's ``[(field, direction)]`` form."""
        return [(field, direction.value) for field, direction in self.keys]

    def options(self) -> dict[str, Any]:
        """Index options, omitting flags left at their defaults."""
        options: dict[str, Any] = {"name": self.index_name}
        if self.unique:
            options["unique"] = True
        if self.sparse:
            options["sparse"] = True
        return options
