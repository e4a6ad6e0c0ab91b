"""Unit tests for collection configuration value objects."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from tagboard.config import Settings
from tagboard.domain.model import POST_SCHEMA, TAGS_INDEX
from tagboard.domain.value import (
    IndexDirection,
    IndexSpec,
    JsonSchema,
    PropertySchema,
    ValidationAction,
    ValidationLevel,
)


class TestJsonSchema:
    """Tests for the $jsonSchema descriptor."""

    def test_post_schema_renders_server_validator(self):
        """The posts validator should use the server's keyword names."""
        # Act
        validator = POST_SCHEMA.to_validator()

        # Assert
        assert validator == {
            "$jsonSchema": {
                "title": "Tweet object validation",
                "required": ["title", "message", "tags"],
                "properties": {
                    "title": {"bsonType": "string", "maxLength": 300},
                    "message": {"bsonType": "string", "maxLength": 4000},
                    "tags": {
                        "bsonType": "array",
                        "maxItems": 5,
                        "items": {
                            "bsonType": "string",
                            "minLength": 3,
                            "maxLength": 10,
                        },
                    },
                },
            }
        }

    def test_schema_accepts_server_keyword_names(self):
        """A raw schema mapping should validate into the typed descriptor."""
        # Act
        schema = JsonSchema.model_validate(
            {
                "required": ["name"],
                "properties": {"name": {"bsonType": "string", "minLength": 1}},
            }
        )

        # Assert
        assert schema.properties["name"].bson_type == "string"
        assert schema.properties["name"].min_length == 1

    def test_unknown_keywords_are_forwarded(self):
        """Keywords without a typed field should pass through unchanged."""
        # Arrange
        schema = JsonSchema.model_validate(
            {
                "properties": {
                    "status": {"bsonType": "string", "enum": ["draft", "live"]}
                },
                "additionalProperties": True,
            }
        )

        # Act
        rendered = schema.to_validator()["$jsonSchema"]

        # Assert
        assert rendered["additionalProperties"] is True
        assert rendered["properties"]["status"]["enum"] == ["draft", "live"]

    def test_empty_required_list_is_rejected(self):
        """An empty required list is not a valid schema."""
        with pytest.raises(PydanticValidationError, match="at least one field"):
            JsonSchema(required=[])

    def test_repeated_required_field_is_rejected(self):
        """Required field names must be unique."""
        with pytest.raises(PydanticValidationError, match="must not repeat"):
            JsonSchema(required=["title", "title"])

    def test_inverted_length_bounds_are_rejected(self):
        """minLength greater than maxLength should be rejected."""
        with pytest.raises(PydanticValidationError, match="minLength"):
            PropertySchema(bson_type="string", min_length=10, max_length=3)

    def test_negative_bound_is_rejected(self):
        """Length bounds cannot be negative."""
        with pytest.raises(PydanticValidationError):
            PropertySchema(bson_type="array", max_items=-1)


class TestIndexSpec:
    """Tests for index declarations."""

    def test_default_name_follows_server_convention(self):
        """Unnamed indexes should be named field_direction."""
        # Arrange
        spec = IndexSpec(
            keys=[
                ("tags", IndexDirection.ASCENDING),
                ("title", IndexDirection.DESCENDING),
            ]
        )

        # Assert
        assert spec.index_name == "tags_1_title_-1"
        assert spec.key_document() == [("tags", 1), ("title", -1)]

    def test_tags_index(self):
        """The posts tag index should be a single ascending key."""
        assert TAGS_INDEX.index_name == "tags_1"
        assert TAGS_INDEX.options() == {"name": "tags_1"}

    def test_options_include_only_set_flags(self):
        """Unique and sparse flags should be sent only when set."""
        # Arrange
        spec = IndexSpec(
            keys=[("title", IndexDirection.ASCENDING)], name="by_title", unique=True
        )

        # Assert
        assert spec.options() == {"name": "by_title", "unique": True}

    def test_index_requires_a_key(self):
        """An index without keys is invalid."""
        with pytest.raises(PydanticValidationError):
            IndexSpec(keys=[])


class TestValidationSettings:
    """Tests for validation level and action values."""

    def test_reject_action_uses_server_name(self):
        """Rejecting writes is called 'error' by the server."""
        assert ValidationAction.REJECT.value == "error"
        assert ValidationAction.WARN.value == "warn"

    def test_reject_is_accepted_as_an_alias(self):
        assert ValidationAction("reject") is ValidationAction.REJECT
        assert ValidationAction("error") is ValidationAction.REJECT

    def test_unknown_action_is_rejected(self):
        with pytest.raises(ValueError):
            ValidationAction("ignore")

    def test_settings_accept_reject_from_environment(self, monkeypatch):
        # Arrange
        monkeypatch.setenv("POSTS__VALIDATION_ACTION", "reject")

        # Act
        settings = Settings()

        # Assert
        assert settings.posts.validation_action is ValidationAction.REJECT

    def test_levels(self):
        assert [level.value for level in ValidationLevel] == [
            "off",
            "moderate",
            "strict",
        ]
