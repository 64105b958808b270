"""View configuration schemas.

A view declares an ordered tuple of ConfigField. Configuration values
arrive already materialized from persistence; this module only fills in
defaults and validates them.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Sequence


class FieldType(str, Enum):
    """Supported configuration field types."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    SELECT = "select"


@dataclass(frozen=True)
class ConfigField:
    """Schema for one configuration field.

    Attributes:
        key: Config dict key
        type: Field type
        label: Human-readable label
        default: Value used when unset
        required: The view cannot work without a value
        min_value: Minimum value (number fields)
        max_value: Maximum value (number fields)
        options: Allowed values (select fields)
        description: Help text
    """

    key: str
    type: FieldType
    label: str
    default: Any = None
    required: bool = False
    min_value: int | float | None = None
    max_value: int | float | None = None
    options: tuple[Any, ...] = ()
    description: str = ""

    def validate(self, value: Any) -> tuple[Any, str | None]:
        """Validate and coerce one value.

        Args:
            value: Raw value (None = unset)

        Returns:
            Tuple of (value to use, error message or None)
        """
        if value is None:
            return self.default, None

        if self.type == FieldType.STRING:
            return str(value), None

        if self.type == FieldType.NUMBER:
            if isinstance(value, bool):
                return None, f"{self.label} must be a number"
            try:
                number = float(value)
            except (TypeError, ValueError):
                return None, f"{self.label} must be a number"
            if number.is_integer() and not isinstance(value, float):
                number = int(number)
            if self.min_value is not None and number < self.min_value:
                return None, f"{self.label} must be >= {self.min_value}"
            if self.max_value is not None and number > self.max_value:
                return None, f"{self.label} must be <= {self.max_value}"
            return number, None

        if self.type == FieldType.BOOLEAN:
            if isinstance(value, bool):
                return value, None
            if value in ("true", 1):
                return True, None
            if value in ("false", 0):
                return False, None
            return None, f"{self.label} must be a boolean"

        if self.type == FieldType.SELECT:
            if value in self.options:
                return value, None
            return None, f"{self.label} must be one of: {', '.join(map(str, self.options))}"

        return value, None


def default_config(schema: Sequence[ConfigField]) -> dict[str, Any]:
    """Build a config dict holding every field's default."""
    return {field.key: field.default for field in schema}


def validate_config(
    schema: Sequence[ConfigField], values: dict[str, Any] | None
) -> tuple[dict[str, Any], dict[str, str]]:
    """Validate a config dict against a schema.

    Invalid values fall back to the field default and are reported.
    Keys not in the schema are passed through unchanged.

    Returns:
        Tuple of (validated config, errors keyed by field)
    """
    values = dict(values or {})
    validated = dict(values)
    errors: dict[str, str] = {}

    for field in schema:
        value, error = field.validate(values.get(field.key))
        if error:
            errors[field.key] = error
            validated[field.key] = field.default
        else:
            validated[field.key] = value

    return validated, errors


def missing_required(schema: Sequence[ConfigField], values: dict[str, Any]) -> list[str]:
    """Return the keys of required fields that are unset or empty."""
    return [
        field.key
        for field in schema
        if field.required and values.get(field.key) in (None, "")
    ]
