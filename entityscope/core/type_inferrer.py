"""Type inference from sample values.

Maps a raw decoded value (optionally with its field name) to three parallel
descriptors: language type, storage column type and display cast. The value
shape (scalar, list of scalars, list of objects, object) is classified once
per field and shared with relationship detection.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

from entityscope.core.field import Field, LanguageType, StorageType, StringFormat

# ISO 8601 date with a time part, optional fractional seconds and zone suffix
DATETIME_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?(Z|[+-]\d{2}:\d{2})?$")
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
UUID_PATTERN = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE)
EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")

LONG_TEXT_FIELDS = frozenset({"body", "content", "description", "text", "bio", "summary"})
MAX_STRING_LENGTH = 255

DECIMAL_PRECISION = 10
DECIMAL_SCALE = 2


class ValueShape(str, Enum):
    """Structural shape of a field value."""

    SCALAR = "scalar"
    SCALAR_LIST = "scalar_list"
    OBJECT_LIST = "object_list"
    OBJECT = "object"


@dataclass(frozen=True)
class StorageSpec:
    """Storage column type with its nullability and precision metadata."""

    type: StorageType
    nullable: bool = False
    precision: int | None = None
    scale: int | None = None


def is_object(value: Any) -> bool:
    """Whether ``value`` is a non-empty associative structure."""
    return isinstance(value, dict) and bool(value)


def classify_shape(value: Any) -> ValueShape:
    """Classify a value into one of the closed set of shapes.

    Empty lists and lists whose first element is not an object are lists of
    scalars: a single sample never proves a to-many relationship without an
    element to look at.
    """
    if is_object(value):
        return ValueShape.OBJECT
    if isinstance(value, (list, tuple)):
        if value and is_object(value[0]):
            return ValueShape.OBJECT_LIST
        return ValueShape.SCALAR_LIST
    return ValueShape.SCALAR


def decimal_cast(scale: int = DECIMAL_SCALE) -> str:
    """Cast identifier for a fixed-scale decimal."""
    return f"decimal:{scale}"


def is_key_name(field_name: str) -> bool:
    """Whether a field name denotes a primary or foreign key."""
    return field_name == "id" or field_name.endswith("_id")


def infer_string_format(value: str, field_name: str = "") -> StringFormat | None:
    """Detect the flavor of a string value."""
    if DATETIME_PATTERN.match(value):
        return "datetime"
    if DATE_PATTERN.match(value):
        return "date"
    if UUID_PATTERN.match(value):
        return "uuid"
    if EMAIL_PATTERN.match(value) or field_name == "email":
        return "email"
    return None


def infer_language_type(value: Any) -> LanguageType:
    """Infer the language-level type of a decoded value.

    ``None`` maps to string; nullability is reported by the storage type.
    """
    if value is None:
        return "string"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "float"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict):
        return "object"
    return "string"


def infer_storage_type(value: Any, field_name: str = "") -> StorageSpec:
    """Infer the storage column type of a decoded value.

    Args:
        value: Decoded sample value
        field_name: Field name used for key and long-text overrides

    Returns:
        Storage spec; ``None`` falls back to a nullable string
    """
    if value is None:
        return StorageSpec("string", nullable=True)
    if isinstance(value, bool):
        return StorageSpec("boolean")
    if isinstance(value, int):
        if is_key_name(field_name):
            return StorageSpec("unsignedBigInteger")
        return StorageSpec("integer")
    if isinstance(value, float):
        return StorageSpec("decimal", precision=DECIMAL_PRECISION, scale=DECIMAL_SCALE)
    if isinstance(value, str):
        return _infer_string_storage(value, field_name)
    if isinstance(value, (list, tuple, dict)):
        return StorageSpec("json")
    return StorageSpec("string")


def _infer_string_storage(value: str, field_name: str) -> StorageSpec:
    if DATETIME_PATTERN.match(value):
        return StorageSpec("timestamp", nullable=True)
    if DATE_PATTERN.match(value):
        return StorageSpec("date")
    if UUID_PATTERN.match(value):
        return StorageSpec("uuid")
    # Emails stay plain strings; the format flag feeds validation rules downstream
    if EMAIL_PATTERN.match(value) or field_name == "email":
        return StorageSpec("string")
    if field_name in LONG_TEXT_FIELDS or len(value) > MAX_STRING_LENGTH:
        return StorageSpec("text")
    return StorageSpec("string")


def infer_cast(value: Any, field_name: str = "") -> str | None:
    """Infer the display cast of a decoded value, or None."""
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return None if is_key_name(field_name) else "integer"
    if isinstance(value, float):
        return decimal_cast()
    if isinstance(value, str):
        if DATETIME_PATTERN.match(value):
            return "datetime"
        if DATE_PATTERN.match(value):
            return "date"
        return None
    if isinstance(value, (list, tuple)):
        return "array"
    return None


def field_from_value(name: str, value: Any) -> Field:
    """Build a field from a single sample value."""
    storage = infer_storage_type(value, name)
    return Field(
        name=name,
        sample_value=value,
        language_type=infer_language_type(value),
        storage_type=storage.type,
        nullable=storage.nullable,
        precision=storage.precision,
        scale=storage.scale,
        cast=infer_cast(value, name),
        format=infer_string_format(value, name) if isinstance(value, str) else None,
    )


def foreign_key_field(name: str, sample_value: Any = 1, nullable: bool = False) -> Field:
    """Build an unsigned big-integer foreign key field."""
    return Field(
        name=name,
        sample_value=sample_value,
        language_type="integer",
        storage_type="unsignedBigInteger",
        nullable=nullable,
    )
