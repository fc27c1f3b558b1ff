"""Field definitions."""

from typing import Any, Literal

from pydantic import BaseModel, Field as PydanticField

LanguageType = Literal["string", "integer", "float", "boolean", "array", "object"]

StorageType = Literal[
    "string",
    "text",
    "integer",
    "bigInteger",
    "smallInteger",
    "tinyInteger",
    "unsignedBigInteger",
    "foreignId",
    "boolean",
    "decimal",
    "float",
    "double",
    "date",
    "datetime",
    "timestamp",
    "time",
    "json",
    "uuid",
    "binary",
]

StringFormat = Literal["datetime", "date", "uuid", "email"]


class Field(BaseModel):
    """Field (attribute) of an entity.

    Carries three parallel descriptors inferred from a sample value or schema:
    the language-level type, the storage column type (with nullability and
    precision metadata) and an optional display cast.
    """

    name: str = PydanticField(..., description="Field name (snake_case)")
    sample_value: Any = PydanticField(None, description="Witness value for display or test data")
    language_type: LanguageType = PydanticField("string", description="Language-level type")
    storage_type: StorageType = PydanticField("string", description="Storage column type")
    nullable: bool = PydanticField(False, description="Whether the column accepts NULL")
    precision: int | None = PydanticField(None, description="Total digits for decimal columns")
    scale: int | None = PydanticField(None, description="Fractional digits for decimal columns")
    cast: str | None = PydanticField(None, description="Display cast (boolean, integer, decimal:2, ...)")
    format: StringFormat | None = PydanticField(None, description="Detected string flavor")

    @property
    def is_foreign_key(self) -> bool:
        """Whether the name follows the ``<entity>_id`` convention."""
        return self.name.endswith("_id") and self.name != "id"

    def same_type_as(self, other: "Field") -> bool:
        """Compare the inferred types, ignoring witness values."""
        return self.language_type == other.language_type and self.storage_type == other.storage_type
