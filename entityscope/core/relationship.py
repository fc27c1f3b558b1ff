"""Relationship definitions between entities."""

from typing import Literal

from pydantic import BaseModel, Field, model_validator


class Relationship(BaseModel):
    """Represents a detected link from one entity to another.

    Relationship types:
    - to_many: the related entity holds a foreign key pointing at this one
    - to_one: this entity holds a foreign key pointing at the related one
    """

    name: str = Field(description="Relation name as observed in the source")
    type: Literal["to_many", "to_one"] = Field(description="Type of relationship")
    related_entity: str = Field(description="Name of the related entity")
    accessor_name: str = Field(description="camelCase accessor used by generated code")
    foreign_key: str = Field(description="Foreign key column")
    local_key: str | None = Field(default=None, description="Key on this entity (to_many, defaults to id)")
    owner_key: str | None = Field(default=None, description="Key on the related entity (to_one, defaults to id)")

    @model_validator(mode="after")
    def _default_keys(self) -> "Relationship":
        if self.type == "to_many":
            if self.local_key is None:
                self.local_key = "id"
            self.owner_key = None
        else:
            if self.owner_key is None:
                self.owner_key = "id"
            self.local_key = None
        return self

    @property
    def is_to_many(self) -> bool:
        return self.type == "to_many"

    @property
    def is_to_one(self) -> bool:
        return self.type == "to_one"
