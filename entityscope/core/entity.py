"""Entity definitions."""

from dataclasses import dataclass

from pydantic import BaseModel, Field as PydanticField, computed_field

from entityscope.core.field import Field
from entityscope.core.relationship import Relationship

# Field names that mark an entity as owned by a user (drives authorization templates downstream)
AUTHOR_LINK_FIELDS = frozenset({"user_id", "author_id", "owner_id"})


@dataclass(frozen=True)
class FieldConflict:
    """Two observations of the same field disagreed on its type; the first one was kept."""

    entity: str
    field: str
    kept: str
    rejected: str


class Index(BaseModel):
    """Index recorded during database introspection."""

    name: str = PydanticField(..., description="Index name")
    columns: list[str] = PydanticField(default_factory=list, description="Indexed columns")
    unique: bool = PydanticField(False, description="Unique index")
    primary: bool = PydanticField(False, description="Primary key index")


class Entity(BaseModel):
    """Entity (record type) definition.

    Entities are the nodes of the entity graph. Field order follows the order
    in which fields were first observed, which keeps generated output stable.
    """

    name: str = PydanticField(..., description="Singular PascalCase name, unique in the graph")
    table: str = PydanticField(..., description="Plural snake_case storage table")
    primary_key: str = PydanticField(default="id", description="Primary key column")
    fields: dict[str, Field] = PydanticField(default_factory=dict, description="Fields by name, in observation order")
    relationships: dict[str, Relationship] = PydanticField(
        default_factory=dict, description="Relationships by relation name"
    )
    parent: str | None = PydanticField(default=None, description="Entity that produced this one during nesting")
    indexes: list[Index] = PydanticField(default_factory=list, description="Index metadata")

    def __hash__(self) -> int:
        return hash(self.name)

    @computed_field
    @property
    def casts(self) -> dict[str, str]:
        """Display casts, derived from fields so every cast names a field."""
        return {name: field.cast for name, field in self.fields.items() if field.cast}

    @computed_field
    @property
    def has_author_link(self) -> bool:
        """Whether an owning-user foreign key field is present."""
        return any(name in AUTHOR_LINK_FIELDS for name in self.fields)

    def get_field(self, name: str) -> Field | None:
        """Get field by name."""
        return self.fields.get(name)

    def get_relationship(self, name: str) -> Relationship | None:
        """Get relationship by relation name."""
        return self.relationships.get(name)

    def add_field(self, field: Field) -> bool:
        """Append a field unless one with the same name already exists.

        Returns:
            True if the field was added
        """
        if field.name in self.fields:
            return False
        self.fields[field.name] = field
        return True

    def add_relationship(self, relationship: Relationship) -> bool:
        """Append a relationship unless the relation name is already taken."""
        if relationship.name in self.relationships:
            return False
        self.relationships[relationship.name] = relationship
        return True

    def merge(self, other: "Entity") -> list[FieldConflict]:
        """Merge another observation of this entity into it (first writer wins).

        Existing fields and relationships are never overwritten; only names not
        seen before are appended.

        Args:
            other: Later observation of the same entity

        Returns:
            Fields whose types disagreed between the observations
        """
        conflicts = []
        for name, field in other.fields.items():
            existing = self.fields.get(name)
            if existing is None:
                self.fields[name] = field
            elif not existing.same_type_as(field):
                conflicts.append(
                    FieldConflict(
                        entity=self.name,
                        field=name,
                        kept=f"{existing.language_type}/{existing.storage_type}",
                        rejected=f"{field.language_type}/{field.storage_type}",
                    )
                )

        for relationship in other.relationships.values():
            self.add_relationship(relationship)

        known_indexes = {index.name for index in self.indexes}
        self.indexes.extend(index for index in other.indexes if index.name not in known_indexes)

        if self.parent is None and other.parent is not None and other.parent != self.name:
            self.parent = other.parent

        return conflicts
