"""Relationship detection from value shapes and foreign key naming."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Literal

from entityscope.core.entity import Entity
from entityscope.core.naming import entity_names, foreign_key_for, pluralize, to_camel_case
from entityscope.core.relationship import Relationship
from entityscope.core.type_inferrer import ValueShape, classify_shape

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Classification:
    """How one field of an object participates in the entity graph."""

    field_name: str
    shape: ValueShape
    kind: Literal["to_many", "to_one", "field"]
    related_entity: str | None = None
    foreign_key: str | None = None

    @property
    def is_relationship(self) -> bool:
        return self.kind != "field"

    def to_relationship(self) -> Relationship | None:
        """Relationship seen from the owning object, or None for plain fields."""
        if not self.is_relationship:
            return None
        return Relationship(
            name=self.field_name,
            type=self.kind,
            related_entity=self.related_entity,
            accessor_name=to_camel_case(self.field_name),
            foreign_key=self.foreign_key,
        )


def classify(field_name: str, value: Any, owner: str | None = None) -> Classification:
    """Classify one field of an object.

    Args:
        field_name: Key of the field in its object
        value: Decoded value
        owner: Name of the object's entity, used for to-many foreign keys

    Returns:
        to_many for a list whose first element is an object, to_one for an
        object, plain field otherwise
    """
    shape = classify_shape(value)
    if shape is ValueShape.OBJECT_LIST:
        return Classification(
            field_name=field_name,
            shape=shape,
            kind="to_many",
            related_entity=entity_names(field_name).name,
            foreign_key=foreign_key_for(owner),
        )
    if shape is ValueShape.OBJECT:
        return Classification(
            field_name=field_name,
            shape=shape,
            kind="to_one",
            related_entity=entity_names(field_name).name,
            foreign_key=foreign_key_for(field_name),
        )
    return Classification(field_name=field_name, shape=shape, kind="field")


def detect(fields: Mapping[str, Any], owner: str | None = None) -> dict[str, Classification]:
    """Classify every field of an object exactly once."""
    return {name: classify(name, value, owner) for name, value in fields.items()}


def back_reference(parent: Entity, foreign_key: str) -> Relationship:
    """to_one relationship from a child entity back to the entity owning it."""
    singular = entity_names(parent.name).singular
    return Relationship(
        name=singular,
        type="to_one",
        related_entity=parent.name,
        accessor_name=to_camel_case(singular),
        foreign_key=foreign_key,
        owner_key=parent.primary_key,
    )


def reciprocal_to_many(owner: Entity, child: Entity, foreign_key: str) -> Relationship:
    """to_many relationship on ``owner`` listing the ``child`` rows pointing at it."""
    plural = pluralize(entity_names(child.name).singular)
    return Relationship(
        name=plural,
        type="to_many",
        related_entity=child.name,
        accessor_name=to_camel_case(plural),
        foreign_key=foreign_key,
        local_key=owner.primary_key,
    )


def infer_foreign_key_relationships(entities: Mapping[str, Entity]) -> None:
    """Synthesize relationships from ``*_id`` field names.

    Looks for patterns like:
    - posts.author_id -> to_one ``author`` on Post
    - and, when Author was ingested too, to_many ``posts`` on Author
    """
    for entity in entities.values():
        for field_name in list(entity.fields):
            if not field_name.endswith("_id") or field_name == "id":
                continue

            reference = field_name[: -len("_id")]
            related_name = entity_names(reference).name
            entity.add_relationship(
                Relationship(
                    name=reference,
                    type="to_one",
                    related_entity=related_name,
                    accessor_name=to_camel_case(reference),
                    foreign_key=field_name,
                )
            )

            related = entities.get(related_name)
            if related is None:
                logger.debug("%s.%s references %s, which was not ingested", entity.name, field_name, related_name)
                continue
            related.add_relationship(reciprocal_to_many(related, entity, field_name))


