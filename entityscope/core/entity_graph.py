"""Entity graph for managing inferred entities and their relationships."""

import json
import logging

from entityscope.core.entity import Entity, FieldConflict

logger = logging.getLogger(__name__)


class EntityGraph:
    """Entity graph produced by one parse invocation.

    Entity names are unique across the graph. When the same entity is observed
    twice, ``register`` merges the later observation into the existing entity
    instead of creating a duplicate.
    """

    def __init__(self):
        self.entities: dict[str, Entity] = {}
        self.conflicts: list[FieldConflict] = []

    def __contains__(self, name: object) -> bool:
        return name in self.entities

    def __len__(self) -> int:
        return len(self.entities)

    def __iter__(self):
        return iter(self.entities.values())

    def add_entity(self, entity: Entity) -> None:
        """Add a new entity to the graph.

        Args:
            entity: Entity to add

        Raises:
            ValueError: If an entity with the same name already exists
        """
        if entity.name in self.entities:
            raise ValueError(f"Entity {entity.name} already exists")

        self.entities[entity.name] = entity

    def register(self, entity: Entity) -> Entity:
        """Add an entity, or merge it into the existing one with the same name.

        Args:
            entity: Observed entity

        Returns:
            The entity stored in the graph
        """
        existing = self.entities.get(entity.name)
        if existing is None:
            if entity.parent is not None:
                self._detach_back_link(entity.name, entity.parent)
            self.entities[entity.name] = entity
            return entity

        if existing.parent is None and entity.parent is not None and entity.name in self._parent_chain(entity.parent):
            logger.debug("Not adopting parent %s for %s, it would close a cycle", entity.parent, entity.name)
            entity = entity.model_copy(update={"parent": None})

        conflicts = existing.merge(entity)
        for conflict in conflicts:
            logger.warning(
                "Conflicting types for %s.%s: keeping %s, ignoring %s",
                conflict.entity,
                conflict.field,
                conflict.kept,
                conflict.rejected,
            )
        self.conflicts.extend(conflicts)
        return existing

    def _parent_chain(self, name: str):
        """Yield ``name`` and its ancestors as far as the graph knows them."""
        seen = set()
        while name is not None and name not in seen:
            seen.add(name)
            yield name
            entity = self.entities.get(name)
            name = entity.parent if entity is not None else None

    def _detach_back_link(self, name: str, parent: str) -> None:
        """Clear the ancestor link that points back at ``name`` from ``parent``'s chain.

        Nested observations register before the object containing them, so a
        many-to-many sample (authors -> books -> authors) leaves the inner
        observation pointing at the entity now being inserted. The containing
        observation keeps its parent.
        """
        for ancestor in self._parent_chain(parent):
            entity = self.entities.get(ancestor)
            if entity is not None and entity.parent == name:
                logger.debug("Dropping parent %s of %s, it would close a cycle", name, entity.name)
                entity.parent = None
                return

    def get_entity(self, name: str) -> Entity:
        """Get entity by name.

        Args:
            name: Entity name

        Returns:
            Entity instance

        Raises:
            KeyError: If entity not found
        """
        if name not in self.entities:
            raise KeyError(f"Entity {name} not found")
        return self.entities[name]

    def ordered(self) -> list[Entity]:
        """Entities with parents placed before their children."""
        from entityscope.core.assembler import order_entities

        return order_entities(self)

    def to_dict(self, ordered: bool = True) -> dict[str, dict]:
        """Serialize the graph as a mapping of entity name to entity record.

        Args:
            ordered: Emit entities in dependency order instead of insertion order
        """
        entities = self.ordered() if ordered else list(self.entities.values())
        return {entity.name: entity.model_dump(mode="json") for entity in entities}

    def to_json(self, indent: int | None = 2, ordered: bool = True) -> str:
        """Serialize the graph to a JSON string."""
        return json.dumps(self.to_dict(ordered=ordered), indent=indent)
