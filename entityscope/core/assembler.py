"""Entity graph assembly: deduplication across observations and dependency ordering."""

import logging
from dataclasses import dataclass, field

from entityscope.core.entity import Entity, FieldConflict
from entityscope.core.entity_graph import EntityGraph
from entityscope.errors import DependencyCycleError

logger = logging.getLogger(__name__)


@dataclass
class AssembledGraph:
    """Final, dependency-ordered view handed to generators.

    ``sequence`` assigns each entity an ordinal starting at the caller-supplied
    start value; ``next_sequence`` is where the next invocation should resume.
    """

    entities: list[Entity]
    sequence: dict[str, int]
    next_sequence: int
    conflicts: list[FieldConflict] = field(default_factory=list)

    def get_entity(self, name: str) -> Entity:
        for entity in self.entities:
            if entity.name == name:
                return entity
        raise KeyError(f"Entity {name} not found")

    def to_dict(self) -> dict[str, dict]:
        """Entity records in dependency order, each tagged with its sequence number."""
        return {
            entity.name: {**entity.model_dump(mode="json"), "sequence": self.sequence[entity.name]}
            for entity in self.entities
        }


def merge_graphs(*graphs: EntityGraph) -> EntityGraph:
    """Merge graphs from several parse invocations into a new graph.

    Observations are merged in argument order, so the first graph wins on
    conflicting fields. Input graphs are left untouched.
    """
    merged = EntityGraph()
    for graph in graphs:
        merged.conflicts.extend(graph.conflicts)
        for entity in graph.entities.values():
            merged.register(entity.model_copy(deep=True))
    return merged


def order_entities(graph: EntityGraph) -> list[Entity]:
    """Order entities so every parent precedes its children.

    Repeated passes place each entity whose parent is unset, already placed,
    or absent from the graph.

    Raises:
        DependencyCycleError: If a full pass places nothing while entities remain
    """
    placed: dict[str, Entity] = {}
    remaining = list(graph.entities.values())

    while remaining:
        deferred = []
        for entity in remaining:
            parent = entity.parent
            if parent is None or parent in placed or parent not in graph.entities:
                if parent is not None and parent not in graph.entities:
                    logger.debug("Parent %s of %s is not in the graph", parent, entity.name)
                placed[entity.name] = entity
            else:
                deferred.append(entity)

        if len(deferred) == len(remaining):
            raise DependencyCycleError([entity.name for entity in deferred])
        remaining = deferred

    return list(placed.values())


def assemble(graph: EntityGraph, start_sequence: int = 1) -> AssembledGraph:
    """Produce the ordered graph with explicit sequence numbers.

    Args:
        graph: Graph produced by an adapter (or by ``merge_graphs``)
        start_sequence: First ordinal to hand out

    Returns:
        Assembled graph; pass ``next_sequence`` to the next call to continue numbering
    """
    ordered = order_entities(graph)
    sequence = {entity.name: start_sequence + offset for offset, entity in enumerate(ordered)}
    return AssembledGraph(
        entities=ordered,
        sequence=sequence,
        next_sequence=start_sequence + len(ordered),
        conflicts=list(graph.conflicts),
    )
