"""JSON sample adapter: infers entities from example JSON payloads."""

import logging
from pathlib import Path
from typing import Any

from entityscope.adapters.base import BaseAdapter
from entityscope.core.entity import Entity
from entityscope.core.entity_graph import EntityGraph
from entityscope.core.naming import entity_names, foreign_key_for, to_snake_case
from entityscope.core.relationship_detector import back_reference, classify, reciprocal_to_many
from entityscope.core.type_inferrer import (
    ValueShape,
    classify_shape,
    field_from_value,
    foreign_key_field,
    is_object,
)
from entityscope.errors import MalformedInputError

logger = logging.getLogger(__name__)

# Nesting deeper than this is truncated, not treated as an error
MAX_DEPTH = 10


class JsonSampleAdapter(BaseAdapter):
    """Adapter for inferring entities from sample JSON documents.

    Transforms a decoded document into entities:
    - Keys holding an object or a list of objects -> Entities
    - Scalar values and lists of scalars -> Fields
    - Lists of objects -> to_many relationships (child gets the owner's foreign key)
    - Nested objects -> to_one relationships (owner gets the related foreign key)
    """

    def parse(self, source: str | Path) -> EntityGraph:
        """Parse a JSON file or JSON string into an entity graph.

        Args:
            source: Path to a JSON file, or JSON text

        Returns:
            Entity graph with inferred entities
        """
        text, source_name = self.read_source(source)
        root_name = Path(source_name).stem if source_name != "<string>" else None
        return self.parse_content(text, source_name, root_name=root_name)

    def parse_content(self, content: str, source_name: str = "<string>", root_name: str | None = None) -> EntityGraph:
        """Parse JSON text into an entity graph."""
        data = self.decode_json(content, source_name)
        return self.parse_data(data, source_name, root_name=root_name)

    def parse_data(self, data: Any, source_name: str = "<data>", root_name: str | None = None) -> EntityGraph:
        """Parse an already decoded JSON document.

        Args:
            data: Decoded document (object or array)
            source_name: Name used in error messages
            root_name: Entity name for a top-level array of objects, or for a top-level
                object without nested entities (e.g. the file stem or URL resource)

        Returns:
            Entity graph with inferred entities
        """
        if not isinstance(data, (dict, list)):
            raise MalformedInputError(source_name, "JSON must represent an object or array.")

        graph = EntityGraph()
        shape = classify_shape(data)
        if root_name and shape is ValueShape.OBJECT_LIST:
            self._process_observations(graph, root_name, data, parent=None, depth=0)
        elif root_name and shape is ValueShape.OBJECT and self._is_record(data):
            self._process_entity(graph, root_name, data, parent=None, depth=0)
        else:
            self._extract_entities(graph, data, depth=0)
        return graph

    @staticmethod
    def _is_record(data: dict) -> bool:
        """Whether an object holds no nested entities (a single record such as ``GET /users/1``)."""
        return not any(classify_shape(value) in (ValueShape.OBJECT, ValueShape.OBJECT_LIST) for value in data.values())

    def _extract_entities(self, graph: EntityGraph, data: dict | list, depth: int) -> None:
        """Register every key holding an object or list of objects as an entity."""
        if depth > MAX_DEPTH:
            return

        if isinstance(data, list):
            for element in data:
                if is_object(element):
                    self._extract_entities(graph, element, depth)
            return

        for key, value in data.items():
            shape = classify_shape(value)
            if shape is ValueShape.OBJECT:
                self._process_entity(graph, key, value, parent=None, depth=depth)
            elif shape is ValueShape.OBJECT_LIST:
                self._process_observations(graph, key, value, parent=None, depth=depth)

    def _process_observations(
        self, graph: EntityGraph, raw_name: str, elements: list, parent: Entity | None, depth: int
    ) -> None:
        """Register each object element of a list as an observation of one entity."""
        for element in elements:
            if is_object(element):
                self._process_entity(graph, raw_name, element, parent=parent, depth=depth)

    def _process_entity(
        self, graph: EntityGraph, raw_name: str, data: dict, parent: Entity | None, depth: int
    ) -> Entity | None:
        """Build one entity from an object and register it in the graph.

        Args:
            graph: Graph to register into
            raw_name: Key the object was found under
            data: The object
            parent: Entity whose list contained this object, if any
            depth: Current nesting depth

        Returns:
            The registered entity, or None when the depth limit cut the branch
        """
        if depth > MAX_DEPTH:
            logger.debug("Depth limit reached at %s, not descending further", raw_name)
            return None

        names = entity_names(raw_name)
        if parent is not None and parent.name == names.name:
            parent = None

        entity = Entity(name=names.name, table=names.table, parent=parent.name if parent else None)

        for key, value in data.items():
            field_name = to_snake_case(key)
            classification = classify(field_name, value, owner=names.singular)

            if classification.kind == "to_many":
                entity.add_relationship(classification.to_relationship())
                self._process_observations(graph, key, value, parent=entity, depth=depth + 1)
                continue

            if classification.kind == "to_one":
                entity.add_relationship(classification.to_relationship())
                entity.add_field(foreign_key_field(classification.foreign_key, value.get("id", 1)))
                related = self._process_entity(graph, key, value, parent=None, depth=depth + 1)
                if related is not None and related.name != entity.name:
                    related.add_relationship(reciprocal_to_many(related, entity, classification.foreign_key))
                continue

            entity.add_field(field_from_value(field_name, value))

        if parent is not None:
            foreign_key = foreign_key_for(entity_names(parent.name).singular)
            entity.add_field(foreign_key_field(foreign_key))
            entity.add_relationship(back_reference(parent, foreign_key))

        return graph.register(entity)
