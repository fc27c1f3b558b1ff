"""OpenAPI adapter for inferring entities from OpenAPI 3.x / Swagger 2.x schemas."""

import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, NamedTuple

from entityscope.adapters.base import BaseAdapter
from entityscope.core.entity import Entity
from entityscope.core.entity_graph import EntityGraph
from entityscope.core.field import Field, LanguageType, StorageType
from entityscope.core.naming import entity_names, foreign_key_for, to_camel_case, to_snake_case
from entityscope.core.relationship import Relationship
from entityscope.core.relationship_detector import back_reference
from entityscope.core.type_inferrer import (
    DECIMAL_PRECISION,
    DECIMAL_SCALE,
    MAX_STRING_LENGTH,
    foreign_key_field,
)
from entityscope.errors import MalformedInputError, UnsupportedFormatError

logger = logging.getLogger(__name__)


class TypeMapping(NamedTuple):
    language_type: LanguageType
    storage_type: StorageType
    cast: str | None


STRING_MAPPING = TypeMapping("string", "string", None)

# (type, format) -> mapping; (type, None) is the fallback for unknown formats
TYPE_FORMAT_MAPPINGS = MappingProxyType(
    {
        ("integer", "int64"): TypeMapping("integer", "bigInteger", None),
        ("integer", None): TypeMapping("integer", "integer", None),
        ("number", "float"): TypeMapping("float", "float", "float"),
        ("number", "double"): TypeMapping("float", "double", "double"),
        ("number", None): TypeMapping("float", "decimal", "float"),
        ("boolean", None): TypeMapping("boolean", "boolean", "boolean"),
        ("string", "date"): TypeMapping("string", "date", "date"),
        ("string", "date-time"): TypeMapping("string", "timestamp", "datetime"),
        ("string", "uuid"): TypeMapping("string", "uuid", None),
        ("string", "email"): STRING_MAPPING,
        ("string", "uri"): STRING_MAPPING,
        ("string", "binary"): TypeMapping("string", "binary", None),
        ("string", None): STRING_MAPPING,
        ("array", None): TypeMapping("array", "json", "array"),
        ("object", None): TypeMapping("object", "json", "object"),
    }
)

FORMAT_FLAGS = MappingProxyType({"date-time": "datetime", "date": "date", "uuid": "uuid", "email": "email"})

# Property names that always map to a plain string column
PLAIN_STRING_HINTS = ("email", "password")


class OpenAPIAdapter(BaseAdapter):
    """Adapter for inferring entities from OpenAPI/Swagger documents.

    Transforms schema definitions into entities:
    - Object schemas with properties -> Entities
    - ``$ref`` properties -> to_one relationships (plus the foreign key field)
    - Array properties with ``items.$ref`` -> to_many relationships
    - Other properties -> Fields via the type/format table
    """

    def parse(self, source: str | Path) -> EntityGraph:
        """Parse an OpenAPI file (YAML or JSON) into an entity graph.

        Args:
            source: Path to the specification, or its text

        Returns:
            Entity graph with one entity per object schema
        """
        text, source_name = self.read_source(source)
        return self.parse_content(text, source_name)

    def parse_content(self, content: str, source_name: str = "<string>") -> EntityGraph:
        """Parse OpenAPI text into an entity graph."""
        spec = self.decode_yaml_or_json(content, source_name)
        if not isinstance(spec, dict):
            raise MalformedInputError(source_name, "Invalid OpenAPI specification format.")
        return self.parse_document(spec)

    def parse_document(self, spec: dict) -> EntityGraph:
        """Parse a decoded OpenAPI document.

        Raises:
            UnsupportedFormatError: If neither ``openapi`` nor ``swagger`` is present
        """
        schemas = self._get_schemas(spec)

        graph = EntityGraph()
        for schema_name, schema in schemas.items():
            if not self._is_entity_schema(schema):
                logger.debug("Skipping schema %s", schema_name)
                continue
            graph.register(self._parse_schema(schema_name, schema))

        self._link_reciprocals(graph)
        return graph

    def _get_schemas(self, spec: dict) -> dict:
        """Get schema definitions (OpenAPI 3.x components or Swagger 2.x definitions)."""
        if "openapi" in spec:
            schemas = (spec.get("components") or {}).get("schemas")
        elif "swagger" in spec:
            schemas = spec.get("definitions")
        else:
            raise UnsupportedFormatError("Invalid OpenAPI/Swagger specification. Missing version field.")

        return schemas if isinstance(schemas, dict) else {}

    def _is_entity_schema(self, schema: Any) -> bool:
        return (
            isinstance(schema, dict)
            and schema.get("type") == "object"
            and isinstance(schema.get("properties"), dict)
            and not schema.get("x-skip-generation", False)
        )

    def _parse_schema(self, schema_name: str, schema: dict) -> Entity:
        """Parse an object schema into an entity.

        Args:
            schema_name: Key under components/schemas or definitions
            schema: Schema object

        Returns:
            Entity instance
        """
        names = entity_names(schema_name)
        entity = Entity(name=names.name, table=names.table)
        required = set(schema.get("required") or [])

        for prop_name, prop in schema["properties"].items():
            if not isinstance(prop, dict):
                continue
            field_name = to_snake_case(prop_name)
            is_required = prop_name in required

            ref = self._get_ref(prop)
            if ref:
                foreign_key = foreign_key_for(field_name)
                entity.add_relationship(
                    Relationship(
                        name=field_name,
                        type="to_one",
                        related_entity=self._ref_entity(ref),
                        accessor_name=to_camel_case(field_name),
                        foreign_key=foreign_key,
                    )
                )
                entity.add_field(foreign_key_field(foreign_key, sample_value=None, nullable=not is_required))
                continue

            items = prop.get("items")
            items_ref = self._get_ref(items) if prop.get("type") == "array" and isinstance(items, dict) else None
            if items_ref:
                entity.add_relationship(
                    Relationship(
                        name=field_name,
                        type="to_many",
                        related_entity=self._ref_entity(items_ref),
                        accessor_name=to_camel_case(field_name),
                        foreign_key=foreign_key_for(names.singular),
                    )
                )
                continue

            entity.add_field(self._parse_property(field_name, prop, is_required))

        return entity

    def _get_ref(self, prop: dict) -> str | None:
        """Get the ``$ref`` of a property, looking through a single-entry ``allOf``."""
        if "$ref" in prop:
            return prop["$ref"]
        all_of = prop.get("allOf")
        if isinstance(all_of, list) and len(all_of) == 1 and isinstance(all_of[0], dict):
            return all_of[0].get("$ref")
        return None

    def _ref_entity(self, ref: str) -> str:
        """Entity name from ``#/components/schemas/User`` or ``#/definitions/User``."""
        return entity_names(ref.rsplit("/", 1)[-1]).name

    def _parse_property(self, field_name: str, prop: dict, is_required: bool) -> Field:
        """Map a non-reference property to a field."""
        type_name = prop.get("type", "string")
        nullable = not is_required or bool(prop.get("nullable")) or bool(prop.get("x-nullable"))

        # OpenAPI 3.1 spells nullability as a type list
        if isinstance(type_name, list):
            nullable = nullable or "null" in type_name
            type_name = next((t for t in type_name if t != "null"), "string")

        type_format = prop.get("format")
        mapping = self._get_type_mapping(type_name, type_format, field_name)

        storage_type = mapping.storage_type
        max_length = prop.get("maxLength")
        if storage_type == "string" and isinstance(max_length, int) and max_length > MAX_STRING_LENGTH:
            storage_type = "text"

        string_format = FORMAT_FLAGS.get(type_format) if mapping.language_type == "string" else None
        if "email" in field_name:
            string_format = "email"

        is_decimal = storage_type == "decimal"
        return Field(
            name=field_name,
            sample_value=prop.get("example", prop.get("default")),
            language_type=mapping.language_type,
            storage_type=storage_type,
            nullable=nullable,
            precision=DECIMAL_PRECISION if is_decimal else None,
            scale=DECIMAL_SCALE if is_decimal else None,
            cast=mapping.cast,
            format=string_format,
        )

    def _get_type_mapping(self, type_name: str, type_format: str | None, field_name: str) -> TypeMapping:
        if any(hint in field_name for hint in PLAIN_STRING_HINTS):
            return STRING_MAPPING

        mapping = TYPE_FORMAT_MAPPINGS.get((type_name, type_format))
        if mapping is None:
            mapping = TYPE_FORMAT_MAPPINGS.get((type_name, None), STRING_MAPPING)
        return mapping

    def _link_reciprocals(self, graph: EntityGraph) -> None:
        """Give each to_many target the back reference and foreign key it implies.

        When the target already points back with its own to_one, the to_many
        adopts that foreign key instead.
        """
        for entity in list(graph.entities.values()):
            for relationship in entity.relationships.values():
                if relationship.type != "to_many":
                    continue
                related = graph.entities.get(relationship.related_entity)
                if related is None or related.name == entity.name:
                    continue

                existing = next(
                    (
                        r
                        for r in related.relationships.values()
                        if r.type == "to_one" and r.related_entity == entity.name
                    ),
                    None,
                )
                if existing is not None:
                    relationship.foreign_key = existing.foreign_key
                    continue

                related.add_field(foreign_key_field(relationship.foreign_key, sample_value=None))
                related.add_relationship(back_reference(entity, relationship.foreign_key))
