"""Base adapter interface for inferring entity graphs."""

import json
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import yaml

from entityscope.core.entity_graph import EntityGraph
from entityscope.errors import MalformedInputError, NotFoundError

# Single-line YAML mapping such as ``openapi: 3.0.0``
_INLINE_YAML = re.compile(r"^[A-Za-z_][\w-]*:\s")


class BaseAdapter(ABC):
    """Base adapter for inferring entity graphs from an external source format."""

    @abstractmethod
    def parse(self, source: str | Path) -> EntityGraph:
        """Parse external source into an entity graph.

        Args:
            source: Path to a file, or the raw document text

        Returns:
            Entity graph with inferred entities

        Raises:
            MalformedInputError: If the input cannot be decoded
            NotFoundError: If a referenced file or resource does not exist
        """
        raise NotImplementedError

    def validate(self, graph: EntityGraph) -> list[str]:
        """Validate an inferred entity graph.

        Args:
            graph: Entity graph to validate

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        for entity_name, entity in graph.entities.items():
            if not entity.fields:
                errors.append(f"Entity {entity_name} has no fields")

            for relationship in entity.relationships.values():
                if relationship.type == "to_one" and relationship.foreign_key not in entity.fields:
                    errors.append(
                        f"Entity {entity_name}: relationship {relationship.name} uses missing "
                        f"foreign key {relationship.foreign_key}"
                    )

        return errors

    @staticmethod
    def read_source(source: str | Path) -> tuple[str, str]:
        """Resolve a source argument to ``(text, source_name)``.

        A ``Path`` is always read from disk. A string is treated as raw text
        when it starts with ``{``, ``[`` or ``"``, spans several lines, or opens
        with a YAML ``key: value`` pair, and as a file path otherwise.

        Raises:
            NotFoundError: If the path does not exist
        """
        if isinstance(source, str):
            stripped = source.strip()
            if stripped.startswith(("{", "[", '"')) or "\n" in stripped or _INLINE_YAML.match(stripped):
                return source, "<string>"

        path = Path(source)
        if not path.is_file():
            raise NotFoundError(f"file {path}")
        try:
            return path.read_text(encoding="utf-8"), str(path)
        except (OSError, UnicodeDecodeError) as e:
            raise MalformedInputError(str(path), f"Unable to read file: {e}") from e

    @staticmethod
    def decode_json(text: str, source_name: str) -> Any:
        """Decode JSON text, raising ``MalformedInputError`` on failure."""
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise MalformedInputError(source_name, f"Invalid JSON: {e}") from e

    @staticmethod
    def decode_yaml_or_json(text: str, source_name: str) -> Any:
        """Decode YAML or JSON text.

        Files with a ``.yaml``/``.yml`` suffix are read as YAML; anything else is
        tried as JSON first, falling back to YAML.
        """
        if Path(source_name).suffix.lower() not in {".yaml", ".yml"}:
            try:
                return json.loads(text)
            except json.JSONDecodeError:
                pass

        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise MalformedInputError(source_name, f"Invalid YAML: {e}") from e
