"""entityscope: entity-relationship inference from JSON samples, API specs and databases."""

__version__ = "0.1.0"

from entityscope.core.assembler import AssembledGraph, assemble, merge_graphs
from entityscope.core.entity import Entity, FieldConflict, Index
from entityscope.core.entity_graph import EntityGraph
from entityscope.core.field import Field
from entityscope.core.relationship import Relationship
from entityscope.errors import (
    DependencyCycleError,
    EntityscopeError,
    MalformedInputError,
    NetworkError,
    NotFoundError,
    UnsupportedFormatError,
)

__all__ = [
    "AssembledGraph",
    "ApiUrlAdapter",
    "DatabaseAdapter",
    "DependencyCycleError",
    "Entity",
    "EntityGraph",
    "EntityscopeError",
    "Field",
    "FieldConflict",
    "Index",
    "JsonSampleAdapter",
    "MalformedInputError",
    "NetworkError",
    "NotFoundError",
    "OpenAPIAdapter",
    "PostmanAdapter",
    "Relationship",
    "UnsupportedFormatError",
    "assemble",
    "load_from_directory",
    "load_source",
    "merge_graphs",
]

_LAZY_IMPORTS = {
    "ApiUrlAdapter": "entityscope.adapters.api_url",
    "DatabaseAdapter": "entityscope.adapters.database",
    "JsonSampleAdapter": "entityscope.adapters.json_sample",
    "OpenAPIAdapter": "entityscope.adapters.openapi",
    "PostmanAdapter": "entityscope.adapters.postman",
    "load_from_directory": "entityscope.loaders",
    "load_source": "entityscope.loaders",
}


def __getattr__(name):  # Lazy import to avoid importing httpx/duckdb/sqlglot on package import
    module_name = _LAZY_IMPORTS.get(name)
    if module_name is None:
        raise AttributeError(name)

    import importlib

    return getattr(importlib.import_module(module_name), name)
