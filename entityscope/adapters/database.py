"""Database adapter: infers entities from a live database schema."""

import logging
import re
from types import MappingProxyType
from typing import NamedTuple

import sqlglot
from sqlglot import exp

from entityscope.adapters.base import BaseAdapter
from entityscope.core.entity import Entity, Index
from entityscope.core.entity_graph import EntityGraph
from entityscope.core.field import Field, LanguageType, StorageType
from entityscope.core.naming import entity_names
from entityscope.core.relationship_detector import infer_foreign_key_relationships
from entityscope.db.base import BaseDatabaseAdapter
from entityscope.errors import NotFoundError

logger = logging.getLogger(__name__)

DEFAULT_EXCLUDED_TABLES = frozenset(
    {
        "migrations",
        "password_reset_tokens",
        "password_resets",
        "failed_jobs",
        "personal_access_tokens",
        "sessions",
        "cache",
        "cache_locks",
        "jobs",
        "job_batches",
    }
)

# Timestamp bookkeeping columns are emitted by the generator layer
SKIPPED_COLUMNS = frozenset({"created_at", "updated_at", "deleted_at"})


class ColumnMapping(NamedTuple):
    language_type: LanguageType
    storage_type: StorageType
    cast: str | None


STRING_COLUMN = ColumnMapping("string", "string", None)

_BIG_INTEGER = ColumnMapping("integer", "bigInteger", None)
_INTEGER = ColumnMapping("integer", "integer", None)
_SMALL_INTEGER = ColumnMapping("integer", "smallInteger", None)
_TINY_INTEGER = ColumnMapping("integer", "tinyInteger", None)
_DATETIME = ColumnMapping("string", "datetime", "datetime")
_TEXT = ColumnMapping("string", "text", None)
_JSON = ColumnMapping("array", "json", "array")
_BINARY = ColumnMapping("string", "binary", None)

# SQLGlot DataType.Type name -> column mapping
NATIVE_TYPE_MAPPINGS = MappingProxyType(
    {
        "BIGINT": _BIG_INTEGER,
        "UBIGINT": _BIG_INTEGER,
        "HUGEINT": _BIG_INTEGER,
        "INT128": _BIG_INTEGER,
        "UINT128": _BIG_INTEGER,
        "BIGSERIAL": _BIG_INTEGER,
        "INT": _INTEGER,
        "UINT": _INTEGER,
        "MEDIUMINT": _INTEGER,
        "SERIAL": _INTEGER,
        "SMALLINT": _SMALL_INTEGER,
        "USMALLINT": _SMALL_INTEGER,
        "SMALLSERIAL": _SMALL_INTEGER,
        "TINYINT": _TINY_INTEGER,
        "UTINYINT": _TINY_INTEGER,
        "DECIMAL": ColumnMapping("float", "decimal", "float"),
        "FLOAT": ColumnMapping("float", "float", "float"),
        "DOUBLE": ColumnMapping("float", "double", "double"),
        "BOOLEAN": ColumnMapping("boolean", "boolean", "boolean"),
        "DATE": ColumnMapping("string", "date", "date"),
        "DATETIME": _DATETIME,
        "TIMESTAMP": _DATETIME,
        "TIMESTAMPTZ": _DATETIME,
        "TIMESTAMPLTZ": _DATETIME,
        "TIME": ColumnMapping("string", "time", None),
        "TEXT": _TEXT,
        "MEDIUMTEXT": _TEXT,
        "LONGTEXT": _TEXT,
        "JSON": _JSON,
        "JSONB": _JSON,
        "ARRAY": _JSON,
        "LIST": _JSON,
        "STRUCT": _JSON,
        "MAP": _JSON,
        "UUID": ColumnMapping("string", "uuid", None),
        "BLOB": _BINARY,
        "BINARY": _BINARY,
        "VARBINARY": _BINARY,
    }
)

# Fallback for type names SQLGlot cannot parse, keyed by the lowercase base name
FALLBACK_TYPE_ALIASES = MappingProxyType(
    {
        "bigint": "BIGINT",
        "bigserial": "BIGINT",
        "int8": "BIGINT",
        "int": "INT",
        "integer": "INT",
        "int4": "INT",
        "serial": "INT",
        "smallint": "SMALLINT",
        "int2": "SMALLINT",
        "tinyint": "TINYINT",
        "int1": "TINYINT",
        "decimal": "DECIMAL",
        "numeric": "DECIMAL",
        "float": "FLOAT",
        "real": "FLOAT",
        "float4": "FLOAT",
        "double": "DOUBLE",
        "double precision": "DOUBLE",
        "float8": "DOUBLE",
        "bool": "BOOLEAN",
        "boolean": "BOOLEAN",
        "date": "DATE",
        "datetime": "DATETIME",
        "timestamp": "TIMESTAMP",
        "timestamptz": "TIMESTAMPTZ",
        "time": "TIME",
        "text": "TEXT",
        "mediumtext": "MEDIUMTEXT",
        "longtext": "LONGTEXT",
        "json": "JSON",
        "jsonb": "JSONB",
        "uuid": "UUID",
        "blob": "BLOB",
        "binary": "BINARY",
        "varbinary": "VARBINARY",
        "bytea": "VARBINARY",
    }
)

# Native base names that really are long-text columns; SQLGlot also reports
# VARCHAR as TEXT in some dialects (DuckDB)
LONG_TEXT_BASES = frozenset({"text", "mediumtext", "longtext"})

_TYPE_BASE = re.compile(r"^\s*([a-z][a-z0-9 ]*?)\s*(\(|$)")
_TYPE_PARAMS = re.compile(r"\((\d+)\s*(?:,\s*(\d+))?\)")


class NativeType(NamedTuple):
    """A native column type reduced to its SQLGlot type name and parameters."""

    name: str | None
    precision: int | None = None
    scale: int | None = None


def normalize_native_type(native: str, dialect: str | None = None) -> NativeType:
    """Reduce a dialect-specific column type name to a canonical type name.

    Args:
        native: Type name as reported by the database (``numeric(10,2)``, ``INTEGER``, ...)
        dialect: SQLGlot dialect used to parse the type name

    Returns:
        Canonical type name (a ``DataType.Type`` name) with precision and scale, if any
    """
    try:
        data_type = exp.DataType.build(native, dialect=dialect)
    except (sqlglot.errors.SqlglotError, ValueError):
        return _fallback_native_type(native)

    params = []
    for param in data_type.expressions:
        try:
            params.append(int(param.name))
        except (TypeError, ValueError):
            break

    return NativeType(
        name=data_type.this.name,
        precision=params[0] if params else None,
        scale=params[1] if len(params) > 1 else None,
    )


def _fallback_native_type(native: str) -> NativeType:
    lowered = native.lower()
    match = _TYPE_BASE.match(lowered)
    base = match.group(1) if match else lowered
    if base.startswith("timestamp") and "time zone" in base and "without" not in base:
        base = "timestamptz"
    elif base.startswith("timestamp"):
        base = "timestamp"

    params = _TYPE_PARAMS.search(lowered)
    precision = int(params.group(1)) if params else None
    scale = int(params.group(2)) if params and params.group(2) else None
    return NativeType(name=FALLBACK_TYPE_ALIASES.get(base), precision=precision, scale=scale)


def map_column_type(native: str, dialect: str | None = None) -> tuple[ColumnMapping, NativeType]:
    """Map a native column type to language type, storage type and cast."""
    native_type = normalize_native_type(native, dialect)
    mapping = NATIVE_TYPE_MAPPINGS.get(native_type.name, STRING_COLUMN)
    if mapping is _TEXT and _native_base(native) not in LONG_TEXT_BASES:
        mapping = STRING_COLUMN
    return mapping, native_type


def _native_base(native: str) -> str:
    match = _TYPE_BASE.match(native.lower())
    return match.group(1) if match else native.lower()


class DatabaseAdapter(BaseAdapter):
    """Adapter for inferring entities from a live database schema.

    Each selected table becomes an entity: columns map to fields through a
    dialect-normalizing type table and indexes are recorded as-is. After all
    tables are processed, every ``*_id`` column yields a to_one relationship,
    plus the reciprocal to_many when the referenced table was ingested too.
    """

    def __init__(self, connection: BaseDatabaseAdapter, excluded_tables: frozenset[str] | set[str] | None = None):
        """Initialize database adapter.

        Args:
            connection: Open database backend to introspect
            excluded_tables: Infrastructure tables skipped for ``*`` selections
        """
        self.connection = connection
        self.excluded_tables = frozenset(excluded_tables) if excluded_tables is not None else DEFAULT_EXCLUDED_TABLES

    def parse(self, source: str | list[str] = "*") -> EntityGraph:
        """Introspect the selected tables into an entity graph.

        Args:
            source: ``"*"`` for every table, a comma-separated list, or a list of names

        Returns:
            Entity graph with one entity per table

        Raises:
            NotFoundError: If a requested table does not exist or nothing is selected
        """
        tables = self._select_tables(source)
        if not tables:
            raise NotFoundError("tables")

        graph = EntityGraph()
        for table in tables:
            graph.register(self._process_table(table))

        infer_foreign_key_relationships(graph.entities)
        return graph

    def parse_tables(self, tables: list[str]) -> EntityGraph:
        """Introspect an explicit list of tables."""
        return self.parse(tables)

    def _select_tables(self, source: str | list[str]) -> list[dict]:
        available = self.connection.get_tables()

        if source == "*" or source == ["*"]:
            selected = []
            for table in available:
                if table["table_name"] in self.excluded_tables:
                    logger.debug("Skipping infrastructure table %s", table["table_name"])
                    continue
                selected.append(table)
            return selected

        requested = source.split(",") if isinstance(source, str) else list(source)
        by_name = {table["table_name"]: table for table in available}

        selected = []
        for name in (name.strip() for name in requested):
            if not name:
                continue
            if name not in by_name:
                raise NotFoundError(f"table {name}")
            selected.append(by_name[name])
        return selected

    def _process_table(self, table: dict) -> Entity:
        """Build an entity from one table's columns and indexes."""
        table_name = table["table_name"]
        schema = table.get("schema")
        names = entity_names(table_name)
        entity = Entity(name=names.name, table=table_name)

        for column in self.connection.get_columns(table_name, schema):
            if column["column_name"] in SKIPPED_COLUMNS:
                continue
            entity.add_field(self._column_to_field(column))

        for index in self.connection.get_indexes(table_name, schema):
            entity.indexes.append(
                Index(
                    name=index["name"],
                    columns=list(index["columns"]),
                    unique=bool(index["unique"]),
                    primary=bool(index.get("primary", False)),
                )
            )

        return entity

    def _column_to_field(self, column: dict) -> Field:
        mapping, native_type = map_column_type(column["data_type"], self.connection.dialect)
        is_decimal = mapping.storage_type == "decimal"
        return Field(
            name=column["column_name"],
            sample_value=column.get("default"),
            language_type=mapping.language_type,
            storage_type=mapping.storage_type,
            nullable=bool(column["nullable"]),
            precision=native_type.precision if is_decimal else None,
            scale=native_type.scale if is_decimal else None,
            cast=mapping.cast,
        )
