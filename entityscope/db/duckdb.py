"""DuckDB database adapter."""

from typing import Any

import duckdb

from entityscope.db.base import BaseDatabaseAdapter


class DuckDBAdapter(BaseDatabaseAdapter):
    """DuckDB database adapter.

    Wraps DuckDB connection and introspects it through the ``duckdb_*()``
    metadata table functions.
    """

    def __init__(self, path: str = ":memory:"):
        """Initialize DuckDB adapter.

        Args:
            path: Database file path or ":memory:" for in-memory database
        """
        self.conn = duckdb.connect(path)

    def execute(self, sql: str, params: list | None = None) -> Any:
        """Execute SQL and return DuckDB relation."""
        if params:
            return self.conn.execute(sql, params)
        return self.conn.execute(sql)

    def get_tables(self) -> list[dict]:
        """Get list of tables in database."""
        result = self.conn.execute(
            """
            SELECT table_name, schema_name as schema
            FROM duckdb_tables()
            WHERE schema_name NOT IN ('information_schema', 'pg_catalog')
            ORDER BY table_name
        """
        )
        rows = result.fetchall()
        return [{"table_name": row[0], "schema": row[1]} for row in rows]

    def get_columns(self, table_name: str, schema: str | None = None) -> list[dict]:
        """Get columns for a table."""
        params = [table_name]
        schema_filter = ""
        if schema:
            schema_filter = "AND schema_name = ?"
            params.append(schema)

        result = self.conn.execute(
            f"""
            SELECT column_name, data_type, is_nullable, column_default
            FROM duckdb_columns()
            WHERE table_name = ? {schema_filter}
            ORDER BY column_index
        """,
            params,
        )
        rows = result.fetchall()
        return [
            {"column_name": row[0], "data_type": row[1], "nullable": bool(row[2]), "default": row[3]} for row in rows
        ]

    def get_indexes(self, table_name: str, schema: str | None = None) -> list[dict]:
        """Get primary key and unique constraints plus explicit indexes for a table."""
        params = [table_name]
        schema_filter = ""
        if schema:
            schema_filter = "AND schema_name = ?"
            params.append(schema)

        constraints = self.conn.execute(
            f"""
            SELECT constraint_type, constraint_column_names
            FROM duckdb_constraints()
            WHERE table_name = ? {schema_filter}
                AND constraint_type IN ('PRIMARY KEY', 'UNIQUE')
        """,
            params,
        ).fetchall()

        indexes = []
        for constraint_type, columns in constraints:
            columns = list(columns)
            primary = constraint_type == "PRIMARY KEY"
            suffix = "pkey" if primary else "unique"
            indexes.append(
                {
                    "name": f"{table_name}_{'_'.join(columns)}_{suffix}",
                    "columns": columns,
                    "unique": True,
                    "primary": primary,
                }
            )

        explicit = self.conn.execute(
            f"""
            SELECT index_name, is_unique, is_primary, expressions
            FROM duckdb_indexes()
            WHERE table_name = ? {schema_filter}
        """,
            params,
        ).fetchall()
        for name, is_unique, is_primary, expressions in explicit:
            indexes.append(
                {
                    "name": name,
                    "columns": _expression_columns(expressions),
                    "unique": bool(is_unique),
                    "primary": bool(is_primary),
                }
            )

        return indexes

    def close(self) -> None:
        """Close database connection."""
        self.conn.close()

    @property
    def dialect(self) -> str:
        """Get SQLGlot dialect name."""
        return "duckdb"

    @property
    def raw_connection(self) -> Any:
        """Get underlying DuckDB connection."""
        return self.conn

    @classmethod
    def from_url(cls, url: str) -> "DuckDBAdapter":
        """Create adapter from connection URL.

        Args:
            url: Connection URL (e.g., "duckdb:///:memory:" or "duckdb:///path/to/db.duckdb")

        Returns:
            DuckDBAdapter instance
        """
        if not url.startswith("duckdb://"):
            raise ValueError(f"Invalid DuckDB URL: {url}")

        # Remove protocol prefix while preserving leading slash in file paths
        # duckdb:///:memory: -> :memory:
        # duckdb:///tmp/app.db -> /tmp/app.db
        # duckdb:/// -> :memory:
        db_path = url[len("duckdb://") :]

        # Handle :memory: special case (may have leading slash from URI)
        if db_path in ("/:memory:", ":memory:", "", "/"):
            db_path = ":memory:"

        return cls(db_path)


def _expression_columns(expressions: Any) -> list[str]:
    """Column names from ``duckdb_indexes().expressions`` (a list, or its string rendering)."""
    if isinstance(expressions, (list, tuple)):
        items = expressions
    elif isinstance(expressions, str):
        items = expressions.strip("[]").split(",")
    else:
        return []
    return [str(item).strip().strip("'\"") for item in items if str(item).strip()]
