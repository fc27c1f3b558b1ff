"""Base database adapter interface."""

from abc import ABC, abstractmethod
from typing import Any


class BaseDatabaseAdapter(ABC):
    """Abstract base class for database adapters.

    Adapters provide a unified introspection interface over different
    database backends, so schema inference works the same on DuckDB,
    PostgreSQL and other databases.
    """

    @abstractmethod
    def execute(self, sql: str, params: list | None = None) -> Any:
        """Execute SQL and return result object.

        Args:
            sql: SQL query to execute
            params: Positional parameters for placeholders

        Returns:
            Database-specific result object with ``fetchall()``
        """
        raise NotImplementedError

    @abstractmethod
    def get_tables(self) -> list[dict]:
        """Get list of tables in database.

        Returns:
            List of dicts with 'table_name' and 'schema' keys
        """
        raise NotImplementedError

    @abstractmethod
    def get_columns(self, table_name: str, schema: str | None = None) -> list[dict]:
        """Get columns for a table, in declaration order.

        Args:
            table_name: Name of table
            schema: Schema name (optional)

        Returns:
            List of dicts with 'column_name', 'data_type', 'nullable' and 'default' keys
        """
        raise NotImplementedError

    @abstractmethod
    def get_indexes(self, table_name: str, schema: str | None = None) -> list[dict]:
        """Get primary key, unique and plain indexes for a table.

        Args:
            table_name: Name of table
            schema: Schema name (optional)

        Returns:
            List of dicts with 'name', 'columns', 'unique' and 'primary' keys
        """
        raise NotImplementedError

    @abstractmethod
    def close(self) -> None:
        """Close database connection."""
        raise NotImplementedError

    @property
    @abstractmethod
    def dialect(self) -> str:
        """Get SQLGlot dialect name.

        Returns:
            Dialect name (e.g., 'duckdb', 'postgres')
        """
        raise NotImplementedError

    @property
    @abstractmethod
    def raw_connection(self) -> Any:
        """Get underlying database connection object.

        Returns:
            Raw connection (DuckDBPyConnection, psycopg.Connection, etc.)
        """
        raise NotImplementedError
