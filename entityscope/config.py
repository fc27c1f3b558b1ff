"""Configuration file format for entityscope."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

from entityscope.adapters.api_url import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT
from entityscope.adapters.database import DEFAULT_EXCLUDED_TABLES


class DuckDBConnection(BaseModel):
    """DuckDB connection configuration."""

    type: Literal["duckdb"] = "duckdb"
    path: str = Field(..., description="Path to DuckDB database file or :memory:")


class PostgreSQLConnection(BaseModel):
    """PostgreSQL connection configuration."""

    type: Literal["postgres"] = "postgres"
    host: str = Field(..., description="PostgreSQL host")
    port: int = Field(default=5432, description="PostgreSQL port")
    database: str = Field(..., description="Database name")
    username: str = Field(..., description="Username")
    password: str | None = Field(default=None, description="Password")


Connection = DuckDBConnection | PostgreSQLConnection


class ApiSettings(BaseModel):
    """Settings for fetching live API responses."""

    timeout: float = Field(default=DEFAULT_TIMEOUT, description="Request timeout in seconds")
    token: str | None = Field(default=None, description="Authorization token")
    token_type: str = Field(default="Bearer", description="Authorization scheme")
    user_agent: str = Field(default=DEFAULT_USER_AGENT, description="User-Agent header")


class EntityscopeConfig(BaseModel):
    """entityscope configuration file format.

    Can be saved as entityscope.yaml or entityscope.json.

    Example YAML:
        connection:
          type: duckdb
          path: data/app.duckdb
        excluded_tables:
          - migrations
          - audit_log
        api:
          timeout: 10
          token: secret
    """

    connection: Connection | None = Field(default=None, description="Database connection configuration")
    excluded_tables: list[str] = Field(
        default_factory=lambda: sorted(DEFAULT_EXCLUDED_TABLES),
        description="Tables skipped when introspecting every table",
    )
    api: ApiSettings = Field(default_factory=ApiSettings, description="Live API fetch settings")

    def resolve_paths(self, base_dir: Path | None = None) -> "EntityscopeConfig":
        """Resolve a relative DuckDB path against ``base_dir`` (defaults to cwd)."""
        base = base_dir or Path.cwd()

        connection = self.connection
        if connection and isinstance(connection, DuckDBConnection) and connection.path != ":memory:":
            db_path = Path(connection.path)
            if not db_path.is_absolute():
                db_path = (base / db_path).resolve()
            connection = DuckDBConnection(type="duckdb", path=str(db_path))

        return self.model_copy(update={"connection": connection})


def load_config(config_path: Path) -> EntityscopeConfig:
    """Load configuration from YAML or JSON file.

    Args:
        config_path: Path to config file (entityscope.yaml or entityscope.json)

    Returns:
        Loaded and validated configuration

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config file format is invalid
    """
    import json

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    suffix = config_path.suffix.lower()

    if suffix in {".yaml", ".yml"}:
        import yaml

        with open(config_path) as f:
            data = yaml.safe_load(f)
    elif suffix == ".json":
        with open(config_path) as f:
            data = json.load(f)
    else:
        raise ValueError(f"Unsupported config format: {suffix}. Use .yaml, .yml, or .json")

    config = EntityscopeConfig(**(data or {}))

    # Relative paths are relative to the config file
    return config.resolve_paths(config_path.parent)


def find_config(start_dir: Path | None = None) -> Path | None:
    """Find config file by searching up the directory tree.

    Searches for entityscope.yaml, entityscope.yml, or entityscope.json.

    Args:
        start_dir: Directory to start searching from (defaults to cwd)

    Returns:
        Path to config file if found, None otherwise
    """
    current = (start_dir or Path.cwd()).resolve()

    while True:
        for name in ["entityscope.yaml", "entityscope.yml", "entityscope.json"]:
            config_path = current / name
            if config_path.exists():
                return config_path

        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def build_connection_string(config: EntityscopeConfig) -> str:
    """Build database connection URL from config.

    Args:
        config: entityscope configuration

    Returns:
        Connection URL accepted by ``entityscope.db.connect``
    """
    if not config.connection:
        return "duckdb:///:memory:"

    if isinstance(config.connection, DuckDBConnection):
        path = config.connection.path
        if path == ":memory:":
            return "duckdb:///:memory:"
        # The URL path is taken verbatim, so absolute paths keep their leading slash
        return f"duckdb://{path}"
    elif isinstance(config.connection, PostgreSQLConnection):
        password_part = f":{config.connection.password}" if config.connection.password else ""
        return (
            f"postgres://{config.connection.username}{password_part}@"
            f"{config.connection.host}:{config.connection.port}/{config.connection.database}"
        )
    else:
        raise ValueError(f"Unknown connection type: {type(config.connection)}")
