"""Tests for configuration loading."""

import json

import pytest
import yaml

from entityscope.config import (
    ApiSettings,
    DuckDBConnection,
    EntityscopeConfig,
    PostgreSQLConnection,
    build_connection_string,
    find_config,
    load_config,
)


def test_defaults():
    config = EntityscopeConfig()

    assert config.connection is None
    assert "migrations" in config.excluded_tables
    assert config.api == ApiSettings()
    assert config.api.timeout == 30.0
    assert config.api.token_type == "Bearer"
    assert build_connection_string(config) == "duckdb:///:memory:"


def test_load_yaml_resolves_relative_duckdb_path(tmp_path):
    config_path = tmp_path / "entityscope.yaml"
    config_path.write_text(
        yaml.safe_dump(
            {
                "connection": {"type": "duckdb", "path": "data/app.duckdb"},
                "excluded_tables": ["audit_log"],
                "api": {"timeout": 5, "token": "secret"},
            }
        )
    )

    config = load_config(config_path)

    assert isinstance(config.connection, DuckDBConnection)
    assert config.connection.path == str((tmp_path / "data" / "app.duckdb").resolve())
    assert config.excluded_tables == ["audit_log"]
    assert config.api.timeout == 5.0
    assert config.api.token == "secret"
    assert build_connection_string(config) == f"duckdb://{config.connection.path}"


def test_load_json_postgres(tmp_path):
    config_path = tmp_path / "entityscope.json"
    config_path.write_text(
        json.dumps(
            {
                "connection": {
                    "type": "postgres",
                    "host": "db",
                    "database": "app",
                    "username": "app",
                    "password": "pw",
                }
            }
        )
    )

    config = load_config(config_path)

    assert isinstance(config.connection, PostgreSQLConnection)
    assert build_connection_string(config) == "postgres://app:pw@db:5432/app"


def test_empty_yaml_is_default(tmp_path):
    config_path = tmp_path / "entityscope.yml"
    config_path.write_text("")

    assert load_config(config_path) == EntityscopeConfig()


def test_load_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml")

    other = tmp_path / "entityscope.toml"
    other.write_text("")
    with pytest.raises(ValueError, match="Unsupported config format"):
        load_config(other)


def test_memory_duckdb_is_not_resolved():
    config = EntityscopeConfig(connection=DuckDBConnection(path=":memory:")).resolve_paths()

    assert config.connection.path == ":memory:"
    assert build_connection_string(config) == "duckdb:///:memory:"


def test_find_config_searches_upwards(tmp_path):
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)
    config_path = tmp_path / "entityscope.yaml"
    config_path.write_text("excluded_tables: []\n")

    assert find_config(nested) == config_path.resolve()
    assert find_config(tmp_path / "a") == config_path.resolve()
