"""Tests for the entityscope CLI."""

import json

import duckdb
import pytest
from typer.testing import CliRunner

from entityscope import __version__
from entityscope.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Run every command away from any entityscope.yaml in the repository."""
    monkeypatch.chdir(tmp_path)


def _invoke_to_file(tmp_path, args: list[str]) -> dict:
    output = tmp_path / "graph.json"
    result = runner.invoke(app, [*args, "--output", str(output)])
    assert result.exit_code == 0, result.output
    return json.loads(output.read_text())


def test_version():
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert f"entityscope {__version__}" in result.output


def test_json_command(tmp_path, fixtures_dir):
    data = _invoke_to_file(tmp_path, ["json", str(fixtures_dir / "blog.json")])

    assert list(data) == ["User", "Post"]
    assert data["User"]["sequence"] == 1
    assert data["Post"]["sequence"] == 2
    assert data["Post"]["relationships"]["user"]["foreign_key"] == "user_id"


def test_start_sequence(tmp_path, fixtures_dir):
    data = _invoke_to_file(tmp_path, ["json", str(fixtures_dir / "blog.json"), "--start-sequence", "10"])

    assert [entity["sequence"] for entity in data.values()] == [10, 11]


def test_json_command_prints_to_stdout(fixtures_dir):
    result = runner.invoke(app, ["json", str(fixtures_dir / "blog.json")])

    assert result.exit_code == 0
    assert '"User"' in result.output
    assert '"has_author_link"' in result.output


def test_openapi_command(tmp_path, fixtures_dir):
    data = _invoke_to_file(tmp_path, ["openapi", str(fixtures_dir / "openapi.yaml")])

    assert set(data) == {"User", "Post"}


def test_postman_command(tmp_path, fixtures_dir):
    data = _invoke_to_file(tmp_path, ["postman", str(fixtures_dir / "postman_collection.json")])

    assert "User" in data
    assert "created_at" in data["User"]["fields"]


def test_database_command(tmp_path):
    db_path = tmp_path / "app.duckdb"
    conn = duckdb.connect(str(db_path))
    conn.execute("CREATE TABLE authors (id INTEGER PRIMARY KEY, name VARCHAR)")
    conn.execute("CREATE TABLE posts (id INTEGER PRIMARY KEY, author_id INTEGER, title VARCHAR)")
    conn.close()

    data = _invoke_to_file(tmp_path, ["database", "authors,posts", "--connection", f"duckdb://{db_path}"])

    assert set(data) == {"Author", "Post"}
    assert data["Author"]["relationships"]["posts"]["type"] == "to_many"


def test_database_command_uses_config(tmp_path):
    db_path = tmp_path / "app.duckdb"
    conn = duckdb.connect(str(db_path))
    conn.execute("CREATE TABLE audit_log (id INTEGER)")
    conn.execute("CREATE TABLE teams (id INTEGER)")
    conn.close()
    (tmp_path / "entityscope.yaml").write_text(
        "connection:\n  type: duckdb\n  path: app.duckdb\nexcluded_tables:\n  - audit_log\n"
    )

    data = _invoke_to_file(tmp_path, ["database"])

    assert set(data) == {"Team"}


def test_infer_directory(tmp_path, fixtures_dir):
    sources = tmp_path / "sources"
    sources.mkdir()
    (sources / "blog.json").write_text((fixtures_dir / "blog.json").read_text())

    data = _invoke_to_file(tmp_path, ["infer", str(sources)])

    assert set(data) == {"User", "Post"}


def test_errors_exit_non_zero(tmp_path):
    bad = tmp_path / "bad.yaml"
    bad.write_text("info:\n  title: nothing\n")

    result = runner.invoke(app, ["openapi", str(bad)])

    assert result.exit_code == 1
    assert "Error: Invalid OpenAPI/Swagger specification" in result.output


def test_missing_file(tmp_path):
    result = runner.invoke(app, ["json", str(tmp_path / "missing.json")])

    assert result.exit_code == 1
    assert "Not found" in result.output


def test_unsupported_database_url():
    result = runner.invoke(app, ["database", "--connection", "mysql://localhost/app"])

    assert result.exit_code == 1
    assert "Unsupported database URL" in result.output
