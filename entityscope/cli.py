"""CLI for inferring entity graphs from sample data, API specs and databases."""

import json
import logging
from pathlib import Path

import typer

from entityscope import __version__
from entityscope.config import EntityscopeConfig, build_connection_string, find_config, load_config
from entityscope.core.assembler import assemble
from entityscope.core.entity_graph import EntityGraph
from entityscope.errors import EntityscopeError


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"entityscope {__version__}")
        raise typer.Exit()


app = typer.Typer(
    help="entityscope: infer entity-relationship models from JSON, API specs and databases",
    no_args_is_help=True,
)

# Global state for config (set in callback, used in commands)
_loaded_config: EntityscopeConfig | None = None

OutputOption = typer.Option(None, "--output", "-o", help="Write the graph JSON to this file instead of stdout")
VerboseOption = typer.Option(False, "--verbose", help="Log traversal decisions")
StartOption = typer.Option(1, "--start-sequence", help="First sequence number assigned to entities")


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True, help="Show version"
    ),
    config: Path = typer.Option(None, "--config", "-c", help="Path to config file (entityscope.yaml)"),
):
    """entityscope CLI.

    You can use a config file (entityscope.yaml or entityscope.json) to set default values.
    CLI arguments override config file values.
    """
    global _loaded_config

    config_path = config or find_config()
    _loaded_config = None

    if config_path:
        try:
            _loaded_config = load_config(config_path)
            typer.echo(f"Loaded config from: {config_path}", err=True)
        except (OSError, ValueError) as e:
            typer.echo(f"Warning: Failed to load config: {e}", err=True)


def _config() -> EntityscopeConfig:
    return _loaded_config or EntityscopeConfig()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _emit(graph: EntityGraph, output: Path | None, start_sequence: int) -> None:
    """Assemble the graph and print it (or write it to ``output``)."""
    text = json.dumps(assemble(graph, start_sequence=start_sequence).to_dict(), indent=2)
    if output:
        output.write_text(text + "\n")
        typer.echo(f"Wrote {len(graph)} entities to {output}", err=True)
    else:
        typer.echo(text)


def _fail(error: Exception) -> None:
    typer.echo(f"Error: {error}", err=True)
    raise typer.Exit(1)


@app.command("json")
def json_command(
    source: str = typer.Argument(..., help="Path to a JSON file, or a JSON string"),
    output: Path = OutputOption,
    verbose: bool = VerboseOption,
    start_sequence: int = StartOption,
):
    """Infer entities from a sample JSON payload."""
    from entityscope.adapters.json_sample import JsonSampleAdapter

    _configure_logging(verbose)
    try:
        graph = JsonSampleAdapter().parse(source)
        _emit(graph, output, start_sequence)
    except EntityscopeError as e:
        _fail(e)


@app.command()
def openapi(
    source: Path = typer.Argument(..., help="Path to an OpenAPI 3.x or Swagger 2.x document (YAML or JSON)"),
    output: Path = OutputOption,
    verbose: bool = VerboseOption,
    start_sequence: int = StartOption,
):
    """Infer entities from OpenAPI/Swagger schema definitions."""
    from entityscope.adapters.openapi import OpenAPIAdapter

    _configure_logging(verbose)
    try:
        graph = OpenAPIAdapter().parse(source)
        _emit(graph, output, start_sequence)
    except EntityscopeError as e:
        _fail(e)


@app.command()
def postman(
    source: Path = typer.Argument(..., help="Path to a Postman v2 collection"),
    output: Path = OutputOption,
    verbose: bool = VerboseOption,
    start_sequence: int = StartOption,
):
    """Infer entities from a Postman collection."""
    from entityscope.adapters.postman import PostmanAdapter

    _configure_logging(verbose)
    try:
        graph = PostmanAdapter().parse(source)
        _emit(graph, output, start_sequence)
    except EntityscopeError as e:
        _fail(e)


@app.command()
def database(
    tables: str = typer.Argument("*", help='Comma-separated table names, or "*" for all tables'),
    connection: str = typer.Option(
        None, "--connection", help="Database URL (duckdb:///path.db, postgres://...); defaults to the config file"
    ),
    output: Path = OutputOption,
    verbose: bool = VerboseOption,
    start_sequence: int = StartOption,
):
    """Infer entities from a live database schema."""
    from entityscope.adapters.database import DatabaseAdapter
    from entityscope.db import connect

    _configure_logging(verbose)
    config = _config()
    url = connection or build_connection_string(config)

    try:
        db = connect(url)
    except (EntityscopeError, ValueError) as e:
        _fail(e)

    try:
        graph = DatabaseAdapter(db, excluded_tables=set(config.excluded_tables)).parse(tables)
        _emit(graph, output, start_sequence)
    except EntityscopeError as e:
        _fail(e)
    finally:
        db.close()


@app.command()
def url(
    urls: list[str] = typer.Argument(..., help="One or more http(s) URLs returning JSON"),
    token: str = typer.Option(None, "--token", help="Authorization token"),
    token_type: str = typer.Option(None, "--token-type", help="Authorization scheme (default: Bearer)"),
    timeout: float = typer.Option(None, "--timeout", help="Request timeout in seconds"),
    output: Path = OutputOption,
    verbose: bool = VerboseOption,
    start_sequence: int = StartOption,
):
    """Infer entities from live API responses."""
    from entityscope.adapters.api_url import ApiUrlAdapter

    _configure_logging(verbose)
    settings = _config().api
    adapter = ApiUrlAdapter(
        token=token or settings.token,
        token_type=token_type or settings.token_type,
        timeout=timeout or settings.timeout,
        user_agent=settings.user_agent,
    )

    try:
        graph = adapter.parse_multiple(urls)
        _emit(graph, output, start_sequence)
    except EntityscopeError as e:
        _fail(e)


@app.command()
def infer(
    path: Path = typer.Argument(..., help="Source file or directory; the format is detected automatically"),
    output: Path = OutputOption,
    verbose: bool = VerboseOption,
    start_sequence: int = StartOption,
):
    """Infer entities from a file or every source file in a directory."""
    from entityscope.loaders import load_from_directory, load_source

    _configure_logging(verbose)
    try:
        graph = load_from_directory(path) if path.is_dir() else load_source(path)
        _emit(graph, output, start_sequence)
    except EntityscopeError as e:
        _fail(e)


if __name__ == "__main__":
    app()
