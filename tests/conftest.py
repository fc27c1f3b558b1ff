"""Pytest configuration and fixtures."""

import json
from pathlib import Path

import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def fixtures_dir() -> Path:
    """Directory holding sample sources."""
    return FIXTURES_DIR


@pytest.fixture
def blog_payload() -> dict:
    """Users with nested posts, the canonical sample payload."""
    return json.loads((FIXTURES_DIR / "blog.json").read_text())


@pytest.fixture
def duckdb_adapter():
    """In-memory DuckDB backend, closed after the test."""
    from entityscope.db.duckdb import DuckDBAdapter

    adapter = DuckDBAdapter()
    yield adapter
    adapter.close()
