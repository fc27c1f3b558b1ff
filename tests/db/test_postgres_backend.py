"""Tests for the PostgreSQL backend (fake connection, no server needed)."""

import pytest

from entityscope.db.postgres import PostgreSQLAdapter


class FakeCursor:
    def __init__(self, calls, rows):
        self.calls = calls
        self.rows = rows

    def execute(self, sql, params=None):
        self.calls.append((sql, params))

    def fetchall(self):
        return self.rows


class FakeConnection:
    def __init__(self, rows):
        self.calls = []
        self.rows = rows

    def cursor(self):
        return FakeCursor(self.calls, self.rows)


def _adapter(rows) -> PostgreSQLAdapter:
    adapter = PostgreSQLAdapter.__new__(PostgreSQLAdapter)
    adapter.conn = FakeConnection(rows)
    return adapter


def test_quoted_table_names_are_bound_as_parameters():
    adapter = _adapter([("sku", "character varying", "NO", None, None, None)])

    columns = adapter.get_columns("order-items", schema="sales")

    assert columns == [{"column_name": "sku", "data_type": "character varying", "nullable": False, "default": None}]
    sql, params = adapter.conn.calls[-1]
    assert params == ["order-items", "sales"]
    assert "order-items" not in sql


def test_numeric_columns_carry_precision():
    adapter = _adapter([("price", "numeric", "YES", None, 10, 2)])

    assert adapter.get_columns("products")[0]["data_type"] == "numeric(10,2)"


def test_indexes_for_quoted_table():
    adapter = _adapter([("order-items_pkey", True, True, ["id"])])

    assert adapter.get_indexes("order-items") == [
        {"name": "order-items_pkey", "columns": ["id"], "unique": True, "primary": True}
    ]
    assert adapter.conn.calls[-1][1] == ["order-items", None]


def test_from_url_rejects_other_schemes():
    with pytest.raises(ValueError, match="Invalid PostgreSQL URL"):
        PostgreSQLAdapter.from_url("mysql://localhost/db")
