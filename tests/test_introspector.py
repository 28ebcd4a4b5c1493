"""Tests for SchemaIntrospector catalog lookups."""

from unittest.mock import MagicMock

import psycopg
import pytest

from pg_dump_sample.adapters.base import DatabaseClient
from pg_dump_sample.exceptions import MetadataError
from pg_dump_sample.schema.introspector import SchemaIntrospector


def _make_client(rows=None, error=None) -> MagicMock:
    client = MagicMock(spec=DatabaseClient)
    if error is not None:
        client.query.side_effect = error
    else:
        client.query.return_value = rows or []
    return client


class TestGetTableColumns:
    """Column lookup in physical order."""

    def test_returns_names_in_order(self):
        client = _make_client([("id",), ("email",), ("created_at",)])
        columns = SchemaIntrospector(client).get_table_columns("users")

        assert columns == ["id", "email", "created_at"]
        sql, params = client.query.call_args.args
        assert "pg_attribute" in sql
        assert "NOT attisdropped" in sql
        assert "ORDER BY attnum" in sql
        assert params == ("users",)

    def test_schema_qualified_name_passed_through(self):
        client = _make_client([("id",)])
        SchemaIntrospector(client).get_table_columns("audit.events")
        assert client.query.call_args.args[1] == ("audit.events",)

    def test_no_columns_is_error(self):
        with pytest.raises(MetadataError) as exc_info:
            SchemaIntrospector(_make_client([])).get_table_columns("empty")

        assert exc_info.value.table == "empty"
        assert exc_info.value.phase == "columns"

    def test_database_error_wrapped(self):
        client = _make_client(
            error=psycopg.errors.UndefinedTable('relation "ghost" does not exist')
        )
        with pytest.raises(MetadataError) as exc_info:
            SchemaIntrospector(client).get_table_columns("ghost")

        assert str(exc_info.value) == 'table ghost, columns: relation "ghost" does not exist'
        assert isinstance(exc_info.value.__cause__, psycopg.errors.UndefinedTable)


class TestGetTableDependencies:
    """Foreign-key dependency lookup."""

    def test_constraint_order_preserved(self):
        client = _make_client([("users",), ("products",)])
        deps = SchemaIntrospector(client).get_table_dependencies("orders")

        assert deps == ["users", "products"]
        sql = client.query.call_args.args[0]
        assert "contype = 'f'" in sql
        assert "ORDER BY oid" in sql

    def test_repeated_targets_collapsed(self):
        client = _make_client([("users",), ("products",), ("users",)])
        assert SchemaIntrospector(client).get_table_dependencies("orders") == [
            "users",
            "products",
        ]

    def test_self_reference_reported(self):
        """Self references are filtered by the resolver, not here."""
        client = _make_client([("categories",)])
        assert SchemaIntrospector(client).get_table_dependencies("categories") == [
            "categories"
        ]

    def test_no_dependencies(self):
        assert SchemaIntrospector(_make_client([])).get_table_dependencies("users") == []

    def test_database_error_wrapped(self):
        client = _make_client(error=psycopg.OperationalError("server closed the connection"))
        with pytest.raises(MetadataError) as exc_info:
            SchemaIntrospector(client).get_table_dependencies("orders")

        assert exc_info.value.phase == "dependencies"
        assert exc_info.value.table == "orders"
