"""Tests for PostgresAdapter against a mocked psycopg connection."""

import io
from unittest.mock import MagicMock, patch

import pytest
from psycopg import IsolationLevel

from pg_dump_sample.adapters.postgres import PostgresAdapter


def _mock_connection(copy_blocks=(), rows=()):
    conn = MagicMock()
    cursor = conn.cursor.return_value.__enter__.return_value
    cursor.fetchall.return_value = list(rows)
    copy = cursor.copy.return_value.__enter__.return_value
    copy.__iter__.return_value = iter(copy_blocks)
    return conn, cursor


class TestPostgresAdapter:
    """Connection setup, queries, and COPY streaming."""

    def test_connect_opens_read_only_snapshot(self):
        conn, _ = _mock_connection()
        with patch("pg_dump_sample.adapters.postgres.psycopg.connect", return_value=conn) as connect:
            adapter = PostgresAdapter("dbname=shop", connect_timeout=5)
            adapter.connect()

        connect.assert_called_once_with("dbname=shop", connect_timeout=5)
        assert conn.isolation_level == IsolationLevel.REPEATABLE_READ
        assert conn.read_only is True

    def test_connect_is_idempotent(self):
        conn, _ = _mock_connection()
        with patch("pg_dump_sample.adapters.postgres.psycopg.connect", return_value=conn) as connect:
            adapter = PostgresAdapter("dbname=shop")
            adapter.connect()
            adapter.connect()
        connect.assert_called_once()

    def test_not_connected(self):
        with pytest.raises(RuntimeError, match="not connected"):
            PostgresAdapter("dbname=shop").query("SELECT 1")

    def test_query(self):
        conn, cursor = _mock_connection(rows=[("id",), ("name",)])
        with patch("pg_dump_sample.adapters.postgres.psycopg.connect", return_value=conn):
            with PostgresAdapter("dbname=shop") as adapter:
                rows = adapter.query("SELECT attname FROM t WHERE x = %s", ("users",))

        assert rows == [("id",), ("name",)]
        cursor.execute.assert_called_once_with("SELECT attname FROM t WHERE x = %s", ("users",))
        conn.close.assert_called_once()

    def test_copy_to_streams_blocks(self):
        conn, cursor = _mock_connection(copy_blocks=[b"1\ta\n", b"2\tb\n"])
        sink = io.BytesIO()
        with patch("pg_dump_sample.adapters.postgres.psycopg.connect", return_value=conn):
            with PostgresAdapter("dbname=shop") as adapter:
                written = adapter.copy_to(sink, "COPY users TO STDOUT")

        cursor.copy.assert_called_once_with("COPY users TO STDOUT")
        assert sink.getvalue() == b"1\ta\n2\tb\n"
        assert written == 8

    def test_test_connection(self):
        conn, _ = _mock_connection(rows=[(1,)])
        with patch("pg_dump_sample.adapters.postgres.psycopg.connect", return_value=conn):
            with PostgresAdapter("dbname=shop") as adapter:
                assert adapter.test_connection() is True

    def test_close_without_connect(self):
        PostgresAdapter("dbname=shop").close()
