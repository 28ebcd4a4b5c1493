"""PostgreSQL database adapter.

Provides ``PostgresAdapter``, a synchronous implementation of the
``DatabaseClient`` protocol on top of psycopg 3.

Usage:
    from pg_dump_sample.adapters.postgres import PostgresAdapter

    with PostgresAdapter("host=/tmp dbname=shop") as adapter:
        rows = adapter.query("SELECT 1")
        adapter.copy_to(sink, "COPY users TO STDOUT")
"""

import logging
from collections.abc import Sequence
from typing import Any, BinaryIO

import psycopg
from psycopg import Connection, IsolationLevel

logger = logging.getLogger(__name__)


class PostgresAdapter:
    """psycopg 3 implementation of the ``DatabaseClient`` protocol.

    The connection runs every statement inside one read-only
    ``REPEATABLE READ`` transaction, so all tables in a dump are read from
    the same snapshot.  Nothing is ever committed.

    Args:
        conninfo: libpq connection string or ``postgresql://`` URL.
        connect_timeout: Seconds to wait for the server when connecting.

    Example:
        adapter = PostgresAdapter("postgresql://user@localhost/shop")
        adapter.connect()
        adapter.test_connection()
        adapter.close()
    """

    def __init__(self, conninfo: str, connect_timeout: int = 10) -> None:
        self._conninfo = conninfo
        self._connect_timeout = connect_timeout
        self._conn: Connection | None = None

    def __enter__(self) -> "PostgresAdapter":
        """Context manager entry - opens connection."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit - closes connection."""
        self.close()

    def connect(self) -> None:
        """Open the connection if it is not open yet.

        Raises:
            psycopg.OperationalError: If the server cannot be reached or
                rejects the credentials.
        """
        if self._conn is not None:
            return

        conn = psycopg.connect(self._conninfo, connect_timeout=self._connect_timeout)
        conn.isolation_level = IsolationLevel.REPEATABLE_READ
        conn.read_only = True
        self._conn = conn
        logger.debug(f"Connected to {conn.info.dbname} as {conn.info.user}")

    @property
    def connection(self) -> Connection:
        if self._conn is None:
            raise RuntimeError("Adapter not connected. Use with statement.")
        return self._conn

    # ------------------------------------------------------------------
    # DatabaseClient Methods
    # ------------------------------------------------------------------

    def query(self, sql: str, params: Sequence[Any] | None = None) -> list[tuple]:
        """Run a read query and return all rows."""
        with self.connection.cursor() as cur:
            cur.execute(sql, params)
            return cur.fetchall()

    def copy_to(self, sink: BinaryIO, sql: str) -> int:
        """Stream ``COPY ... TO STDOUT`` output into *sink*."""
        written = 0
        with self.connection.cursor() as cur:
            with cur.copy(sql) as copy:
                for block in copy:
                    sink.write(block)
                    written += len(block)
        return written

    def close(self) -> None:
        """Close the connection, discarding the open transaction."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    # ------------------------------------------------------------------
    # Connection Test
    # ------------------------------------------------------------------

    def test_connection(self) -> bool:
        """Test database connection health.

        Returns:
            ``True`` if ``SELECT 1`` succeeds.

        Raises:
            psycopg.Error: If the query fails.
        """
        rows = self.query("SELECT 1")
        return bool(rows) and rows[0][0] == 1
