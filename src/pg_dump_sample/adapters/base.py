"""Database client protocol definition.

Defines the ``DatabaseClient`` Protocol consumed by the dump engine.  The
engine needs only two capabilities from a database: running a read query
and streaming a ``COPY ... TO STDOUT`` export into a binary sink.

Usage:
    from pg_dump_sample.adapters.base import DatabaseClient

    def export(client: DatabaseClient, sink: BinaryIO) -> None:
        rows = client.query("SELECT relname FROM pg_class WHERE oid = %s", (oid,))
        client.copy_to(sink, "COPY users TO STDOUT")
        client.close()
"""

from collections.abc import Sequence
from typing import Any, BinaryIO, Protocol


class DatabaseClient(Protocol):
    """Database client interface that the dump engine depends on.

    Implementations are synchronous: every call blocks until the
    database has answered or the stream is drained.
    """

    def query(self, sql: str, params: Sequence[Any] | None = None) -> list[tuple]:
        """Run a read query and return all rows.

        Args:
            sql: SQL text with ``%s`` placeholders.
            params: Optional positional parameters for the placeholders.

        Returns:
            List of row tuples.  Empty list if no rows match.

        Example:
            rows = client.query(
                "SELECT attname FROM pg_attribute WHERE attrelid = %s::regclass",
                ("users",),
            )
        """
        ...

    def copy_to(self, sink: BinaryIO, sql: str) -> int:
        """Stream the output of a ``COPY ... TO STDOUT`` statement.

        Rows arrive in PostgreSQL's COPY text format and are written to
        *sink* unchanged, block by block, without buffering the whole
        result in memory.

        Args:
            sink: Binary file-like object receiving the row data.
            sql: A complete ``COPY ... TO STDOUT`` statement.

        Returns:
            Number of bytes written to *sink*.

        Example:
            written = client.copy_to(sys.stdout.buffer, "COPY users TO STDOUT")
        """
        ...

    def close(self) -> None:
        """Close the database connection."""
        ...
