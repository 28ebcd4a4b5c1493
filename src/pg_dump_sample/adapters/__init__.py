"""Database adapters package.

Provides the ``DatabaseClient`` Protocol and the psycopg-backed
``PostgresAdapter`` implementation.

Usage:
    from pg_dump_sample.adapters import DatabaseClient, PostgresAdapter
"""

from pg_dump_sample.adapters.base import DatabaseClient
from pg_dump_sample.adapters.postgres import PostgresAdapter

__all__ = [
    "DatabaseClient",
    "PostgresAdapter",
]
