"""PostgreSQL schema introspection via pg_catalog.

This module queries the live database for the two facts the dump engine
needs about a table:
- Its column names, in physical order, skipping dropped columns
- The tables it references through foreign-key constraints

Table names are resolved with a ``::regclass`` cast, so they follow the
session's ``search_path`` and may be schema-qualified.
"""

import logging

import psycopg

from pg_dump_sample.adapters.base import DatabaseClient
from pg_dump_sample.exceptions import MetadataError

logger = logging.getLogger(__name__)


class SchemaIntrospector:
    """Introspects table metadata for the dump engine.

    Usage:
        introspector = SchemaIntrospector(client)

        # Physical column order, used when the manifest lists no columns
        columns = introspector.get_table_columns("orders")

        # Referenced tables, in constraint definition order
        deps = introspector.get_table_dependencies("orders")
    """

    COLUMNS_QUERY = """
        SELECT attname
        FROM pg_catalog.pg_attribute
        WHERE attrelid = %s::regclass
          AND attnum > 0
          AND NOT attisdropped
        ORDER BY attnum
    """

    # Constraints come back in OID order, i.e. the order they were defined.
    # The dependency resolver relies on this order and never re-sorts it.
    DEPENDENCIES_QUERY = """
        SELECT confrelid::regclass::text
        FROM pg_catalog.pg_constraint
        WHERE conrelid = %s::regclass
          AND contype = 'f'
        ORDER BY oid
    """

    def __init__(self, client: DatabaseClient):
        """Initialize with a database client.

        Args:
            client: Connected client implementing ``DatabaseClient``
        """
        self._client = client

    def get_table_columns(self, table: str) -> list[str]:
        """Get the column names of a table in physical order.

        Args:
            table: Table name, optionally schema-qualified

        Returns:
            Column names ordered by attribute number

        Raises:
            MetadataError: If the table does not exist or the lookup fails
        """
        try:
            rows = self._client.query(self.COLUMNS_QUERY, (table,))
        except psycopg.Error as e:
            raise MetadataError(str(e).strip(), table=table, phase="columns") from e

        columns = [row[0] for row in rows]
        if not columns:
            raise MetadataError("table has no columns", table=table, phase="columns")
        return columns

    def get_table_dependencies(self, table: str) -> list[str]:
        """Get the tables referenced by a table's foreign keys.

        Several constraints pointing at the same table collapse into one
        entry, kept at the position of the first constraint.

        Args:
            table: Table name, optionally schema-qualified

        Returns:
            Referenced table names, in constraint definition order

        Raises:
            MetadataError: If the table does not exist or the lookup fails
        """
        try:
            rows = self._client.query(self.DEPENDENCIES_QUERY, (table,))
        except psycopg.Error as e:
            raise MetadataError(
                str(e).strip(), table=table, phase="dependencies"
            ) from e

        deps = list(dict.fromkeys(row[0] for row in rows))
        if deps:
            logger.debug(f"{table} references {', '.join(deps)}")
        return deps
