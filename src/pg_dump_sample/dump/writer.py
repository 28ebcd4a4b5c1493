"""Dump writer: render resolved manifest entries as a psql script.

The output is a single transaction of ``COPY ... FROM stdin`` blocks in
foreign-key load order, framed the way ``pg_dump`` frames plain-text data
dumps so it can be replayed with ``psql -f``.

Row data is never parsed or re-encoded here: each table's rows are
streamed from ``COPY ... TO STDOUT`` straight into the output sink.

Usage:
    from pg_dump_sample.dump.writer import make_dump

    with open("sample.sql", "wb") as sink:
        summary = make_dump(client, manifest, sink)
    print(summary.tables)
"""

import logging
from typing import BinaryIO

import psycopg
from pydantic import BaseModel, Field

from pg_dump_sample.adapters.base import DatabaseClient
from pg_dump_sample.dump.template import QueryTemplate
from pg_dump_sample.exceptions import StreamError
from pg_dump_sample.manifest.iterator import ManifestIterator
from pg_dump_sample.manifest.models import Manifest, ManifestItem
from pg_dump_sample.schema.introspector import SchemaIntrospector

logger = logging.getLogger(__name__)


BEGIN_DUMP = """
--
-- PostgreSQL database dump
--

BEGIN;

SET statement_timeout = 0;
SET lock_timeout = 0;
SET client_encoding = 'UTF8';
SET standard_conforming_strings = on;
SET check_function_bodies = false;
SET client_min_messages = warning;

SET search_path = public, pg_catalog;

"""

END_DUMP = """
COMMIT;

--
-- PostgreSQL database dump complete
--
"""

BEGIN_TABLE_DUMP = """
--
-- Data for Name: {table}; Type: TABLE DATA
--

COPY {table} ({columns}) FROM stdin;
"""

END_TABLE_DUMP = "\\.\n"

SQL_CMD_DUMP = "\n{statement};\n"


def quote_ident(name: str) -> str:
    """Quote a column name as a SQL identifier."""
    return '"' + name.replace('"', '""') + '"'


class DumpSummary(BaseModel):
    """Result of a completed dump.

    Attributes:
        tables: Tables written, in output order.
        added_tables: Tables written with default settings because a
            dumped table references them but the manifest does not list them.
        bytes_written: Row data bytes streamed from the database (framing
            and post actions excluded).
    """

    tables: list[str] = Field(default_factory=list)
    added_tables: list[str] = Field(default_factory=list)
    bytes_written: int = 0


class DumpWriter:
    """Write the dump document for one run into a binary sink.

    Args:
        client: Database client used for row export.
        sink: Binary file-like object receiving the document.
        introspector: Column lookup for entries without explicit columns.
        template: Renderer for manifest queries.
    """

    def __init__(
        self,
        client: DatabaseClient,
        sink: BinaryIO,
        introspector: SchemaIntrospector,
        template: QueryTemplate | None = None,
    ) -> None:
        self._client = client
        self._sink = sink
        self._introspector = introspector
        self._template = template or QueryTemplate()

    def begin_dump(self) -> None:
        self._write(BEGIN_DUMP)

    def end_dump(self) -> None:
        self._write(END_DUMP)

    def write_table(self, item: ManifestItem, variables: dict[str, str]) -> int:
        """Write one table's data block followed by its post actions.

        Returns:
            Number of row data bytes streamed.

        Raises:
            MetadataError: If the column lookup fails.
            TemplateError: If the query template cannot be rendered.
            StreamError: If the export or a write fails.
        """
        columns = list(item.columns or self._introspector.get_table_columns(item.table))
        column_list = ", ".join(quote_ident(col) for col in columns)

        # Render before writing the header so a bad template leaves no
        # dangling COPY block behind.
        if item.query is None:
            copy_sql = f"COPY {item.table} ({column_list}) TO STDOUT"
        else:
            query = self._template.render(item.query, variables, table=item.table)
            # Closing paren on its own line: the query may end in a -- comment.
            copy_sql = f"COPY ({query.strip().rstrip(';')}\n) TO STDOUT"

        self._write(BEGIN_TABLE_DUMP.format(table=item.table, columns=column_list), item.table)
        written = self._copy(item.table, copy_sql)
        self._write(END_TABLE_DUMP, item.table)

        for statement in item.post_actions:
            self._write(SQL_CMD_DUMP.format(statement=statement), item.table)

        return written

    def _copy(self, table: str, copy_sql: str) -> int:
        try:
            return self._client.copy_to(self._sink, copy_sql)
        except psycopg.Error as e:
            raise StreamError(str(e).strip(), table=table, phase="copy") from e
        except OSError as e:
            raise StreamError(str(e), table=table, phase="write") from e

    def _write(self, text: str, table: str | None = None) -> None:
        try:
            self._sink.write(text.encode("utf-8"))
        except OSError as e:
            raise StreamError(str(e), table=table, phase="write") from e


def make_dump(
    client: DatabaseClient,
    manifest: Manifest,
    sink: BinaryIO,
    introspector: SchemaIntrospector | None = None,
    template: QueryTemplate | None = None,
) -> DumpSummary:
    """Dump the manifest's tables, in foreign-key order, into *sink*.

    Tables are resolved and written one at a time: each table's metadata
    lookup, header, rows, and post actions are complete before the next
    table is resolved.  The first failure stops the run and propagates;
    whatever was written up to that point stays in *sink* without the
    closing ``COMMIT``.

    Args:
        client: Connected database client.
        manifest: Tables to dump.
        sink: Binary file-like object receiving the document.
        introspector: Metadata source; built from *client* when omitted.
        template: Query renderer; default ``{{name}}`` delimiters when omitted.

    Returns:
        ``DumpSummary`` of the written tables.

    Raises:
        MetadataError: If a column or dependency lookup fails.
        TemplateError: If a query template cannot be rendered.
        StreamError: If an export or a write fails.
        CycleError: If the tables' foreign keys form a cycle.

    Example:
        summary = make_dump(adapter, load_manifest("manifest.yml"), sys.stdout.buffer)
    """
    introspector = introspector or SchemaIntrospector(client)
    writer = DumpWriter(client, sink, introspector, template)
    declared = set(manifest.table_names())
    summary = DumpSummary()

    writer.begin_dump()

    for item in ManifestIterator(manifest, introspector):
        logger.info(f"Dumping {item.table}")
        summary.bytes_written += writer.write_table(item, manifest.vars)
        summary.tables.append(item.table)
        if item.table not in declared:
            summary.added_tables.append(item.table)

    writer.end_dump()

    return summary
