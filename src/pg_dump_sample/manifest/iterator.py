"""Dependency-ordered iteration over a manifest.

``ManifestIterator`` yields manifest entries so that every table comes
after all tables it references through foreign keys.  Tables reached
through a foreign key but missing from the manifest get a default entry
(whole table, all columns, no post actions).

The walk is depth-first.  Popping a table whose referenced tables are not
emitted yet defers it: the outstanding tables are pushed in front of it
and the table is retried once they are out.  A table that is reached again
while it is still deferred closes a foreign-key cycle, which cannot be
loaded in any order, so the iterator raises ``CycleError``.

Ordering rules:
- Tables without dependencies between them keep manifest order.
- The referenced tables of one table are visited in the order the
  introspector reports them (constraint definition order), unsorted.
- A table declared twice keeps its first position and its last entry.

Usage:
    from pg_dump_sample.manifest.iterator import ManifestIterator

    for item in ManifestIterator(manifest, introspector):
        print(item.table)
"""

import logging
from collections import deque
from collections.abc import Iterator

from pg_dump_sample.exceptions import CycleError
from pg_dump_sample.manifest.models import Manifest, ManifestItem
from pg_dump_sample.schema.introspector import SchemaIntrospector

logger = logging.getLogger(__name__)


class ManifestIterator(Iterator[ManifestItem]):
    """Lazily resolve a manifest into foreign-key load order.

    Each ``next()`` call does only the catalog lookups needed to find the
    next table, so the caller can stream one table completely before the
    next lookup happens.  An iterator is good for one pass only.

    Args:
        manifest: The manifest to resolve.
        introspector: Source of foreign-key dependencies.

    Raises (from ``next()``):
        MetadataError: If a dependency lookup fails.
        CycleError: If the reachable tables reference each other in a loop.
    """

    def __init__(self, manifest: Manifest, introspector: SchemaIntrospector) -> None:
        self._manifest = manifest
        self._introspector = introspector

        self._todo: dict[str, ManifestItem] = manifest.items_by_table()
        self._done: dict[str, ManifestItem] = {}
        self._pending: deque[str] = deque(manifest.table_names())

        # Tables set aside until their dependencies are emitted, and which
        # deferred table pushed each dependency (for cycle reporting).
        self._waiting: set[str] = set()
        self._pushed_by: dict[str, str] = {}

    def __iter__(self) -> "ManifestIterator":
        return self

    def __next__(self) -> ManifestItem:
        while self._pending:
            table = self._pending.popleft()
            if table not in self._todo:
                continue

            outstanding = self._outstanding_dependencies(table)
            if outstanding:
                self._defer(table, outstanding)
                continue

            item = self._todo.pop(table)
            self._done[table] = item
            self._waiting.discard(table)
            return item

        raise StopIteration

    @property
    def emitted(self) -> list[str]:
        """Table names returned so far, in emission order."""
        return list(self._done)

    def _outstanding_dependencies(self, table: str) -> list[str]:
        """Referenced tables of *table* that still have to be emitted."""
        outstanding: list[str] = []
        for dep in self._introspector.get_table_dependencies(table):
            if dep not in self._todo and dep not in self._done:
                logger.debug(f"Adding {dep} (referenced by {table}) with default settings")
                self._todo[dep] = ManifestItem(table=dep)
            if dep in self._todo and dep != table:
                outstanding.append(dep)
        return outstanding

    def _defer(self, table: str, outstanding: list[str]) -> None:
        for dep in outstanding:
            if dep in self._waiting:
                raise CycleError(self._cycle_path(table, dep))

        logger.debug(f"Deferring {table} until {', '.join(outstanding)} are dumped")
        self._waiting.add(table)
        for dep in outstanding:
            self._pushed_by[dep] = table
        self._pending.extendleft(reversed([*outstanding, table]))

    def _cycle_path(self, table: str, dep: str) -> list[str]:
        """Reconstruct ``dep -> ... -> table -> dep`` from the push chain."""
        path = [table]
        current = table
        while current != dep:
            current = self._pushed_by.get(current)
            if current is None or current in path:
                return [dep, table, dep]
            path.append(current)
        path.reverse()
        path.append(dep)
        return path
