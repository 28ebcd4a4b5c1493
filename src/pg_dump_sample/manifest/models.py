"""Manifest models for declarative partial dumps.

A manifest names the tables to dump and, per table, how to select its
rows.  Tables referenced by foreign keys but missing from the manifest are
added by the dump engine automatically, so the manifest only lists what
needs special treatment.

Usage:
    from pg_dump_sample.manifest.models import Manifest, ManifestItem

    manifest = Manifest(
        vars={"since": "2024-01-01"},
        tables=[
            ManifestItem(table="customers", columns=["id", "name"]),
            ManifestItem(
                table="orders",
                query="SELECT * FROM orders WHERE created_at >= '{{since}}'",
                post_actions=["SELECT setval('orders_id_seq', max(id)) FROM orders"],
            ),
        ],
    )
"""

from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ManifestItem(BaseModel):
    """One table entry of a manifest."""

    model_config = ConfigDict(frozen=True)

    table: str                                      # table name, may be schema-qualified
    query: str | None = None                        # row selection template
    columns: tuple[str, ...] | None = None          # explicit projection
    post_actions: tuple[str, ...] = ()              # statements emitted after the data

    @field_validator("table")
    @classmethod
    def _table_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("table name must not be empty")
        return value

    @field_validator("query", mode="before")
    @classmethod
    def _blank_query_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("columns", mode="before")
    @classmethod
    def _empty_columns_is_none(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)) and not value:
            return None
        return value

    @field_validator("post_actions", mode="before")
    @classmethod
    def _null_post_actions(cls, value: Any) -> Any:
        return () if value is None else value


class Manifest(BaseModel):
    """Decoded manifest: template variables plus ordered table entries."""

    model_config = ConfigDict(frozen=True)

    vars: dict[str, str] = Field(default_factory=dict)
    tables: tuple[ManifestItem, ...] = ()

    @field_validator("vars", mode="before")
    @classmethod
    def _stringify_vars(cls, value: Any) -> Any:
        if value is None:
            return {}
        if not isinstance(value, dict):
            return value
        result = {}
        for name, var in value.items():
            if var is None:
                var = ""
            elif isinstance(var, bool):
                var = str(var).lower()
            elif isinstance(var, (int, float, date)):
                var = str(var)
            result[name] = var
        return result

    @field_validator("tables", mode="before")
    @classmethod
    def _null_tables(cls, value: Any) -> Any:
        return () if value is None else value

    def table_names(self) -> list[str]:
        """Table names in declaration order, each listed once."""
        return list(dict.fromkeys(item.table for item in self.tables))

    def items_by_table(self) -> dict[str, ManifestItem]:
        """Map table name to its entry; a later duplicate replaces an earlier one."""
        return {item.table: item for item in self.tables}

    def duplicate_tables(self) -> list[str]:
        """Table names declared more than once."""
        seen: set[str] = set()
        duplicates: list[str] = []
        for item in self.tables:
            if item.table in seen and item.table not in duplicates:
                duplicates.append(item.table)
            seen.add(item.table)
        return duplicates
