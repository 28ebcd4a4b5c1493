"""pg-dump-sample: Partial, foreign-key ordered PostgreSQL data dumps.

Dumps a manifest-defined subset of tables (optionally filtered by query)
as a psql script.  Tables referenced through foreign keys are added and
ordered automatically so the script loads into an empty schema.

Usage:
    from pg_dump_sample import PostgresAdapter, load_manifest, make_dump

    manifest = load_manifest("manifest.yml")
    with PostgresAdapter("dbname=shop") as adapter:
        with open("sample.sql", "wb") as sink:
            make_dump(adapter, manifest, sink)
"""

__version__ = "0.1.0"

# Adapters
from pg_dump_sample.adapters.base import DatabaseClient
from pg_dump_sample.adapters.postgres import PostgresAdapter

# Config
from pg_dump_sample.config.loader import load_db_config
from pg_dump_sample.config.models import ConnectionSettings, DatabaseConfig, DatabaseProfile

# Factory
from pg_dump_sample.factory import build_conninfo, connect, get_profile, resolve_url

# Manifest
from pg_dump_sample.manifest.iterator import ManifestIterator
from pg_dump_sample.manifest.loader import load_manifest, parse_manifest
from pg_dump_sample.manifest.models import Manifest, ManifestItem

# Schema
from pg_dump_sample.schema.introspector import SchemaIntrospector

# Dump
from pg_dump_sample.dump.template import QueryTemplate
from pg_dump_sample.dump.writer import DumpSummary, make_dump

# Errors
from pg_dump_sample.exceptions import (
    ConnectionFailedError,
    CycleError,
    DumpError,
    ManifestError,
    MetadataError,
    ProfileNotFoundError,
    StreamError,
    TemplateError,
)

__all__ = [
    # Adapters
    "DatabaseClient",
    "PostgresAdapter",
    # Config
    "load_db_config",
    "ConnectionSettings",
    "DatabaseConfig",
    "DatabaseProfile",
    # Factory
    "build_conninfo",
    "connect",
    "get_profile",
    "resolve_url",
    # Manifest
    "Manifest",
    "ManifestItem",
    "ManifestIterator",
    "load_manifest",
    "parse_manifest",
    # Schema
    "SchemaIntrospector",
    # Dump
    "make_dump",
    "DumpSummary",
    "QueryTemplate",
    # Errors
    "DumpError",
    "ManifestError",
    "MetadataError",
    "TemplateError",
    "StreamError",
    "CycleError",
    "ConnectionFailedError",
    "ProfileNotFoundError",
]
