"""Declarative dump manifests: models, YAML loading, and dependency ordering.

Usage:
    from pg_dump_sample.manifest import Manifest, ManifestItem
    from pg_dump_sample.manifest import load_manifest, parse_manifest
    from pg_dump_sample.manifest import ManifestIterator
"""

from pg_dump_sample.manifest.iterator import ManifestIterator
from pg_dump_sample.manifest.loader import load_manifest, parse_manifest
from pg_dump_sample.manifest.models import Manifest, ManifestItem

__all__ = [
    "Manifest",
    "ManifestItem",
    "ManifestIterator",
    "load_manifest",
    "parse_manifest",
]
