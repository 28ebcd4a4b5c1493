"""Manifest loading from YAML."""

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from pg_dump_sample.exceptions import ManifestError
from pg_dump_sample.manifest.models import Manifest

logger = logging.getLogger(__name__)


def parse_manifest(text: str, source: str = "<manifest>") -> Manifest:
    """Decode a manifest from YAML text.

    Args:
        text: YAML document with optional ``vars`` and ``tables`` keys
        source: Name used in error messages (usually the file path)

    Returns:
        Validated Manifest.  An empty document gives an empty manifest.

    Raises:
        ManifestError: If the YAML is invalid or does not match the
            manifest structure
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ManifestError(f"{source}: invalid YAML: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ManifestError(
            f"{source}: expected a mapping at top level, got {type(data).__name__}"
        )

    try:
        manifest = Manifest.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
            for err in e.errors()
        )
        raise ManifestError(f"{source}: {problems}") from e

    for table in manifest.duplicate_tables():
        logger.warning(
            f"{source}: table {table} is declared more than once, "
            f"the last declaration is used"
        )

    return manifest


def load_manifest(manifest_path: Path | str) -> Manifest:
    """Load a manifest from a YAML file.

    Args:
        manifest_path: Path to the manifest file

    Returns:
        Validated Manifest

    Raises:
        ManifestError: If the file cannot be read or is malformed
    """
    manifest_path = Path(manifest_path)

    if not manifest_path.exists():
        raise ManifestError(f"Manifest file not found: {manifest_path}")

    try:
        text = manifest_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestError(f"Cannot read manifest {manifest_path}: {e}") from e

    return parse_manifest(text, source=str(manifest_path))
