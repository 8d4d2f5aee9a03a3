"""Package descriptor (``metadata.json``) derived from ``manifest.webapp``."""

from __future__ import annotations

import json
import uuid
from pathlib import Path
from typing import Any

from kaipack.logging import get_logger
from kaipack.types import ManifestDescriptor

log = get_logger("kaipack.package.metadata")

MANIFEST_FILENAME = "manifest.webapp"
GENERATED_SCHEME = "app"


class ManifestError(ValueError):
    pass


def _load_manifest(source: Path) -> Any:
    manifest_path = Path(source) / MANIFEST_FILENAME
    try:
        raw = manifest_path.read_bytes()
    except OSError as exc:
        raise ManifestError(f"cannot read manifest {manifest_path}: {exc}") from exc
    try:
        return json.loads(raw)
    except ValueError as exc:
        raise ManifestError(f"invalid JSON in manifest {manifest_path}: {exc}") from exc


def _lookup_str(doc: Any, key: str) -> str | None:
    if not isinstance(doc, dict) or key not in doc:
        return None
    value = doc[key]
    if isinstance(value, str):
        return value
    log.warning(f"ignoring non-string {key!r} in manifest: {value!r}")
    return None


def read_origin(source: Path) -> str | None:
    """Return the manifest's ``origin`` string, or None when it has none."""
    return _lookup_str(_load_manifest(source), "origin")


def manifest_url_for(origin: str | None) -> str:
    """Join *origin* with the manifest filename, or synthesize an ``app://`` URL."""
    if origin is None:
        return f"{GENERATED_SCHEME}://{uuid.uuid4()}/{MANIFEST_FILENAME}"
    return f"{origin.rstrip('/')}/{MANIFEST_FILENAME}"


def build_descriptor(source: Path) -> ManifestDescriptor:
    return ManifestDescriptor(manifestURL=manifest_url_for(read_origin(source)))


def build_metadata(source: Path) -> bytes:
    """Serialized descriptor for the app under *source*."""
    return build_descriptor(source).to_json_bytes()
