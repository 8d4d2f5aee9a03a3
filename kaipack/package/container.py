"""Final package container: ``metadata.json`` followed by ``application.zip``."""

from __future__ import annotations

import zipfile
from pathlib import Path

from kaipack.logging import get_logger

log = get_logger("kaipack.package.container")

METADATA_ENTRY = "metadata.json"
APPLICATION_ENTRY = "application.zip"
PACKAGE_ENTRIES = (METADATA_ENTRY, APPLICATION_ENTRY)


def assemble_package(output: Path, metadata: bytes, tree: bytes) -> Path:
    """Write the two-entry package to *output*, replacing any existing file.

    A partially written file is removed before the error is re-raised.
    """
    output = Path(output)
    output.parent.mkdir(parents=True, exist_ok=True)
    z = zipfile.ZipFile(output, "w", compression=zipfile.ZIP_DEFLATED)
    try:
        with z:
            z.writestr(METADATA_ENTRY, metadata)
            z.writestr(APPLICATION_ENTRY, tree)
    except BaseException:
        output.unlink(missing_ok=True)
        raise
    log.info(f"package written: {output} ({output.stat().st_size} bytes)")
    return output
