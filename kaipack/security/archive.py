"""Safe archive extraction helpers.

Guards against common archive attacks:
- Zip Slip (../ traversal)
- Absolute paths
- Oversized files (basic cap)
"""

from __future__ import annotations

import io
import os
import shutil
import stat
import zipfile
from pathlib import Path, PurePosixPath

MAX_MEMBER_BYTES = 512 * 1024 * 1024  # per member


class UnsafeArchiveError(RuntimeError):
    pass


def _is_within(base: Path, target: Path) -> bool:
    try:
        target.relative_to(base)
        return True
    except ValueError:
        return False


def check_member_name(name: str) -> None:
    """Raise UnsafeArchiveError for absolute or traversing member names."""
    fn = PurePosixPath(name.replace("\\", "/"))
    if name.startswith("/") or fn.is_absolute() or ".." in fn.parts:
        raise UnsafeArchiveError(f"Unsafe member path: {name}")


def safe_extract_zip(source: Path | bytes, dest: Path) -> list[Path]:
    """Extract *source* (a zip path or zip bytes) below *dest*.

    Returns the extracted file paths in archive order.
    """
    dest.mkdir(parents=True, exist_ok=True)
    base = dest.resolve()
    archive = io.BytesIO(source) if isinstance(source, bytes) else source
    written: list[Path] = []
    with zipfile.ZipFile(archive) as z:
        for m in z.infolist():
            check_member_name(m.filename)
            target = (base / m.filename).resolve()
            if not _is_within(base, target):
                raise UnsafeArchiveError(f"Member escapes destination: {m.filename}")
            if m.is_dir():
                target.mkdir(parents=True, exist_ok=True)
                continue
            if m.file_size > MAX_MEMBER_BYTES:
                raise UnsafeArchiveError(f"Member too large: {m.filename} ({m.file_size} bytes)")
            target.parent.mkdir(parents=True, exist_ok=True)
            with z.open(m) as src, open(target, "wb") as out:
                shutil.copyfileobj(src, out)
            # Keep permission bits, never setuid/setgid
            mode = stat.S_IMODE(m.external_attr >> 16)
            if mode:
                os.chmod(target, mode & ~stat.S_ISUID & ~stat.S_ISGID)
            written.append(target)
    return written
