"""Archive entry naming for files under a source root."""

from __future__ import annotations

from pathlib import PurePath


def entry_name(root: PurePath, path: PurePath, is_dir: bool) -> str | None:
    """Return the archive entry name for *path* relative to *root*.

    Names are forward-slash separated and never absolute. Directory names end
    with ``/``. Returns ``None`` for the root itself, which gets no entry.

    Raises ValueError if *path* is not under *root*.
    """
    rel = path.relative_to(root)
    if not rel.parts:
        return None
    name = rel.as_posix().replace("\\", "/")
    if is_dir:
        name += "/"
    return name.lstrip("/")
