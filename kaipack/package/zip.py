"""Directory tree to in-memory zip archive.

The walk is depth-first with children sorted by name, so the same tree always
produces entries in the same order. Directories named in *excluded_dirs* are
pruned together with everything below them. Symlinks and special files are
never followed or archived.

Any filesystem or archive error aborts the whole operation and propagates
unchanged; the archive is finalized before its bytes are returned.
"""

from __future__ import annotations

import io
import os
import shutil
import zipfile
from collections.abc import Callable, Iterable, Iterator
from enum import Enum
from pathlib import Path

from kaipack.logging import get_logger
from kaipack.package.paths import entry_name
from kaipack.types import ProgressEvent

log = get_logger("kaipack.package.zip")

DEFAULT_EXCLUDED_DIRS: tuple[str, ...] = (".git",)
COPY_CHUNK_BYTES = 1024 * 1024

ProgressSink = Callable[[ProgressEvent], None]


class SourceNotDirectoryError(NotADirectoryError):
    pass


class EntryKind(str, Enum):
    DIRECTORY = "directory"
    FILE = "file"
    SYMLINK = "symlink"
    OTHER = "other"


class WalkAction(Enum):
    CONTINUE = "continue"
    SKIP_SUBTREE = "skip_subtree"


Visitor = Callable[[Path, EntryKind], WalkAction]


def _classify(entry: os.DirEntry) -> EntryKind:
    if entry.is_symlink():
        return EntryKind.SYMLINK
    if entry.is_dir(follow_symlinks=False):
        return EntryKind.DIRECTORY
    if entry.is_file(follow_symlinks=False):
        return EntryKind.FILE
    return EntryKind.OTHER


def _sorted_children(directory: Path) -> Iterator[tuple[Path, EntryKind]]:
    with os.scandir(directory) as it:
        children = sorted(((e.name, _classify(e)) for e in it), key=lambda c: c[0])
    return iter([(directory / name, kind) for name, kind in children])


def walk_tree(root: Path, visit: Visitor) -> None:
    """Visit *root* and everything below it, depth-first.

    *visit* returns ``WalkAction.SKIP_SUBTREE`` to prune a directory; raising
    from *visit* aborts the walk and the exception reaches the caller as is.
    """
    if visit(root, EntryKind.DIRECTORY) is WalkAction.SKIP_SUBTREE:
        return
    stack = [_sorted_children(root)]
    while stack:
        child = next(stack[-1], None)
        if child is None:
            stack.pop()
            continue
        path, kind = child
        action = visit(path, kind)
        if kind is EntryKind.DIRECTORY and action is WalkAction.CONTINUE:
            stack.append(_sorted_children(path))


def _resolve_source(source: Path) -> Path:
    root = Path(source).absolute()
    if not root.exists():
        raise SourceNotDirectoryError(f"source not found: {root}")
    if not root.is_dir():
        raise SourceNotDirectoryError(f"source not a directory: {root}")
    return root


def archive_tree(
    source: Path,
    excluded_dirs: Iterable[str] = DEFAULT_EXCLUDED_DIRS,
    progress: ProgressSink | None = None,
) -> bytes:
    """Archive the tree under *source* and return the zip bytes."""
    root = _resolve_source(source)
    excluded = frozenset(excluded_dirs)
    buf = io.BytesIO()
    count = 0

    with zipfile.ZipFile(buf, "w") as z:

        def visit(path: Path, kind: EntryKind) -> WalkAction:
            nonlocal count
            if kind in (EntryKind.SYMLINK, EntryKind.OTHER):
                log.debug(f"skipping {kind.value}: {path}")
                return WalkAction.SKIP_SUBTREE
            is_dir = kind is EntryKind.DIRECTORY
            if is_dir and path.name in excluded:
                log.debug(f"excluding directory: {path}")
                return WalkAction.SKIP_SUBTREE
            name = entry_name(root, path, is_dir)
            if name is None:
                return WalkAction.CONTINUE

            info = zipfile.ZipInfo.from_file(path, arcname=name, strict_timestamps=False)
            if is_dir:
                info.CRC = 0
                info.compress_size = 0
                z.mkdir(info)
                size = 0
            else:
                info.compress_type = zipfile.ZIP_DEFLATED
                with open(path, "rb") as src, z.open(info, "w") as dst:
                    shutil.copyfileobj(src, dst, COPY_CHUNK_BYTES)
                size = info.file_size
            count += 1
            log.debug(f"archived {name} ({size} bytes)")
            if progress is not None:
                progress(ProgressEvent(kind="entry", stage="archive", name=name, size=size))
            return WalkAction.CONTINUE

        walk_tree(root, visit)

    data = buf.getvalue()
    log.info(f"archived {count} entries from {root} into {len(data)} bytes")
    return data
