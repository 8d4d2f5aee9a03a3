"""Pack orchestration: archive tree → metadata → container."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

from kaipack.logging import get_logger
from kaipack.package.container import assemble_package
from kaipack.package.metadata import build_descriptor
from kaipack.package.zip import DEFAULT_EXCLUDED_DIRS, ProgressSink, archive_tree
from kaipack.types import ManifestDescriptor, ProgressEvent
from kaipack.validator import validate_metadata

log = get_logger("kaipack.core")


@dataclass
class PackConfig:
    source: Path = Path("app")
    output: Path = Path("app.zip")
    verbose: bool = False
    excluded_dirs: tuple[str, ...] = field(default=DEFAULT_EXCLUDED_DIRS)


@dataclass
class PackResult:
    output: Path
    descriptor: ManifestDescriptor
    application_bytes: int


def pack_pipeline(config: PackConfig, progress: ProgressSink | None = None) -> PackResult:
    """Build the package described by *config*.

    Nothing is written to ``config.output`` unless both the archive and the
    metadata were produced. *progress* only receives events when
    ``config.verbose`` is set.
    """

    sink = progress if config.verbose else None

    def emit(stage: str, **kw) -> None:
        if sink is not None:
            sink(ProgressEvent(kind="stage", stage=stage, **kw))

    emit("archive", detail="packing app in zip")
    tree = archive_tree(config.source, excluded_dirs=config.excluded_dirs, progress=sink)
    emit("archive", size=len(tree), detail="zip pack success")

    descriptor = build_descriptor(config.source)
    validate_metadata(json.loads(descriptor.model_dump_json()))
    metadata = descriptor.to_json_bytes()
    emit("metadata", size=len(metadata), detail=metadata.decode("utf-8"))

    output = assemble_package(config.output, metadata, tree)
    emit("package", name=str(output), detail="package generated")
    log.info(f"packed {config.source} -> {output}")
    return PackResult(output=output, descriptor=descriptor, application_bytes=len(tree))
