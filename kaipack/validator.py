"""Schema validation and package verification."""

from __future__ import annotations

import io
import json
import zipfile
from importlib import resources
from pathlib import Path

from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError

from kaipack.package.container import APPLICATION_ENTRY, METADATA_ENTRY, PACKAGE_ENTRIES
from kaipack.security.archive import UnsafeArchiveError, check_member_name
from kaipack.types import PackageReport


class PackageVerificationError(RuntimeError):
    pass


# --- Schema loaders ---------------------------------------------------------


def _load_schema(package: str, resource_name: str) -> dict:
    with resources.files(package).joinpath(resource_name).open("r", encoding="utf-8") as f:
        return json.load(f)


def _metadata_schema() -> dict:
    return _load_schema("kaipack", "schema/metadata.schema.json")


# --- Public validators ------------------------------------------------------


def validate_metadata(data: dict) -> None:
    Draft202012Validator(_metadata_schema()).validate(data)


def _check_application(report: PackageReport, payload: bytes) -> None:
    try:
        inner = zipfile.ZipFile(io.BytesIO(payload))
    except zipfile.BadZipFile as exc:
        raise PackageVerificationError(f"{APPLICATION_ENTRY} is not a zip archive") from exc
    with inner:
        bad = inner.testzip()
        if bad is not None:
            raise PackageVerificationError(f"{APPLICATION_ENTRY}: corrupt member {bad}")
        for m in inner.infolist():
            try:
                check_member_name(m.filename)
            except UnsafeArchiveError as exc:
                raise PackageVerificationError(str(exc)) from exc
            if m.is_dir():
                if m.file_size:
                    raise PackageVerificationError(f"directory entry with payload: {m.filename}")
                report.directories += 1
            else:
                report.files += 1
                report.total_bytes += m.file_size


def verify_package(path: Path) -> PackageReport:
    """Check that *path* is a well-formed package and summarize it."""
    try:
        outer = zipfile.ZipFile(path)
    except zipfile.BadZipFile as exc:
        raise PackageVerificationError(f"{path} is not a zip archive") from exc
    with outer:
        names = outer.namelist()
        if tuple(names) != PACKAGE_ENTRIES:
            raise PackageVerificationError(
                f"expected entries {list(PACKAGE_ENTRIES)}, found {names}"
            )
        try:
            metadata = json.loads(outer.read(METADATA_ENTRY))
            validate_metadata(metadata)
        except (ValueError, ValidationError) as exc:
            raise PackageVerificationError(f"invalid {METADATA_ENTRY}: {exc}") from exc
        report = PackageReport(
            path=str(path), entries=names, manifestURL=metadata["manifestURL"]
        )
        _check_application(report, outer.read(APPLICATION_ENTRY))
    return report
