"""Shared Pydantic models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict


class ManifestDescriptor(BaseModel):
    """Contents of ``metadata.json`` inside a package."""

    model_config = ConfigDict(frozen=True)

    version: Literal[1] = 1
    manifestURL: str

    def to_json_bytes(self) -> bytes:
        return self.model_dump_json().encode("utf-8")


class ProgressEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["stage", "entry"]
    stage: Literal["archive", "metadata", "package"]
    name: str | None = None
    size: int | None = None
    detail: str | None = None


class PackageReport(BaseModel):
    path: str
    entries: list[str]
    manifestURL: str
    files: int = 0
    directories: int = 0
    total_bytes: int = 0
