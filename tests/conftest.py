from __future__ import annotations

import json
from pathlib import Path

import pytest


@pytest.fixture
def webapp(tmp_path: Path) -> Path:
    """A small app tree with a manifest, nested dirs, an empty dir and a .git dir."""
    root = tmp_path / "app"
    (root / "js" / "lib").mkdir(parents=True)
    (root / "empty").mkdir()
    (root / ".git" / "objects").mkdir(parents=True)
    (root / "manifest.webapp").write_text(
        json.dumps({"name": "Demo", "origin": "app://demo.example"}), encoding="utf-8"
    )
    (root / "index.html").write_text("<html></html>\n", encoding="utf-8")
    (root / "js" / "app.js").write_text("console.log('hi');\n", encoding="utf-8")
    (root / "js" / "lib" / "blob.bin").write_bytes(bytes(range(256)) * 64)
    (root / ".git" / "HEAD").write_text("ref: refs/heads/main\n", encoding="utf-8")
    (root / ".git" / "objects" / "ab").write_bytes(b"\x00\x01")
    return root
