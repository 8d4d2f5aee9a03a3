from __future__ import annotations

import json
import re
import zipfile
from pathlib import Path

import pytest
from typer.testing import CliRunner

from kaipack.cli import app

runner = CliRunner()


@pytest.mark.timeout(20)
def test_pack_then_verify(tmp_path: Path, webapp: Path) -> None:
    out = tmp_path / "dist" / "app.zip"
    res = runner.invoke(app, ["pack", "--path", str(webapp), "--output", str(out)])
    assert res.exit_code == 0, res.output
    assert "Package written" in res.output

    with zipfile.ZipFile(out) as z:
        assert z.namelist() == ["metadata.json", "application.zip"]
        meta = json.loads(z.read("metadata.json"))
    assert meta == {"version": 1, "manifestURL": "app://demo.example/manifest.webapp"}

    extracted = tmp_path / "extracted"
    res = runner.invoke(app, ["verify", str(out), "--extract", str(extracted)])
    assert res.exit_code == 0, res.output
    assert "Package verified" in res.output
    assert (extracted / "index.html").read_text(encoding="utf-8") == "<html></html>\n"


@pytest.mark.timeout(20)
def test_verbose_prints_entries_and_stages(tmp_path: Path, webapp: Path) -> None:
    out = tmp_path / "app.zip"
    res = runner.invoke(app, ["pack", "-p", str(webapp), "-o", str(out), "-v"])
    assert res.exit_code == 0, res.output
    lines = res.output.splitlines()
    assert ">> packing app in zip." in lines
    assert "js/lib/blob.bin" in lines
    assert ">> metadata generated." in lines
    assert ">> package generated." in lines
    assert re.search(r"archive size: \d+ bytes", res.output)
    assert ".git/HEAD" not in res.output


@pytest.mark.timeout(20)
def test_quiet_by_default(tmp_path: Path, webapp: Path) -> None:
    res = runner.invoke(app, ["pack", "-p", str(webapp), "-o", str(tmp_path / "a.zip")])
    assert res.exit_code == 0, res.output
    assert "index.html" not in res.output


@pytest.mark.timeout(20)
def test_defaults_and_env_config(tmp_path: Path, webapp: Path, monkeypatch) -> None:
    monkeypatch.chdir(webapp.parent)
    res = runner.invoke(app, ["pack"])
    assert res.exit_code == 0, res.output
    assert (webapp.parent / "app.zip").exists()

    res = runner.invoke(app, ["pack"], env={"KAIPACK_OUTPUT": "custom.zip"})
    assert res.exit_code == 0, res.output
    assert (webapp.parent / "custom.zip").exists()


@pytest.mark.timeout(20)
def test_source_file_fails_without_output(tmp_path: Path) -> None:
    src = tmp_path / "notadir"
    src.write_text("x", encoding="utf-8")
    out = tmp_path / "app.zip"
    res = runner.invoke(app, ["pack", "--path", str(src), "--output", str(out)])
    assert res.exit_code == 1
    assert "source not a directory" in res.output
    assert not out.exists()


@pytest.mark.timeout(20)
def test_missing_manifest_fails_without_output(tmp_path: Path, webapp: Path) -> None:
    (webapp / "manifest.webapp").unlink()
    out = tmp_path / "app.zip"
    res = runner.invoke(app, ["pack", "--path", str(webapp), "--output", str(out)])
    assert res.exit_code == 1
    assert "cannot read manifest" in res.output
    assert not out.exists()


@pytest.mark.timeout(20)
def test_verify_rejects_foreign_archive(tmp_path: Path) -> None:
    bogus = tmp_path / "bogus.zip"
    with zipfile.ZipFile(bogus, "w") as z:
        z.writestr("readme.txt", "hi")
    res = runner.invoke(app, ["verify", str(bogus)])
    assert res.exit_code == 1
    assert "expected entries" in res.output


@pytest.mark.timeout(20)
def test_bare_invocation_packs_with_defaults(tmp_path: Path, webapp: Path, monkeypatch) -> None:
    monkeypatch.chdir(webapp.parent)
    res = runner.invoke(app, [])
    assert res.exit_code == 0, res.output
    with zipfile.ZipFile(webapp.parent / "app.zip") as z:
        assert z.namelist() == ["metadata.json", "application.zip"]

    out = tmp_path / "named.zip"
    res = runner.invoke(app, ["-p", str(webapp), "-o", str(out), "-v"])
    assert res.exit_code == 0, res.output
    assert "index.html" in res.output.splitlines()
    assert out.exists()
