from __future__ import annotations

from pathlib import PurePosixPath, PureWindowsPath

import pytest

from kaipack.package.paths import entry_name

ROOT = PurePosixPath("/work/app")


def test_root_itself_gets_no_entry() -> None:
    assert entry_name(ROOT, ROOT, is_dir=True) is None


def test_file_and_directory_names_are_relative() -> None:
    assert entry_name(ROOT, ROOT / "index.html", is_dir=False) == "index.html"
    assert entry_name(ROOT, ROOT / "js" / "lib", is_dir=True) == "js/lib/"
    assert entry_name(ROOT, ROOT / "js" / "lib" / "a.js", is_dir=False) == "js/lib/a.js"


def test_windows_separators_become_forward_slashes() -> None:
    root = PureWindowsPath(r"C:\src\app")
    name = entry_name(root, root / "img" / "icon.png", is_dir=False)
    assert name == "img/icon.png"
    assert entry_name(root, root / "img", is_dir=True) == "img/"


def test_path_outside_root_is_rejected() -> None:
    with pytest.raises(ValueError):
        entry_name(ROOT, PurePosixPath("/work/other/file"), is_dir=False)
