import io
import os
import sys
import xml.etree.ElementTree as ET
from pathlib import Path

import pytest

from sfmanifest.app.dispatcher import list_members, main, run, write_manifest
from sfmanifest.errors import NotFoundError, ScanError
from sfmanifest.utils.config import ManifestSettings

NS = "{http://soap.sforce.com/2006/04/metadata}"


def _touch(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("x", encoding="utf-8")


def _project(root: Path) -> Path:
    for name in ("Foo.cls", "Bar.cls", "notes.txt", "debug.log", "existing.xml"):
        _touch(root / "classes" / name)
    _touch(root / "pages" / "Baz.page")
    return root


def _deny(path, name, real_scandir):
    if Path(path).name == name:
        raise PermissionError(13, "Permission denied", str(path))
    return real_scandir(path)


def test_full_manifest_mode(tmp_path: Path):
    root = _project(tmp_path)
    assert main(["--root", str(root)]) == 0

    doc = ET.parse(root / "package.xml").getroot()
    groups = {
        t.find(f"{NS}name").text: sorted(m.text for m in t.findall(f"{NS}members"))
        for t in doc.findall(f"{NS}types")
    }
    assert groups == {"ApexClass": ["Bar", "Foo"], "ApexPage": ["Baz"]}
    assert doc.find(f"{NS}version").text == "31.0"


def test_full_manifest_is_idempotent(tmp_path: Path):
    root = _project(tmp_path)
    assert main(["--root", str(root), "--api_version", "45.0"]) == 0
    first = (root / "package.xml").read_bytes()
    assert main(["--root", str(root), "--api_version", "45.0"]) == 0

    assert (root / "package.xml").read_bytes() == first
    assert b"<version>45.0</version>" in first


def test_package_name_only_changes_destination(tmp_path: Path):
    root = _project(tmp_path)
    main(["--root", str(root)])
    main(["--root", str(root), "--package_name", "other.xml"])

    assert (root / "package.xml").read_bytes() == (root / "other.xml").read_bytes()


def test_member_mode_applies_no_filter(tmp_path: Path):
    root = _project(tmp_path)
    out = io.StringIO()
    settings = ManifestSettings(root=str(root), dir="classes", sort_entries=True)

    assert run(settings, stream=out) == 0
    assert out.getvalue() == (
        "<members>Bar</members>\r\n"
        "<members>Foo</members>\r\n"
        "<members>debug</members>\r\n"
        "<members>existing</members>\r\n"
        "<members>notes</members>\r\n"
    )
    assert not (root / "package.xml").exists()


def test_member_mode_recurses(tmp_path: Path):
    _touch(tmp_path / "aura" / "MyCmp" / "MyCmp.cmp")
    out = io.StringIO()

    assert run(ManifestSettings(root=str(tmp_path), dir="aura", sort_entries=True), stream=out) == 0
    assert out.getvalue() == "<members>MyCmp</members>\r\n<members>MyCmp</members>\r\n"


def test_member_mode_empty_dir(tmp_path: Path):
    (tmp_path / "classes").mkdir()
    out = io.StringIO()

    assert run(ManifestSettings(root=str(tmp_path), dir="classes"), stream=out) == 0
    assert out.getvalue() == ""


def test_member_mode_via_main_writes_stdout(tmp_path: Path, capsys):
    _touch(tmp_path / "pages" / "Baz.page")

    assert main(["--root", str(tmp_path), "--dir", "pages"]) == 0
    assert capsys.readouterr().out == "<members>Baz</members>\r\n"


def test_missing_root_exits_nonzero(tmp_path: Path):
    root = tmp_path / "missing"
    assert main(["--root", str(root)]) == 1
    assert not root.exists()


def test_missing_member_dir_exits_nonzero(tmp_path: Path):
    assert main(["--root", str(tmp_path), "--dir", "classes"]) == 1


def test_bad_config_exits_nonzero(tmp_path: Path):
    assert main(["--config", str(tmp_path / "nope.yaml")]) == 1


@pytest.mark.skipif(sys.platform == "win32", reason="control characters in file names")
def test_control_character_in_file_name_exits_nonzero(tmp_path: Path):
    _touch(tmp_path / "classes" / "A\x01B.cls")

    assert main(["--root", str(tmp_path)]) == 1
    assert not (tmp_path / "package.xml").exists()


@pytest.mark.skipif(sys.platform != "linux", reason="needs byte file names")
def test_undecodable_file_name_exits_nonzero(tmp_path: Path):
    _touch(tmp_path / "classes" / os.fsdecode(b"\xff.cls"))

    assert main(["--root", str(tmp_path)]) == 1
    assert not (tmp_path / "package.xml").exists()


@pytest.mark.skipif(sys.platform != "linux", reason="needs byte file names")
def test_undecodable_member_name_on_strict_stream(tmp_path: Path):
    _touch(tmp_path / "classes" / os.fsdecode(b"\xff.cls"))
    out = io.TextIOWrapper(io.BytesIO(), encoding="utf-8")

    assert run(ManifestSettings(root=str(tmp_path), dir="classes"), stream=out) == 1


def test_unreadable_folder_exits_nonzero(tmp_path: Path, monkeypatch):
    root = _project(tmp_path)
    real_scandir = os.scandir
    monkeypatch.setattr(os, "scandir", lambda path: _deny(path, "pages", real_scandir))

    assert main(["--root", str(root)]) == 1
    assert not (root / "package.xml").exists()


def test_unreadable_folder_raises_scan_error(tmp_path: Path, monkeypatch):
    root = _project(tmp_path)
    real_scandir = os.scandir
    monkeypatch.setattr(os, "scandir", lambda path: _deny(path, "classes", real_scandir))

    with pytest.raises(ScanError):
        write_manifest(ManifestSettings(root=str(root)))


def test_absolute_member_dir_rejected(tmp_path: Path):
    outside = tmp_path / "outside"
    _touch(outside / "Secret.cls")
    root = tmp_path / "project"
    root.mkdir()
    out = io.StringIO()

    assert run(ManifestSettings(root=str(root), dir=str(outside)), stream=out) == 1
    assert out.getvalue() == ""
    with pytest.raises(NotFoundError):
        list_members(ManifestSettings(root=str(root), dir=str(outside)), io.StringIO())
