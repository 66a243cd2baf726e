# tests/unit/test_assembly_info.py

from __future__ import annotations

import codecs
from pathlib import Path

import pytest

from dotnet_release.assembly_info import (
    read_assembly_versions,
    read_versions,
    replace_versions,
    update_assembly_info,
)
from dotnet_release.errors import MalformedVersionComponentError, ReleaseToolError
from dotnet_release.versioning import IncrementFlags

VB_SOURCE = (
    "Imports System.Reflection\r\n"
    "\r\n"
    '<Assembly: AssemblyTitle("Widgets")>\r\n'
    '<Assembly: AssemblyVersion("2.0.*")>\r\n'
    '<Assembly: AssemblyFileVersion("2.0.0.0")>\r\n'
)

BUILD = IncrementFlags(build=True)


def test_read_versions_csharp(assembly_info_file: Path):
    assert read_assembly_versions(assembly_info_file) == {
        "AssemblyVersion": "1.4.2.7",
        "AssemblyFileVersion": "1.4.2.7",
    }


def test_read_versions_vb():
    assert read_versions(VB_SOURCE) == {"AssemblyVersion": "2.0.*", "AssemblyFileVersion": "2.0.0.0"}


def test_read_versions_attribute_suffix_and_qualifier():
    text = '[assembly: System.Reflection.AssemblyVersionAttribute("3.1.0.0")]'
    assert read_versions(text, ["AssemblyVersion"]) == {"AssemblyVersion": "3.1.0.0"}


def test_file_version_not_confused_with_version():
    text = '[assembly: AssemblyFileVersion("1.0.0.9")]'
    assert read_versions(text) == {"AssemblyFileVersion": "1.0.0.9"}


def test_replace_versions_touches_only_selected_attributes():
    text = (
        '[assembly: AssemblyVersion("1.0.0.1")]\n'
        '[assembly: AssemblyFileVersion("1.0.0.1")]\n'
        '[assembly: AssemblyInformationalVersion("1.0.0.1-beta")]\n'
    )
    new_text, changes = replace_versions(text, BUILD, ["AssemblyVersion"])
    assert changes == {"AssemblyVersion": ("1.0.0.1", "1.0.0.2")}
    assert '[assembly: AssemblyVersion("1.0.0.2")]' in new_text
    assert '[assembly: AssemblyFileVersion("1.0.0.1")]' in new_text
    assert "1.0.0.1-beta" in new_text


def test_replace_versions_vb_wildcard_with_force():
    new_text, changes = replace_versions(VB_SOURCE, IncrementFlags(build=True, force_four_components=True))
    assert changes["AssemblyVersion"] == ("2.0.*", "2.0.0.1")
    assert changes["AssemblyFileVersion"] == ("2.0.0.0", "2.0.0.1")
    assert '<Assembly: AssemblyVersion("2.0.0.1")>' in new_text


def test_update_assembly_info_writes_file(assembly_info_file: Path):
    update = update_assembly_info(assembly_info_file, IncrementFlags(revision=True))
    assert update.changed
    text = assembly_info_file.read_text(encoding="utf-8")
    assert '[assembly: AssemblyVersion("1.4.3.7")]' in text
    assert '[assembly: AssemblyFileVersion("1.4.3.7")]' in text
    assert '[assembly: AssemblyTitle("Contoso.Widgets")]' in text


def test_update_preserves_bom_and_crlf(tmp_path: Path):
    path = tmp_path / "AssemblyInfo.vb"
    path.write_bytes(codecs.BOM_UTF8 + VB_SOURCE.encode("utf-8"))
    update_assembly_info(path, IncrementFlags(minor=True))
    raw = path.read_bytes()
    assert raw.startswith(codecs.BOM_UTF8)
    assert b'<Assembly: AssemblyVersion("2.1.*")>\r\n' in raw
    assert raw.count(b"\r\n") == VB_SOURCE.count("\r\n")


def test_update_dry_run_leaves_file(assembly_info_file: Path):
    before = assembly_info_file.read_bytes()
    update = update_assembly_info(assembly_info_file, BUILD, dry_run=True)
    assert update.changes["AssemblyVersion"] == ("1.4.2.7", "1.4.2.8")
    assert assembly_info_file.read_bytes() == before


def test_update_without_attributes_reports_nothing(tmp_path: Path):
    path = tmp_path / "AssemblyInfo.cs"
    path.write_text("using System;\n", encoding="utf-8")
    update = update_assembly_info(path, BUILD)
    assert update.changes == {}
    assert not update.changed


def test_malformed_version_propagates(tmp_path: Path):
    path = tmp_path / "AssemblyInfo.cs"
    path.write_text('[assembly: AssemblyVersion("*.0")]\n', encoding="utf-8")
    with pytest.raises(MalformedVersionComponentError):
        update_assembly_info(path, IncrementFlags(major=True))


def test_non_utf8_source_is_reported(tmp_path: Path):
    path = tmp_path / "AssemblyInfo.cs"
    path.write_bytes('[assembly: AssemblyCopyright("© Contoso")]\n'.encode("cp1252"))
    with pytest.raises(ReleaseToolError, match="not UTF-8"):
        update_assembly_info(path, IncrementFlags(build=True))
    assert path.read_bytes().startswith(b"[assembly")


def test_missing_source_is_reported(tmp_path: Path):
    with pytest.raises(ReleaseToolError, match="cannot read"):
        read_assembly_versions(tmp_path / "AssemblyInfo.cs")
