# tests/conftest.py
"""
Global pytest fixtures for dotnet-release.

Design goals
------------
- Hermetic runs: no real nuget/msbuild/dotnet is ever executed; the CLI's
  runner is replaced by a recorder that returns canned tool output.
- Small on-disk fixtures (nuspec, AssemblyInfo, solution) built per test in tmp_path.
- Logging handlers are dropped between tests so CliRunner stream swaps are safe.
"""

from __future__ import annotations

import os
import textwrap

# Wide, colourless rich output so assertions see whole lines.
os.environ.setdefault("COLUMNS", "250")
os.environ.setdefault("NO_COLOR", "1")

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List

import pytest

from dotnet_release import cli
from dotnet_release.logging_utils import reset_loggers
from dotnet_release.runner import CommandResult

# Keep config/env of the developer machine out of the tests.
for _key in list(os.environ):
    if _key.startswith("DOTNET_RELEASE_"):
        del os.environ[_key]

NUSPEC_NS = "http://schemas.microsoft.com/packaging/2013/05/nuspec.xsd"

NUSPEC = textwrap.dedent(
    f"""\
    <?xml version="1.0" encoding="utf-8"?>
    <package xmlns="{NUSPEC_NS}">
      <metadata>
        <id>Contoso.Widgets</id>
        <version>1.4.2</version>
        <authors>Contoso</authors>
        <description>Widgets for everyone.</description>
      </metadata>
    </package>
    """
)

ASSEMBLY_INFO_CS = textwrap.dedent(
    """\
    using System.Reflection;
    using System.Runtime.InteropServices;

    [assembly: AssemblyTitle("Contoso.Widgets")]
    [assembly: ComVisible(false)]
    [assembly: AssemblyVersion("1.4.2.7")]
    [assembly: AssemblyFileVersion("1.4.2.7")]
    """
)


# -----------------------------------------------------------------------------
# Autouse hygiene
# -----------------------------------------------------------------------------
@pytest.fixture(autouse=True)
def _fresh_loggers():
    reset_loggers()
    yield
    reset_loggers()


# -----------------------------------------------------------------------------
# On-disk fixtures
# -----------------------------------------------------------------------------
@pytest.fixture()
def nuspec_file(tmp_path: Path) -> Path:
    path = tmp_path / "Contoso.Widgets.nuspec"
    path.write_text(NUSPEC, encoding="utf-8")
    return path


@pytest.fixture()
def assembly_info_file(tmp_path: Path) -> Path:
    path = tmp_path / "src" / "Widgets" / "Properties" / "AssemblyInfo.cs"
    path.parent.mkdir(parents=True)
    path.write_text(ASSEMBLY_INFO_CS, encoding="utf-8")
    return path


@pytest.fixture()
def solution_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """tmp_path as working directory with a single solution and nuspec."""
    (tmp_path / "Contoso.Widgets.sln").write_text("Microsoft Visual Studio Solution File\n", encoding="utf-8")
    (tmp_path / "Contoso.Widgets.nuspec").write_text(NUSPEC, encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    return tmp_path


# -----------------------------------------------------------------------------
# Fake external tools
# -----------------------------------------------------------------------------
@dataclass
class FakeRunner:
    """Records argv lists and answers with canned output keyed by the tool verb."""

    outputs: Dict[str, str] = field(default_factory=dict)
    calls: List[List[str]] = field(default_factory=list)
    secrets: List[List[str]] = field(default_factory=list)

    def __call__(self, argv, *, dry_run=False, secrets=(), **_kwargs) -> CommandResult:
        cmd = [str(a) for a in argv]
        self.calls.append(cmd)
        self.secrets.append(list(secrets))
        if dry_run:
            return CommandResult(cmd, None, 0, dry_run=True)
        verb = cmd[1] if len(cmd) > 1 else cmd[0]
        return CommandResult(cmd, None, 0, stdout=self.outputs.get(verb, ""))

    @property
    def last(self) -> List[str]:
        return self.calls[-1]


@pytest.fixture()
def fake_runner(monkeypatch: pytest.MonkeyPatch) -> FakeRunner:
    runner = FakeRunner()
    monkeypatch.setattr(cli, "run_command", runner)
    return runner
