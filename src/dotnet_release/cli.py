#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
dotnet-release CLI

Commands:
  show-version    Print versions found in AssemblyInfo sources and .nuspec manifests
  bump-assembly   Increment AssemblyVersion / AssemblyFileVersion attributes
  bump-nuspec     Increment (or --set) package.metadata.version in a .nuspec
  restore         nuget restore <solution>
  build           msbuild <solution>
  test            Run the configured test runner against a solution or project
  pack            nuget pack <nuspec> into the output directory
  push            nuget push <package> to the configured source

Notes:
- Version flags (--major/--minor/--revision/--build/--force-four) default to
  "--build --force-four" when none is given.
- Solutions, manifests and packages are discovered in the working directory when
  not passed; several candidates are offered as a numbered choice.
- Global --dry-run logs external commands and file changes without performing them.
"""

from __future__ import annotations

import contextlib
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

import click
import typer
from rich import box
from rich.console import Console
from rich.table import Table

from . import __version__
from .assembly_info import read_assembly_versions, update_assembly_info
from .config import Settings, load_settings
from .discovery import (
    find_assembly_infos,
    find_nuspecs,
    find_packages,
    find_solutions,
    select_one,
)
from .errors import DiscoveryError, ReleaseToolError, ToolOutputError
from .logging_utils import init_logger, reset_loggers
from .nuspec import bump_manifest_version, read_manifest_version, set_manifest_version
from .runner import CommandResult, run_command
from .tool_output import (
    BUILD_SUCCEEDED,
    PACKAGE_CREATED,
    PACKAGE_PUSHED,
    RESTORE_NOTHING_TO_DO,
    ToolOutputMatchers,
    load_output_matchers,
)
from .versioning import IncrementFlags

# ---------------------------------------------------------------------
# Typer app
# ---------------------------------------------------------------------
app = typer.Typer(
    name="dotnet-release",
    help="Version, build, test, pack and push .NET solutions and NuGet packages.",
    add_completion=False,
    no_args_is_help=True,
)
console = Console()
log = logging.getLogger(__name__)


@dataclass
class RuntimeCtx:
    settings: Settings
    dry_run: bool = False
    _matchers: Optional[ToolOutputMatchers] = field(default=None, repr=False)

    @property
    def matchers(self) -> ToolOutputMatchers:
        if self._matchers is None:
            self._matchers = load_output_matchers(self.settings.locale)
        return self._matchers

    def run(self, argv: Sequence[str], **kwargs) -> CommandResult:
        return run_command(argv, dry_run=self.dry_run, **kwargs)


# ---------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------
@contextlib.contextmanager
def _fail_on_error() -> Iterator[None]:
    """Turn library errors into a red message and exit code 1."""
    try:
        yield
    except ReleaseToolError as exc:
        log.debug("command failed", exc_info=True)
        console.print(f"[red]error[/red]: {exc}")
        raise typer.Exit(code=1)


def _runtime(ctx: typer.Context) -> RuntimeCtx:
    if not isinstance(ctx.obj, RuntimeCtx):
        ctx.obj = RuntimeCtx(settings=Settings())
    return ctx.obj


def _choose(candidates: Sequence[Path], what: str) -> Path:
    console.print(f"Several {what} files found:")
    for i, path in enumerate(candidates, start=1):
        console.print(f"  [cyan]{i}[/cyan]) {path}")
    index = typer.prompt(f"Which {what}", type=click.IntRange(1, len(candidates)), default=1)
    return candidates[index - 1]


def _resolve(path: Optional[Path], candidates: Sequence[Path], what: str) -> Path:
    if path is not None:
        if not path.exists():
            raise DiscoveryError(f"{what} not found: {path}")
        return path
    return select_one(candidates, what, _choose)


def _flags(major: bool, minor: bool, revision: bool, build: bool, force_four: bool) -> IncrementFlags:
    return IncrementFlags(
        major=major, minor=minor, revision=revision, build=build, force_four_components=force_four
    ).with_default()


def _dry_note(rt: RuntimeCtx) -> str:
    return " [dim](dry run)[/dim]" if rt.dry_run else ""


MAJOR_OPT = typer.Option(False, "--major", help="Increment the major component.")
MINOR_OPT = typer.Option(False, "--minor", help="Increment the minor component.")
REVISION_OPT = typer.Option(False, "--revision", help="Increment the revision component.")
BUILD_OPT = typer.Option(False, "--build", help="Increment the build component.")
FORCE_OPT = typer.Option(
    False, "--force-four", help="Pad 3-part versions to four parts and turn '*' into 0."
)


# ---------------------------------------------------------------------
# Global options
# ---------------------------------------------------------------------
def _version_callback(value: bool) -> None:
    if value:
        console.print(f"dotnet-release {__version__}")
        raise typer.Exit()


@app.callback()
def _root_callback(
    ctx: typer.Context,
    version: Optional[bool] = typer.Option(
        None, "--version", callback=_version_callback, is_eager=True, help="Show version and exit."
    ),
    log_level: str = typer.Option("INFO", "--log-level", help="Log level (DEBUG, INFO, WARNING, ERROR)"),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Also write the log to this file."),
    no_rich: bool = typer.Option(False, "--no-rich", help="Disable rich formatting (plain console)"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print actions but do not execute"),
    config: Optional[Path] = typer.Option(None, "--config", help="YAML settings file."),
    locale: Optional[str] = typer.Option(None, "--locale", help="UI language of nuget/msbuild output."),
) -> None:
    if no_rich:
        global console
        console = Console(no_color=True, highlight=False)
    reset_loggers()
    init_logger(log_file, level=log_level, rich=not no_rich)
    with _fail_on_error():
        settings = load_settings(config)
    if locale:
        settings.locale = locale
    ctx.obj = RuntimeCtx(settings=settings, dry_run=dry_run)
    log.debug("settings: %s", settings.as_dict())


# ---------------------------------------------------------------------
# Version commands
# ---------------------------------------------------------------------
@app.command("show-version")
def show_version(
    files: Optional[List[Path]] = typer.Argument(None, help="AssemblyInfo or .nuspec files."),
    root: Path = typer.Option(Path("."), "--root", help="Where to look when no files are given."),
) -> None:
    """Print the versions recorded in AssemblyInfo sources and .nuspec manifests."""
    with _fail_on_error():
        paths = list(files or []) or (find_assembly_infos(root) + find_nuspecs(root))
        if not paths:
            raise DiscoveryError(f"no AssemblyInfo or .nuspec files under {root}")
        table = Table(title="Versions", box=box.MINIMAL_DOUBLE_HEAD)
        table.add_column("File", style="bold cyan")
        table.add_column("Attribute")
        table.add_column("Version", style="green")
        for path in paths:
            if path.suffix.lower() == ".nuspec":
                value = read_manifest_version(path)
                table.add_row(str(path), "version", value if value is not None else "[yellow]not set[/yellow]")
                continue
            versions = read_assembly_versions(path)
            if not versions:
                table.add_row(str(path), "-", "[yellow]not set[/yellow]")
            for name, value in versions.items():
                table.add_row(str(path), name, value)
        console.print(table)


@app.command("bump-assembly")
def bump_assembly(
    ctx: typer.Context,
    files: Optional[List[Path]] = typer.Argument(None, help="AssemblyInfo files to update."),
    root: Path = typer.Option(Path("."), "--root", help="Where to look when no files are given."),
    attribute: Optional[List[str]] = typer.Option(
        None, "--attribute", "-a", help="Attribute to update (repeatable)."
    ),
    major: bool = MAJOR_OPT,
    minor: bool = MINOR_OPT,
    revision: bool = REVISION_OPT,
    build: bool = BUILD_OPT,
    force_four: bool = FORCE_OPT,
) -> None:
    """Increment version attributes in AssemblyInfo.cs / AssemblyInfo.vb files."""
    rt = _runtime(ctx)
    flags = _flags(major, minor, revision, build, force_four)
    attributes = list(attribute or rt.settings.assembly_attributes)
    with _fail_on_error():
        paths = list(files or []) or find_assembly_infos(root)
        if not paths:
            raise DiscoveryError(f"no AssemblyInfo files under {root}")
        updated = 0
        for path in paths:
            result = update_assembly_info(path, flags, attributes, dry_run=rt.dry_run)
            for name, (old, new) in result.changes.items():
                console.print(f"{path}: {name} [dim]{old}[/dim] → [bold green]{new}[/]")
            updated += int(result.changed)
        console.print(f"Updated {updated} of {len(paths)} file(s){_dry_note(rt)}")


@app.command("bump-nuspec")
def bump_nuspec(
    ctx: typer.Context,
    nuspec: Optional[Path] = typer.Argument(None, help=".nuspec manifest (discovered when omitted)."),
    set_version: Optional[str] = typer.Option(None, "--set", help="Write this exact version."),
    major: bool = MAJOR_OPT,
    minor: bool = MINOR_OPT,
    revision: bool = REVISION_OPT,
    build: bool = BUILD_OPT,
    force_four: bool = FORCE_OPT,
) -> None:
    """Increment package.metadata.version of a .nuspec manifest."""
    rt = _runtime(ctx)
    with _fail_on_error():
        path = _resolve(nuspec, find_nuspecs(Path.cwd()), "nuspec")
        if set_version is not None:
            old, new = set_manifest_version(path, set_version, dry_run=rt.dry_run)
        else:
            flags = _flags(major, minor, revision, build, force_four)
            old, new = bump_manifest_version(path, flags, dry_run=rt.dry_run)
        shown_old = old if old is not None else "(not set)"
        console.print(f"{path}: version [dim]{shown_old}[/dim] → [bold green]{new}[/]{_dry_note(rt)}")


# ---------------------------------------------------------------------
# Tool commands
# ---------------------------------------------------------------------
SOLUTION_ARG = typer.Argument(None, help="Solution file (discovered when omitted).")


@app.command()
def restore(ctx: typer.Context, solution: Optional[Path] = SOLUTION_ARG) -> None:
    """Restore NuGet packages for a solution."""
    rt = _runtime(ctx)
    with _fail_on_error():
        sln = _resolve(solution, find_solutions(Path.cwd()), "solution")
        result = rt.run([rt.settings.nuget, "restore", str(sln), "-NonInteractive"])
        if not result.dry_run and rt.matchers.matches(RESTORE_NOTHING_TO_DO, result.output):
            console.print("Packages already up to date.")
        else:
            console.print(f"✅ Restored {sln.name}{_dry_note(rt)}")


@app.command()
def build(
    ctx: typer.Context,
    solution: Optional[Path] = SOLUTION_ARG,
    target: str = typer.Option("Build", "--target", "-t", help="MSBuild target."),
    configuration: Optional[str] = typer.Option(None, "--configuration", "-c", help="Build configuration."),
    verbosity: str = typer.Option("minimal", "--verbosity", "-v", help="MSBuild verbosity."),
) -> None:
    """Build a solution with MSBuild."""
    rt = _runtime(ctx)
    cfg = configuration or rt.settings.configuration
    with _fail_on_error():
        sln = _resolve(solution, find_solutions(Path.cwd()), "solution")
        argv = [
            rt.settings.msbuild,
            str(sln),
            f"/t:{target}",
            f"/p:Configuration={cfg}",
            "/m",
            f"/v:{verbosity}",
            "/nologo",
        ]
        result = rt.run(argv)
        if not result.dry_run and not rt.matchers.matches(BUILD_SUCCEEDED, result.output):
            log.warning("build exited cleanly but no success message was recognised")
        console.print(f"✅ Built {sln.name} ({cfg}){_dry_note(rt)}")


@app.command()
def test(
    ctx: typer.Context,
    target: Optional[Path] = typer.Argument(None, help="Solution or test project (solution discovered when omitted)."),
    configuration: Optional[str] = typer.Option(None, "--configuration", "-c", help="Build configuration."),
) -> None:
    """Run the configured test runner."""
    rt = _runtime(ctx)
    cfg = configuration or rt.settings.configuration
    with _fail_on_error():
        path = _resolve(target, find_solutions(Path.cwd()), "solution")
        args = [a.replace("{configuration}", cfg) for a in rt.settings.test_runner_args]
        rt.run([rt.settings.test_runner, *args, str(path)])
        console.print(f"✅ Tests passed for {path.name}{_dry_note(rt)}")


@app.command()
def pack(
    ctx: typer.Context,
    nuspec: Optional[Path] = typer.Argument(None, help=".nuspec manifest (discovered when omitted)."),
    output_dir: Optional[Path] = typer.Option(None, "--output-dir", "-o", help="Where to write the package."),
    version: Optional[str] = typer.Option(None, "--version", help="Override the manifest version."),
    symbols: bool = typer.Option(False, "--symbols", help="Also create a symbols package."),
    configuration: Optional[str] = typer.Option(None, "--configuration", "-c", help="Build configuration."),
) -> None:
    """Create a NuGet package from a .nuspec manifest."""
    rt = _runtime(ctx)
    out = output_dir or rt.settings.output_dir
    cfg = configuration or rt.settings.configuration
    with _fail_on_error():
        path = _resolve(nuspec, find_nuspecs(Path.cwd()), "nuspec")
        if not rt.dry_run:
            out.mkdir(parents=True, exist_ok=True)
        argv = [rt.settings.nuget, "pack", str(path), "-OutputDirectory", str(out), "-NonInteractive"]
        if version:
            argv += ["-Version", version]
        if symbols:
            argv.append("-Symbols")
        argv += ["-Properties", f"Configuration={cfg}"]
        result = rt.run(argv)
        if result.dry_run:
            console.print(f"Would pack {path.name} into {out}{_dry_note(rt)}")
            return
        match = rt.matchers.search(PACKAGE_CREATED, result.output)
        if match is None:
            raise ToolOutputError(f"{rt.settings.nuget} did not report a created package", result)
        console.print(f"📦 Created [bold green]{match.group('path')}[/]")


@app.command()
def push(
    ctx: typer.Context,
    package: Optional[Path] = typer.Argument(None, help="Package to push (newest in the output directory when omitted)."),
    source: Optional[str] = typer.Option(None, "--source", "-s", help="Package source URL."),
    api_key: Optional[str] = typer.Option(None, "--api-key", help="API key for the source."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
) -> None:
    """Publish a package with nuget push."""
    rt = _runtime(ctx)
    src = source or rt.settings.package_source
    with _fail_on_error():
        if package is None:
            candidates = find_packages(rt.settings.output_dir)
            if not candidates:
                raise DiscoveryError(f"no package found in {rt.settings.output_dir}")
            pkg = candidates[0]
        else:
            pkg = _resolve(package, [], "package")
        if not yes and not typer.confirm(f"Push {pkg.name} to {src}?", default=False):
            console.print("[dim]Skipped by user.[/dim]")
            return
        key = api_key or rt.settings.api_key
        if key is None and not rt.dry_run:
            key = typer.prompt("API key (empty for none)", default="", show_default=False, hide_input=True)
        argv = [rt.settings.nuget, "push", str(pkg), "-Source", src, "-NonInteractive"]
        if key:
            argv += ["-ApiKey", key]
        result = rt.run(argv, secrets=[key] if key else [])
        if not result.dry_run and not rt.matchers.matches(PACKAGE_PUSHED, result.output):
            raise ToolOutputError(f"{rt.settings.nuget} did not confirm the push of {pkg.name}", result)
        console.print(f"🚀 Pushed [bold green]{pkg.name}[/] to {src}{_dry_note(rt)}")


def _entry() -> None:
    app()


if __name__ == "__main__":
    _entry()
