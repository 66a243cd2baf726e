# src/dotnet_release/discovery.py
# File system search for solutions, manifests, AssemblyInfo sources and packages.

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence

from .errors import DiscoveryError

log = logging.getLogger(__name__)

ASSEMBLY_INFO_NAMES = ("AssemblyInfo.cs", "AssemblyInfo.vb")
_SKIP_DIRS = {"bin", "obj", "packages", ".git", ".vs", "node_modules"}

Chooser = Callable[[Sequence[Path], str], Path]


def _skipped(path: Path, root: Path) -> bool:
    return any(part in _SKIP_DIRS for part in path.relative_to(root).parts[:-1])


def find_files(root: Path, patterns: Iterable[str], recursive: bool = True) -> List[Path]:
    root = Path(root)
    found = set()
    for pattern in patterns:
        matches = root.rglob(pattern) if recursive else root.glob(pattern)
        found.update(p for p in matches if p.is_file() and not _skipped(p, root))
    return sorted(found)


def find_solutions(root: Path) -> List[Path]:
    return find_files(root, ["*.sln"], recursive=False)


def find_nuspecs(root: Path) -> List[Path]:
    return find_files(root, ["*.nuspec"], recursive=False)


def find_assembly_infos(root: Path) -> List[Path]:
    return find_files(root, ASSEMBLY_INFO_NAMES)


def find_packages(directory: Path) -> List[Path]:
    """*.nupkg files in ``directory`` (symbol packages excluded), newest first."""
    directory = Path(directory)
    if not directory.is_dir():
        return []
    packages = [p for p in directory.glob("*.nupkg") if not p.name.endswith(".symbols.nupkg")]
    return sorted(packages, key=lambda p: (p.stat().st_mtime, p.name), reverse=True)


def select_one(candidates: Sequence[Path], what: str, choose: Optional[Chooser] = None) -> Path:
    """
    Return the single candidate; with several, ask ``choose`` (interactive prompt)
    or fail when there is nobody to ask.
    """
    if not candidates:
        raise DiscoveryError(f"no {what} found")
    if len(candidates) == 1:
        log.debug("using %s %s", what, candidates[0])
        return candidates[0]
    if choose is None:
        names = ", ".join(p.name for p in candidates)
        raise DiscoveryError(f"several {what} files found, pick one explicitly: {names}")
    return choose(candidates, what)
