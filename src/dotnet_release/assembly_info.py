# src/dotnet_release/assembly_info.py
# =============================================================================
# Reading and rewriting version attributes in AssemblyInfo sources.
#
#   C#: [assembly: AssemblyVersion("1.0.*")]
#   VB: <Assembly: AssemblyVersion("1.0.*")>
#
# Only the quoted version literal is replaced; BOM, line endings and everything
# else in the file are written back as read.
# =============================================================================

from __future__ import annotations

import codecs
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Pattern, Tuple

from .errors import ReleaseToolError
from .versioning import IncrementFlags, bump_version_string

log = logging.getLogger(__name__)

DEFAULT_ATTRIBUTES = ("AssemblyVersion", "AssemblyFileVersion")


def _attribute_pattern(name: str) -> Pattern[str]:
    # Matches both [assembly: X("...")] and <Assembly: X("...")>, with or without
    # the Attribute suffix and a System.Reflection qualifier.
    return re.compile(
        r"(?P<head>[\[<]\s*[Aa]ssembly\s*:\s*(?:System\.Reflection\.)?"
        + re.escape(name)
        + r"(?:Attribute)?\s*\(\s*\")(?P<version>[^\"]*)(?P<tail>\"\s*\)\s*[\]>])"
    )


@dataclass
class SourceText:
    """Decoded file content plus what is needed to write it back unchanged."""

    text: str
    bom: bool = False

    @classmethod
    def read(cls, path: Path) -> "SourceText":
        try:
            raw = Path(path).read_bytes()
        except OSError as exc:
            raise ReleaseToolError(f"cannot read {path}: {exc.strerror or exc}") from exc
        bom = raw.startswith(codecs.BOM_UTF8)
        try:
            text = raw.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise ReleaseToolError(
                f"{path}: not UTF-8 encoded (byte {exc.start}); re-save the file as UTF-8"
            ) from exc
        return cls(text, bom)

    def write(self, path: Path) -> None:
        data = self.text.encode("utf-8")
        if self.bom:
            data = codecs.BOM_UTF8 + data
        try:
            Path(path).write_bytes(data)
        except OSError as exc:
            raise ReleaseToolError(f"cannot write {path}: {exc.strerror or exc}") from exc


def read_versions(text: str, attributes: Iterable[str] = DEFAULT_ATTRIBUTES) -> Dict[str, str]:
    """First version literal for each attribute present in ``text``."""
    found: Dict[str, str] = {}
    for name in attributes:
        m = _attribute_pattern(name).search(text)
        if m:
            found[name] = m.group("version")
    return found


def replace_versions(
    text: str, flags: IncrementFlags, attributes: Iterable[str] = DEFAULT_ATTRIBUTES
) -> Tuple[str, Dict[str, Tuple[str, str]]]:
    """
    Increment every selected attribute in ``text``.

    Returns the new text and ``{attribute: (old, new)}`` for the attributes
    that were found.
    """
    changes: Dict[str, Tuple[str, str]] = {}
    for name in attributes:
        pattern = _attribute_pattern(name)

        def _sub(m: "re.Match[str]") -> str:
            old = m.group("version")
            new = bump_version_string(old, flags)
            changes.setdefault(name, (old, new))
            return f"{m.group('head')}{new}{m.group('tail')}"

        text = pattern.sub(_sub, text)
    return text, changes


@dataclass
class AssemblyInfoUpdate:
    path: Path
    changes: Dict[str, Tuple[str, str]] = field(default_factory=dict)

    @property
    def changed(self) -> bool:
        return any(old != new for old, new in self.changes.values())


def update_assembly_info(
    path: Path,
    flags: IncrementFlags,
    attributes: Iterable[str] = DEFAULT_ATTRIBUTES,
    *,
    dry_run: bool = False,
) -> AssemblyInfoUpdate:
    source = SourceText.read(path)
    new_text, changes = replace_versions(source.text, flags, list(attributes))
    update = AssemblyInfoUpdate(Path(path), changes)
    if not changes:
        log.warning("%s: no version attributes found", path)
        return update
    for name, (old, new) in changes.items():
        log.info("%s: %s %s -> %s", path, name, old, new)
    if update.changed and not dry_run:
        SourceText(new_text, source.bom).write(path)
    return update


def read_assembly_versions(path: Path, attributes: Optional[List[str]] = None) -> Dict[str, str]:
    return read_versions(SourceText.read(path).text, attributes or DEFAULT_ATTRIBUTES)
