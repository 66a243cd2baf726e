# src/dotnet_release/versioning.py
# =============================================================================
# Dotted version parsing and component increments.
#
# Versions look like MAJOR.MINOR[.REVISION[.BUILD]] where REVISION and BUILD may
# be the wildcard "*" (assigned by the compiler at build time). Forcing four
# components pads a 3-part version with an empty placeholder slot.
# =============================================================================

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from .errors import MalformedVersionComponentError, MalformedVersionError

log = logging.getLogger(__name__)

WILDCARD = "*"
PLACEHOLDER = ""
SEPARATOR = "."


class VersionComponent(enum.IntEnum):
    MAJOR = 0
    MINOR = 1
    REVISION = 2
    BUILD = 3


@dataclass(frozen=True)
class Version:
    """
    A 2–4 component version. ``revision`` and ``build`` are None when the parsed
    string did not have them.
    """

    major: str
    minor: str
    revision: Optional[str] = None
    build: Optional[str] = None

    @classmethod
    def parse(cls, text: str) -> "Version":
        parts = text.strip().split(SEPARATOR)
        if not 2 <= len(parts) <= 4:
            raise MalformedVersionError(
                f"version {text!r} must have 2 to 4 components, got {len(parts)}"
            )
        return cls(*parts)

    @property
    def components(self) -> Tuple[str, ...]:
        values = (self.major, self.minor, self.revision, self.build)
        return tuple(v for v in values if v is not None)

    def __len__(self) -> int:
        return len(self.components)

    def __str__(self) -> str:
        return SEPARATOR.join(self.components)


@dataclass(frozen=True)
class IncrementFlags:
    major: bool = False
    minor: bool = False
    revision: bool = False
    build: bool = False
    force_four_components: bool = False

    @property
    def is_empty(self) -> bool:
        return not (self.major or self.minor or self.revision or self.build or self.force_four_components)

    def with_default(self) -> "IncrementFlags":
        """Nothing selected means: increment Build, forcing four components."""
        if self.is_empty:
            return IncrementFlags(build=True, force_four_components=True)
        return self


def _to_int(component: VersionComponent, value: str) -> int:
    if value == PLACEHOLDER and component >= VersionComponent.REVISION:
        return 0
    try:
        return int(value)
    except ValueError:
        raise MalformedVersionComponentError(component.name.lower(), value) from None


def _increment(component: VersionComponent, value: str) -> str:
    return str(_to_int(component, value) + 1)


def _update_optional(
    component: VersionComponent, value: Optional[str], selected: bool, force: bool
) -> Optional[str]:
    if value is None:
        if selected:
            log.debug("%s not present, nothing to increment", component.name.lower())
        return None
    if selected:
        if value != WILDCARD:
            value = _increment(component, value)
        elif force:
            value = _increment(component, "0")
    # Only the wildcard is normalized; an empty placeholder is left alone.
    if value == WILDCARD and force:
        value = "0"
    return value


def update_version(current: Version, flags: IncrementFlags) -> Version:
    """
    Apply ``flags`` to ``current`` and return the new version.

    Flags are applied literally; call ``IncrementFlags.with_default()`` first to
    get the "no flags means Build + force" behaviour.
    """
    updated = current
    force = flags.force_four_components
    if force and len(updated) == 3:
        updated = replace(updated, build=PLACEHOLDER)

    if flags.major:
        updated = replace(updated, major=_increment(VersionComponent.MAJOR, updated.major))
    if flags.minor:
        updated = replace(updated, minor=_increment(VersionComponent.MINOR, updated.minor))

    updated = replace(
        updated,
        revision=_update_optional(VersionComponent.REVISION, updated.revision, flags.revision, force),
        build=_update_optional(VersionComponent.BUILD, updated.build, flags.build, force),
    )
    log.debug("version %s -> %s (%s)", current, updated, flags)
    return updated


def bump_version_string(text: str, flags: IncrementFlags) -> str:
    return str(update_version(Version.parse(text), flags))
