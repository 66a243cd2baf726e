# src/dotnet_release/errors.py
# =============================================================================
# Error taxonomy for dotnet-release.
#
# Library modules raise these; only the CLI layer turns them into exit codes.
# Nothing here is retried.
# =============================================================================

from __future__ import annotations

from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from .runner import CommandResult


class ReleaseToolError(RuntimeError):
    """Base error for every failure reported by dotnet-release."""


class MalformedVersionError(ReleaseToolError, ValueError):
    """Raised when a version string does not have 2–4 dot-separated components."""


class MalformedVersionComponentError(MalformedVersionError):
    """Raised when a component must be an integer but is not."""

    def __init__(self, component: str, value: str) -> None:
        self.component = component
        self.value = value
        super().__init__(f"{component} component {value!r} is not an integer")


class MissingAncestorError(ReleaseToolError, LookupError):
    """Raised when a new element cannot be created because its parent is absent."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"parent element '{path}' does not exist")


class DiscoveryError(ReleaseToolError):
    """No candidate file (or no unambiguous one) was found."""


class ConfigError(ReleaseToolError):
    """Settings or message tables could not be loaded."""


class ExternalCommandError(ReleaseToolError):
    """An external tool was missing or exited with a non-zero code."""

    def __init__(self, message: str, result: Optional["CommandResult"] = None) -> None:
        self.result = result
        super().__init__(message)

    @property
    def returncode(self) -> Optional[int]:
        return self.result.returncode if self.result is not None else None


class ToolOutputError(ExternalCommandError):
    """The tool exited cleanly but its output lacked the expected message."""
