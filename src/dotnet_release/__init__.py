"""
dotnet-release: version bumping and build/pack/push automation for .NET solutions.

Exposes:
    __version__ : str
        Package version identifier.
    Version, IncrementFlags, update_version
        Dotted version parsing and component increments.
    XmlPath, get_element_text, set_element_text
        Dotted-path element access for .nuspec-like documents.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .errors import MalformedVersionComponentError, MissingAncestorError, ReleaseToolError
from .versioning import IncrementFlags, Version, VersionComponent, bump_version_string, update_version
from .xmlpath import XmlPath, find_element, get_element_text, set_element_text

__all__ = [
    "__version__",
    "IncrementFlags",
    "MalformedVersionComponentError",
    "MissingAncestorError",
    "ReleaseToolError",
    "Version",
    "VersionComponent",
    "XmlPath",
    "bump_version_string",
    "find_element",
    "get_element_text",
    "set_element_text",
    "update_version",
]
