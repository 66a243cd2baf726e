# src/dotnet_release/tool_output.py
# =============================================================================
# Recognising messages in (localized) tool output.
#
# nuget.exe and msbuild print their status lines in the UI language of the
# machine. messages.yaml maps locale -> message kind -> regex/literal; the table
# for one locale is resolved once per invocation and handed to the commands.
# =============================================================================

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Pattern, Union

import yaml

from .errors import ConfigError

log = logging.getLogger(__name__)

PACKAGE_CREATED = "package_created"
PACKAGE_PUSHED = "package_pushed"
RESTORE_NOTHING_TO_DO = "restore_nothing_to_do"
BUILD_SUCCEEDED = "build_succeeded"


@dataclass(frozen=True)
class ToolOutputMatchers:
    locale: str
    patterns: Mapping[str, Pattern[str]]

    def search(self, kind: str, text: str) -> Optional["re.Match[str]"]:
        try:
            pattern = self.patterns[kind]
        except KeyError:
            raise ConfigError(f"no '{kind}' message defined for locale {self.locale}") from None
        return pattern.search(text)

    def matches(self, kind: str, text: str) -> bool:
        return self.search(kind, text) is not None


def _compile(locale: str, kind: str, entry: Any) -> Pattern[str]:
    if isinstance(entry, str):
        return re.compile(re.escape(entry))
    if isinstance(entry, dict) and len(entry) == 1:
        if "regex" in entry:
            try:
                return re.compile(entry["regex"])
            except re.error as exc:
                raise ConfigError(f"bad regex for {locale}/{kind}: {exc}") from exc
        if "literal" in entry:
            return re.compile(re.escape(str(entry["literal"])))
    raise ConfigError(f"message {locale}/{kind} must be a regex or literal")


def _load_table(path: Optional[Union[str, Path]]) -> Dict[str, Any]:
    try:
        if path is None:
            text = resources.files("dotnet_release").joinpath("messages.yaml").read_text(encoding="utf-8")
        else:
            text = Path(path).read_text(encoding="utf-8")
        table = yaml.safe_load(text) or {}
    except OSError as exc:
        raise ConfigError(f"cannot read message table: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid message table: {exc}") from exc
    if not isinstance(table, dict):
        raise ConfigError("message table must map locales to messages")
    return table


def resolve_locale(tag: str, available) -> str:
    """Exact tag first, then its language part ('de-AT' -> 'de')."""
    candidates = [tag, tag.replace("_", "-"), tag.replace("_", "-").split("-")[0]]
    for candidate in candidates:
        if candidate in available:
            return candidate
    raise ConfigError(f"no tool messages for locale '{tag}' (known: {', '.join(sorted(available))})")


def load_output_matchers(locale: str, path: Optional[Union[str, Path]] = None) -> ToolOutputMatchers:
    table = _load_table(path)
    resolved = resolve_locale(locale, table)
    messages = table[resolved] or {}
    patterns = {kind: _compile(resolved, kind, entry) for kind, entry in messages.items()}
    log.debug("tool output matchers for %s (resolved %s): %s", locale, resolved, sorted(patterns))
    return ToolOutputMatchers(resolved, MappingProxyType(patterns))
