# src/dotnet_release/config.py
# =============================================================================
# Settings for dotnet-release.
#
# Precedence (lowest first): built-in defaults < YAML file < environment.
# The YAML file is the one passed with --config, else ./dotnet-release.yaml
# when it exists.
# =============================================================================

from __future__ import annotations

import dataclasses
import logging
import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import yaml

from .errors import ConfigError

log = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "dotnet-release.yaml"
ENV_PREFIX = "DOTNET_RELEASE_"


@dataclass
class Settings:
    nuget: str = "nuget"
    msbuild: str = "msbuild"
    test_runner: str = "dotnet"
    test_runner_args: List[str] = field(default_factory=lambda: ["test", "--configuration", "{configuration}"])
    configuration: str = "Release"
    package_source: str = "https://api.nuget.org/v3/index.json"
    api_key: Optional[str] = None
    output_dir: Path = Path("artifacts")
    locale: str = "en-US"
    assembly_attributes: List[str] = field(
        default_factory=lambda: ["AssemblyVersion", "AssemblyFileVersion"]
    )

    def as_dict(self, redact: bool = True) -> Dict[str, Any]:
        data = dataclasses.asdict(self)
        if redact and data.get("api_key"):
            data["api_key"] = "********"
        data["output_dir"] = str(self.output_dir)
        return data


# env var suffix -> field name
_ENV_FIELDS = {
    "NUGET": "nuget",
    "MSBUILD": "msbuild",
    "TEST_RUNNER": "test_runner",
    "TEST_RUNNER_ARGS": "test_runner_args",
    "CONFIGURATION": "configuration",
    "SOURCE": "package_source",
    "API_KEY": "api_key",
    "OUTPUT_DIR": "output_dir",
    "LOCALE": "locale",
}

_LIST_FIELDS = {"test_runner_args", "assembly_attributes"}


def _coerce(name: str, value: Any) -> Any:
    if name == "output_dir":
        return Path(value)
    if name in _LIST_FIELDS:
        if isinstance(value, str):
            return shlex.split(value)
        if not isinstance(value, (list, tuple)):
            raise ConfigError(f"setting '{name}' must be a list, got {type(value).__name__}")
        return [str(v) for v in value]
    return value if value is None else str(value)


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except OSError as exc:
        raise ConfigError(f"cannot read config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML in {path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError(f"config file {path} must contain a mapping")
    return raw


def load_settings(
    path: Optional[Union[str, Path]] = None,
    env: Optional[Mapping[str, str]] = None,
    cwd: Optional[Path] = None,
) -> Settings:
    env = os.environ if env is None else env
    known = {f.name for f in dataclasses.fields(Settings)}
    values: Dict[str, Any] = {}

    config_path = Path(path) if path else (cwd or Path.cwd()) / DEFAULT_CONFIG_FILE
    if path or config_path.is_file():
        raw = _read_yaml(config_path)
        unknown = sorted(set(raw) - known)
        if unknown:
            raise ConfigError(f"unknown settings in {config_path}: {', '.join(unknown)}")
        for key, value in raw.items():
            values[key] = _coerce(key, value)
        log.debug("loaded settings from %s", config_path)

    for suffix, name in _ENV_FIELDS.items():
        value = env.get(ENV_PREFIX + suffix)
        if value:
            values[name] = _coerce(name, value)

    return Settings(**values)
