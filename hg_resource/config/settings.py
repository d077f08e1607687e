"""YAML settings loader.

Settings are optional; without a file every value has a built-in default.
The file is located by, in order: an explicit path, ``$HG_RESOURCE_CONFIG``.

Schema (all keys optional):
  cache_dir: path           where the repository clone is kept
  hg_binary: string         Mercurial executable
  ssh_agent_binary: string  ssh-agent executable
  ssh_add_binary: string    ssh-add executable
  default_branch: string    branch used when the source names none
  log_level: debug | info | warning | error
"""

from __future__ import annotations

import tempfile
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from hg_resource.domain.errors import ConfigError
from hg_resource.domain.models import DEFAULT_BRANCH

CONFIG_ENV_VAR = "HG_RESOURCE_CONFIG"

CACHE_DIR_NAME = "hg-resource-repo-cache"

LOG_LEVELS = ("debug", "info", "warning", "error")


def default_cache_dir() -> Path:
    return Path(tempfile.gettempdir()) / CACHE_DIR_NAME


@dataclass(frozen=True)
class Settings:
    cache_dir: Path = field(default_factory=default_cache_dir)
    hg_binary: str = "hg"
    ssh_agent_binary: str = "ssh-agent"
    ssh_add_binary: str = "ssh-add"
    default_branch: str = DEFAULT_BRANCH
    log_level: str = "warning"


def load_settings(path: Path | None = None, environ: Mapping[str, str] | None = None) -> Settings:
    """Load Settings from *path*, or from ``$HG_RESOURCE_CONFIG`` when unset.

    Raises:
        ConfigError: if the file is missing, unreadable, or invalid.
    """
    if path is None and environ is not None and environ.get(CONFIG_ENV_VAR):
        path = Path(environ[CONFIG_ENV_VAR])
    if path is None:
        return Settings()

    if not path.exists():
        raise ConfigError(f"Settings file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as err:
        raise ConfigError(f"Could not read settings file {path}: {err}") from err

    return _parse_settings(data, source=str(path))


def _parse_settings(data: Any, source: str = "") -> Settings:
    if not isinstance(data, dict):
        raise ConfigError(f"Settings must be a mapping (source: {source})")

    known = {f.name for f in fields(Settings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown settings {', '.join(unknown)} (source: {source})")

    values: dict[str, Any] = {}
    for key, value in data.items():
        if not isinstance(value, str) or not value:
            raise ConfigError(f"Setting '{key}' must be a non-empty string (source: {source})")
        values[key] = value

    if "cache_dir" in values:
        values["cache_dir"] = Path(values["cache_dir"]).expanduser()

    level = values.get("log_level")
    if level is not None:
        level = level.lower()
        if level not in LOG_LEVELS:
            raise ConfigError(f"Invalid log_level '{level}' (source: {source})")
        values["log_level"] = level

    return Settings(**values)
