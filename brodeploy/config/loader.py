"""Per-network deploy config loading."""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any

from brodeploy.exceptions import ConfigError, ConfigNotFoundError


def config_path(network_id: str, config_dir: Path) -> Path:
    return Path(config_dir) / f"{network_id}.json"


def load_config(network_id: str, config_dir: Path = Path("config")) -> dict[str, Any]:
    """Load ``<config_dir>/<network_id>.json``.

    Only JSON parsing happens here; each contract section is validated when its
    instantiate message is built.

    Raises:
        ConfigNotFoundError: If the file does not exist.
    """
    path = config_path(network_id, config_dir)
    if not path.exists():
        raise ConfigNotFoundError(path)
    with open(path) as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must contain a JSON object")
    return data


def config_section(config: dict[str, Any], key: str) -> dict[str, Any]:
    """Return a deep copy of one top-level section so callers can fill it in."""
    section = config.get(key)
    if section is None:
        raise ConfigError(f"Config section '{key}' is missing")
    if not isinstance(section, dict):
        raise ConfigError(f"Config section '{key}' must be an object")
    return copy.deepcopy(section)
