"""Manager config loading from YAML."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from tokenkeeper.models.config import ManagerConfig

DEFAULT_CONFIG_PATH = Path(".tokenkeeper") / "config.yaml"


def load_config(
    path: str | Path | None = None,
    *,
    overrides: dict[str, Any] | None = None,
) -> ManagerConfig:
    """Load a ManagerConfig, applying ``overrides`` on top of the file.

    When ``path`` is None the default location is tried and silently skipped
    if absent. An explicit path that does not exist raises FileNotFoundError.
    """
    data: dict[str, Any] = {}
    if path is None:
        if DEFAULT_CONFIG_PATH.exists():
            data = _read_yaml(DEFAULT_CONFIG_PATH)
    else:
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        data = _read_yaml(config_path)

    for key, value in (overrides or {}).items():
        if value is None:
            continue
        if isinstance(value, dict) and isinstance(data.get(key), dict):
            data[key] = {**data[key], **value}
        else:
            data[key] = value

    try:
        return ManagerConfig.model_validate(data)
    except ValidationError as exc:
        source = path or DEFAULT_CONFIG_PATH
        raise ValueError(f"Invalid config {source}: {exc}") from exc


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ValueError(f"Invalid config {path}: expected a mapping at top level")
    return loaded


def parse_cookie_pairs(pairs: tuple[str, ...] | list[str]) -> dict[str, str]:
    """Parse ``NAME=VALUE`` strings from the command line."""
    cookies: dict[str, str] = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep or not name.strip():
            raise ValueError(f"Invalid cookie '{pair}': expected NAME=VALUE")
        cookies[name.strip()] = value
    return cookies
