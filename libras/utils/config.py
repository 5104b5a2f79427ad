"""Loading YAML configuration files and merging override mappings."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

import yaml

__all__ = ["PROJECT_ROOT", "deep_update", "load_config"]

PROJECT_ROOT = Path(__file__).resolve().parents[2]


def load_config(path: str | Path, *, missing_ok: bool = False) -> dict[str, Any]:
    """Return the mapping stored in the YAML document at ``path``.

    An empty document yields ``{}``. With ``missing_ok`` a missing file also
    yields ``{}`` instead of raising :class:`FileNotFoundError`.
    """

    config_path = Path(path)
    if not config_path.exists():
        if missing_ok:
            return {}
        raise FileNotFoundError(f"configuration file not found: {config_path}")
    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"failed to parse configuration {config_path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError("configuration root must be a mapping")
    return data


def deep_update(base: Mapping[str, Any], updates: Mapping[str, Any]) -> dict[str, Any]:
    """Return ``base`` with ``updates`` recursively merged."""

    result: dict[str, Any] = dict(base)
    for key, value in updates.items():
        if isinstance(value, Mapping) and isinstance(result.get(key), Mapping):
            result[key] = deep_update(result[key], value)
        else:
            result[key] = value
    return result
