"""Logging setup for the ``libras`` logger tree.

Configuration is applied once, lazily, the first time a logger is requested.
``configs/logging.yaml`` is optional; its sections are merged over the
built-in defaults so a file may override a single handler or logger.
"""

from __future__ import annotations

import copy
import logging
import logging.config
from pathlib import Path
from threading import RLock
from typing import Any, Mapping

import yaml

from libras.utils.config import PROJECT_ROOT, deep_update

LOGGING_CONFIG_PATH = PROJECT_ROOT / "configs" / "logging.yaml"

_SECTIONS = ("version", "disable_existing_loggers", "formatters", "handlers", "root", "loggers")

_DEFAULT_CONFIG: dict[str, Any] = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {"format": "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"},
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stderr",
            "formatter": "standard",
        },
    },
    "root": {"level": "WARNING", "handlers": ["console"]},
    "loggers": {
        "libras": {"level": "INFO", "handlers": ["console"], "propagate": False},
    },
}

_LOCK = RLock()
_CONFIGURED = False


def build_config(path: Path | None = None) -> dict[str, Any]:
    """Return the ``dictConfig`` payload for ``path`` merged over the defaults."""

    source = LOGGING_CONFIG_PATH if path is None else Path(path)
    if not source.is_file():
        return copy.deepcopy(_DEFAULT_CONFIG)
    try:
        data = yaml.safe_load(source.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        logging.getLogger("libras.telemetry").warning(
            "ignoring unreadable logging config %s: %s", source, exc
        )
        data = None
    overrides: Mapping[str, Any] = data if isinstance(data, Mapping) else {}
    merged = deep_update(
        _DEFAULT_CONFIG, {key: value for key, value in overrides.items() if key in _SECTIONS}
    )
    return copy.deepcopy(merged)


def configure(path: Path | None = None, *, force: bool = False) -> None:
    """Apply the logging configuration unless it is already in place."""

    global _CONFIGURED
    with _LOCK:
        if _CONFIGURED and not force:
            return
        logging.config.dictConfig(build_config(path))
        _CONFIGURED = True


def set_level(level: int | str) -> None:
    configure()
    logging.getLogger("libras").setLevel(level.upper() if isinstance(level, str) else level)


def get_logger(name: str) -> logging.Logger:
    if not isinstance(name, str) or not name:
        raise ValueError("logger name must be a non-empty string")
    configure()
    return logging.getLogger(name)


__all__ = ["LOGGING_CONFIG_PATH", "build_config", "configure", "get_logger", "set_level"]
