"""Logging helpers shared by every lexshift component."""

from __future__ import annotations

import logging
import logging.config
import os
from pathlib import Path
from threading import RLock
from typing import Any, Mapping

import yaml

LOGGING_CONFIG_ENV = "LEXSHIFT_LOGGING_CONFIG"
LOG_LEVEL_ENV = "LEXSHIFT_LOG_LEVEL"

_CONFIG_LOCK = RLock()
_CONFIGURED = False

_DEFAULT_CONFIG: dict[str, Any] = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        }
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stderr",
            "formatter": "standard",
        }
    },
    "root": {
        "level": "WARNING",
        "handlers": ["console"],
    },
    "loggers": {
        "lexshift": {
            "level": "INFO",
            "handlers": ["console"],
            "propagate": False,
        }
    },
}

_ALLOWED_KEYS = ("version", "disable_existing_loggers", "formatters", "handlers", "root", "loggers")


def _config_path() -> Path:
    override = os.environ.get(LOGGING_CONFIG_ENV)
    if override:
        return Path(override)
    return Path(__file__).resolve().parents[2] / "configs" / "logging.yaml"


def _load_config() -> dict[str, Any]:
    config_path = _config_path()
    if not config_path.exists():
        return dict(_DEFAULT_CONFIG)
    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:  # pragma: no cover - guard rails for broken configs
        logging.basicConfig(level=logging.INFO)
        logging.getLogger("lexshift.telemetry").warning("failed to parse %s: %s", config_path, exc)
        return dict(_DEFAULT_CONFIG)
    if not isinstance(data, Mapping):
        return dict(_DEFAULT_CONFIG)
    merged = dict(_DEFAULT_CONFIG)
    merged.update({k: v for k, v in data.items() if k in _ALLOWED_KEYS})
    return merged


def _with_level(config: dict[str, Any], level: str) -> dict[str, Any]:
    level_name = level.strip().upper()
    if not isinstance(logging.getLevelName(level_name), int):
        raise ValueError(f"unknown log level: {level!r}")
    loggers = {name: dict(settings) for name, settings in config.get("loggers", {}).items()}
    lexshift = loggers.setdefault(
        "lexshift", {"handlers": ["console"], "propagate": False}
    )
    lexshift["level"] = level_name
    return {**config, "loggers": loggers}


def configure(*, level: str | None = None, force: bool = False) -> None:
    """Ensure the logging subsystem is configured exactly once.

    ``level`` (or ``LEXSHIFT_LOG_LEVEL``) overrides the level of the
    ``lexshift`` logger tree, e.g. ``DEBUG`` to see skipped dictionary lines.
    """

    global _CONFIGURED
    with _CONFIG_LOCK:
        if _CONFIGURED and not force:
            return
        config = _load_config()
        level = level or os.environ.get(LOG_LEVEL_ENV)
        if level:
            config = _with_level(config, level)
        logging.config.dictConfig(config)
        _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger configured via ``configs/logging.yaml``."""

    if not isinstance(name, str) or not name:
        raise ValueError("logger name must be a non-empty string")
    configure()
    return logging.getLogger(name)


__all__ = ["LOGGING_CONFIG_ENV", "LOG_LEVEL_ENV", "configure", "get_logger"]
