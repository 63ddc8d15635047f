"""Utility helpers for loading YAML configuration files."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

__all__ = ["load_config"]


def load_config(path: str | Path) -> dict[str, Any]:
    """Return the parsed YAML document located at ``path``.

    Raises :class:`FileNotFoundError` when the file is missing and
    :class:`ValueError` when it does not parse or its root is not a mapping.
    An empty document yields an empty dictionary.
    """

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"configuration file not found: {config_path}")
    raw_text = config_path.read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(raw_text)
    except yaml.YAMLError as exc:
        raise ValueError(f"failed to parse configuration: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError("configuration root must be a mapping")
    return data
