"""Utility helpers for loading YAML configuration files."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import yaml

__all__ = ["load_config"]


def load_config(path: str | Path) -> Dict[str, Any]:
    """Return the settings mapping stored as YAML at ``path``.

    An empty document yields an empty mapping; anything other than a mapping
    at the root is rejected with :class:`ValueError`.
    """

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"configuration file not found: {config_path}")
    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"invalid YAML in {config_path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{config_path} must contain a mapping, got {type(data).__name__}")
    return data
