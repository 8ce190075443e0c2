"""Logging helpers shared by every sigil module."""

from __future__ import annotations

import logging
import logging.config
from pathlib import Path
from threading import RLock
from typing import Any, Mapping

import yaml

_CONFIG_LOCK = RLock()
_CONFIGURED = False

_CONFIG_KEYS = ("version", "disable_existing_loggers", "formatters", "handlers", "loggers")

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
    "loggers": {
        "sigil": {
            "level": "WARNING",
            "handlers": ["console"],
            "propagate": False,
        }
    },
}


_DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "configs" / "logging.yaml"


def _load_config(path: Path | None = None) -> dict[str, Any]:
    config_path = path or _DEFAULT_CONFIG_PATH
    if not config_path.exists():
        return dict(_DEFAULT_CONFIG)
    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:  # pragma: no cover - broken configs fall back to defaults
        logging.getLogger("sigil.telemetry").warning("failed to parse %s: %s", config_path, exc)
        return dict(_DEFAULT_CONFIG)
    if not isinstance(data, Mapping):
        return dict(_DEFAULT_CONFIG)
    merged = dict(_DEFAULT_CONFIG)
    merged.update({k: v for k, v in data.items() if k in _CONFIG_KEYS})
    return merged


def configure(path: str | Path | None = None, *, force: bool = False) -> None:
    """Ensure the logging subsystem is configured exactly once.

    ``force`` re-applies the configuration, which lets applications swap in
    their own ``logging.yaml`` after the first import of a sigil module.
    """

    global _CONFIGURED
    with _CONFIG_LOCK:
        if _CONFIGURED and not force:
            return
        config = _load_config(Path(path) if path is not None else None)
        logging.config.dictConfig(config)
        _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger configured via ``configs/logging.yaml``."""

    if not isinstance(name, str) or not name:
        raise ValueError("logger name must be a non-empty string")
    configure()
    return logging.getLogger(name)


__all__ = ["configure", "get_logger"]
