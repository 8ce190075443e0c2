"""Convenience exports for sigil telemetry utilities."""

from . import logger

__all__ = ["logger"]
