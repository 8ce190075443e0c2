"""Runtime settings for building a :class:`~sigil.runtime.api.Signet`."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from sigil.utils import config as config_loader

__all__ = ["DEFAULT_SETTINGS_PATH", "RuntimeSettings", "load_settings"]

DEFAULT_SETTINGS_PATH = Path(__file__).resolve().parents[2] / "configs" / "sigil.yaml"


@dataclass(slots=True)
class RuntimeSettings:
    """Which type libraries to install and which aliases to register."""

    extended_types: bool = True
    aliases: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "RuntimeSettings":
        payload = dict(data or {})
        extended = payload.get("extended_types", True)
        if not isinstance(extended, bool):
            raise ValueError("extended_types must be a boolean")
        raw_aliases = payload.get("aliases") or {}
        if not isinstance(raw_aliases, Mapping):
            raise ValueError("aliases must be a mapping of name to type expression")
        aliases: dict[str, str] = {}
        for name, expression in raw_aliases.items():
            if not isinstance(name, str) or not isinstance(expression, str):
                raise ValueError(f"alias {name!r} must map a name to a type expression string")
            aliases[name] = expression
        return cls(extended_types=extended, aliases=aliases)

    def to_dict(self) -> dict[str, Any]:
        return {"extended_types": self.extended_types, "aliases": dict(self.aliases)}


def load_settings(path: str | Path | None = None) -> RuntimeSettings:
    """Load settings from ``path``; ``None`` yields the defaults."""

    if path is None:
        return RuntimeSettings()
    return RuntimeSettings.from_mapping(config_loader.load_config(path))
