"""Public facade bundling a registry with its enforcer.

Every public operation of :class:`Signet` is itself an enforced function, so
misuse such as ``extend(5, predicate)`` fails with the same errors user code
gets, and each operation advertises its own contract through ``.signature``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Optional

from sigil.registry import extended
from sigil.registry.types import TypeRegistry
from sigil.runtime.settings import RuntimeSettings, load_settings
from sigil.telemetry.logger import get_logger
from sigil.verifier.enforcement import EnforcedFunction, Enforcer

__all__ = ["API_SIGNATURES", "Signet"]

_LOGGER = get_logger("sigil.runtime")

API_SIGNATURES: dict[str, str] = {
    "sign": "string, function, [object] => function",
    "verify": "function, array => undefined",
    "enforce": "string, function, [object] => function",
    "extend": "string, function => undefined",
    "subtype": "string => string, function => undefined",
    "alias": "string, string => undefined",
    "is_type_of": "string => * => boolean",
    "type_chain": "string => string",
}


class Signet:
    """Independent contract runtime with its own type registry."""

    sign: EnforcedFunction
    verify: EnforcedFunction
    enforce: EnforcedFunction
    extend: EnforcedFunction
    subtype: EnforcedFunction
    alias: EnforcedFunction
    is_type_of: EnforcedFunction
    type_chain: EnforcedFunction

    def __init__(self, settings: Optional[RuntimeSettings] = None) -> None:
        self.settings = settings or RuntimeSettings()
        self.registry = TypeRegistry()
        self.enforcer = Enforcer(self.registry)

        if self.settings.extended_types:
            extended.install(self.registry)
        for name, expression in self.settings.aliases.items():
            self.registry.alias(name, expression)

        operations: dict[str, Callable[..., Any]] = {
            "sign": self.enforcer.sign,
            "verify": self.enforcer.verify,
            "enforce": self.enforcer.enforce,
            "extend": self.registry.extend,
            "subtype": self.registry.subtype,
            "alias": self.registry.alias,
            "is_type_of": self.registry.is_type_of,
            "type_chain": self.registry.type_chain,
        }
        for name, operation in operations.items():
            setattr(self, name, self.enforcer.enforce(API_SIGNATURES[name], operation))

        _LOGGER.debug(
            "runtime ready with %d types (%d aliases)", len(self.registry), len(self.settings.aliases)
        )

    @classmethod
    def from_config(cls, path: str | Path) -> "Signet":
        return cls(load_settings(path))

    def contract(self, signature: str, context: Any = None) -> Callable[[Callable[..., Any]], EnforcedFunction]:
        """Decorator form of :meth:`enforce`.

        Enforced functions are not descriptors, so decorate plain functions
        only.  Inside a class body ``self`` would count as a declared
        parameter and is never bound; enforce the bound method instead
        (``runtime.enforce(sig, obj.method)``) or pass the instance as
        ``context``.

        >>> runtime = Signet()
        >>> @runtime.contract("number, number => number")
        ... def add(a, b):
        ...     return a + b
        >>> add(2, 3)
        5
        """

        def decorator(fn: Callable[..., Any]) -> EnforcedFunction:
            return self.enforce(signature, fn, context)

        return decorator
