"""Append-only registry of named type predicates.

A :class:`TypeRegistry` maps type names to predicates and records each type's
ancestry ("type chain") for introspection.  Names can only be added: an attempt
to register an existing name raises :class:`DuplicateTypeError`.  Several
registries may coexist; nothing here is process global.

Predicates are called as ``predicate(value, descriptor, is_type_of)`` with the
argument tuple trimmed to the predicate's positional arity, so a plain
``lambda value: ...`` is a valid predicate.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Callable, Iterator

from sigil.dsl.descriptors import TypeDescriptor
from sigil.dsl.grammar import parse_type
from sigil.registry.builtins import BUILTIN_TYPES, Predicate
from sigil.telemetry.logger import get_logger

__all__ = [
    "DuplicateTypeError",
    "RegisteredType",
    "TypeRegistry",
    "UNDEFINED_TYPE",
    "UnknownTypeError",
]

_LOGGER = get_logger("sigil.registry")

UNDEFINED_TYPE = "undefined type"

_MAX_PREDICATE_ARGS = 3


class DuplicateTypeError(ValueError):
    """Raised when a type name is registered twice."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Cannot redefine type {name}")
        self.name = name


class UnknownTypeError(LookupError):
    """Raised when a type name has never been registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Type {name} is not known")
        self.name = name


def _predicate_arity(predicate: Callable[..., Any]) -> int:
    try:
        parameters = list(inspect.signature(predicate).parameters.values())
    except (TypeError, ValueError):
        return 1
    if any(parameter.kind is inspect.Parameter.VAR_POSITIONAL for parameter in parameters):
        return _MAX_PREDICATE_ARGS
    positional = sum(
        1
        for parameter in parameters
        if parameter.kind
        in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
    )
    return min(positional, _MAX_PREDICATE_ARGS)


@dataclass(slots=True, frozen=True)
class RegisteredType:
    """Registry entry: a named predicate plus its documented ancestry."""

    name: str
    predicate: Predicate
    type_chain: str
    arity: int

    def test(self, value: Any, descriptor: TypeDescriptor, is_type_of: Callable[[str], Any]) -> bool:
        arguments = (value, descriptor, is_type_of)[: self.arity]
        return self.predicate(*arguments)


class TypeRegistry:
    """Named type predicates with their type chains."""

    def __init__(self, *, builtins: bool = True) -> None:
        self._types: dict[str, RegisteredType] = {}
        if builtins:
            for name, (predicate, chain) in BUILTIN_TYPES.items():
                self._register(name, predicate, chain)

    def __contains__(self, name: object) -> bool:
        return name in self._types

    def __iter__(self) -> Iterator[str]:
        return iter(self._types)

    def __len__(self) -> int:
        return len(self._types)

    # ------------------------------------------------------------------
    # Lookup

    def lookup(self, name: str) -> RegisteredType:
        try:
            return self._types[name]
        except KeyError:
            raise UnknownTypeError(name) from None

    def matches(self, descriptor: TypeDescriptor, value: Any) -> bool:
        """Run the predicate registered for ``descriptor.name`` against ``value``."""

        entry = self.lookup(descriptor.name)
        return entry.test(value, descriptor, self.is_type_of)

    def type_chain(self, name: str) -> str:
        entry = self._types.get(name)
        return entry.type_chain if entry is not None else UNDEFINED_TYPE

    def is_type_of(self, type_string: str) -> Callable[[Any], bool]:
        """Return a membership tester for the type expression ``type_string``.

        The top-level name is resolved immediately and an unknown name raises
        :class:`UnknownTypeError`.  The returned tester never raises: any error
        inside the predicate, including an unknown nested type, yields
        ``False``.
        """

        descriptor = parse_type(type_string)
        entry = self.lookup(descriptor.name)
        is_type_of = self.is_type_of

        def tester(value: Any) -> bool:
            try:
                return bool(entry.test(value, descriptor, is_type_of))
            except Exception:
                return False

        tester.__name__ = f"is_{descriptor.name}"
        tester.__qualname__ = tester.__name__
        return tester

    # ------------------------------------------------------------------
    # Mutators

    def extend(self, name: str, predicate: Predicate) -> None:
        """Register ``name`` as a new base type."""

        self._register(name, predicate, f"* -> {name}")

    def subtype(self, existing: str) -> Callable[[str, Predicate], None]:
        """Return a binder registering refinements of ``existing``.

        The bound predicate is enforced against
        ``<existing>, [object], [function] => boolean``, so values outside the
        parent type are rejected by the enforcement layer before the predicate
        runs.  The parent's own predicate is not chained in otherwise.
        """

        self.lookup(existing)
        signature = f"{existing}, [object], [function] => boolean"

        def bind(name: str, predicate: Predicate) -> None:
            from sigil.verifier.enforcement import Enforcer

            enforced = Enforcer(self).enforce(signature, predicate)
            self._register(name, enforced, f"{self.type_chain(existing)} -> {name}")

        return bind

    def alias(self, name: str, type_string: str) -> None:
        """Register ``name`` as exactly the type expression ``type_string``."""

        head = parse_type(type_string).name
        tester = self.is_type_of(type_string)
        self._register(name, tester, f"{self.type_chain(head)} -> {name}")

    def _register(self, name: str, predicate: Predicate, chain: str) -> None:
        if not isinstance(name, str) or not name.strip():
            raise ValueError("type names must be non-empty strings")
        if not callable(predicate):
            raise TypeError(f"predicate for type {name!r} must be callable")
        if name in self._types:
            raise DuplicateTypeError(name)
        self._types[name] = RegisteredType(
            name=name,
            predicate=predicate,
            type_chain=chain,
            arity=_predicate_arity(predicate),
        )
        _LOGGER.debug("registered type %s (%s)", name, chain)
