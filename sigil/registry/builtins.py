"""Predicates for the built-in base types.

Each predicate follows the registry calling convention
``predicate(value, descriptor, is_type_of) -> bool``.  ``is_type_of`` is the
owning registry's tester factory, used by composite types such as
``array<number>`` to check their elements.
"""

from __future__ import annotations

import enum
import numbers
from typing import Any, Callable, Mapping

from sigil.dsl.descriptors import TypeDescriptor
from sigil.dsl.grammar import parameter_count

__all__ = ["BUILTIN_TYPES", "Predicate"]

Predicate = Callable[..., bool]
Tester = Callable[[str], Callable[[Any], bool]]

_PRIMITIVES = (str, bytes, bool, numbers.Number, enum.Enum)


def _anything(value: Any, descriptor: TypeDescriptor, is_type_of: Tester) -> bool:
    return True


def _is_none(value: Any, descriptor: TypeDescriptor, is_type_of: Tester) -> bool:
    return value is None


def _is_boolean(value: Any, descriptor: TypeDescriptor, is_type_of: Tester) -> bool:
    return isinstance(value, bool)


def _is_number(value: Any, descriptor: TypeDescriptor, is_type_of: Tester) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _is_string(value: Any, descriptor: TypeDescriptor, is_type_of: Tester) -> bool:
    return isinstance(value, str)


def _is_symbol(value: Any, descriptor: TypeDescriptor, is_type_of: Tester) -> bool:
    return isinstance(value, enum.Enum)


def _is_object(value: Any, descriptor: TypeDescriptor, is_type_of: Tester) -> bool:
    if value is None:
        return True
    return not isinstance(value, _PRIMITIVES) and not callable(value)


def _is_function(value: Any, descriptor: TypeDescriptor, is_type_of: Tester) -> bool:
    if not callable(value):
        return False
    if descriptor.value_type is None:
        return True
    return parameter_count(value) <= len(descriptor.value_type)


def _is_array(value: Any, descriptor: TypeDescriptor, is_type_of: Tester) -> bool:
    if not isinstance(value, (list, tuple)):
        return False
    element_type = descriptor.value_type[0] if descriptor.value_type else "*"
    if element_type == "*":
        return True
    check = is_type_of(element_type)
    return all(check(item) for item in value)


# name -> (predicate, type chain); registration order matters only for display.
BUILTIN_TYPES: Mapping[str, tuple[Predicate, str]] = {
    "*": (_anything, "*"),
    "any": (_anything, "* -> any"),
    "()": (_is_none, "* -> undefined -> ()"),
    "undefined": (_is_none, "* -> undefined"),
    "boolean": (_is_boolean, "* -> boolean"),
    "number": (_is_number, "* -> number"),
    "string": (_is_string, "* -> string"),
    "symbol": (_is_symbol, "* -> symbol"),
    "object": (_is_object, "* -> object"),
    "array": (_is_array, "* -> object -> array"),
    "function": (_is_function, "* -> function"),
}
