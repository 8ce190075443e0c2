"""Extended type library layered on top of the built-ins.

``install`` registers refinements of the base types:

* ``int`` and ``bounded<lo;hi>`` refine ``number``; ``boundedInt<lo;hi>`` refines ``int``.
* ``tuple<T1;T2;...>`` refines ``array`` (exact length, positional element types).
* ``boundedString<lo;hi>`` and ``formattedString<regex>`` refine ``string``.
* ``taggedUnion<T1;T2;...>`` is a base type matching any of its members.
"""

from __future__ import annotations

import math
import numbers
import re
from typing import Any, Callable

from sigil.dsl.descriptors import TypeDescriptor
from sigil.dsl.grammar import InvalidSignatureError
from sigil.registry.types import TypeRegistry

__all__ = ["EXTENDED_TYPE_NAMES", "install"]

EXTENDED_TYPE_NAMES = (
    "int",
    "bounded",
    "boundedInt",
    "tuple",
    "boundedString",
    "formattedString",
    "taggedUnion",
)

Tester = Callable[[str], Callable[[Any], bool]]


def _value_types(descriptor: TypeDescriptor, minimum: int) -> tuple[str, ...]:
    values = descriptor.value_type or ()
    if len(values) < minimum:
        raise ValueError(f"type {descriptor.name} expects at least {minimum} value type(s)")
    return values


def _bound(descriptor: TypeDescriptor, raw: str) -> int:
    # Fractional bounds are truncated towards zero.
    try:
        return int(float(raw))
    except (ValueError, OverflowError) as exc:
        raise InvalidSignatureError(
            f"bound {raw!r} of {descriptor.name} is not a finite number", descriptor.type_string
        ) from exc


def _is_int(value: Any) -> bool:
    if isinstance(value, numbers.Integral):
        return True
    return math.isfinite(value) and value == math.floor(value)


def _is_bounded(value: Any, descriptor: TypeDescriptor) -> bool:
    lower, upper = _value_types(descriptor, 2)[:2]
    return _bound(descriptor, lower) <= value <= _bound(descriptor, upper)


def _is_bounded_int(value: Any, descriptor: TypeDescriptor, is_type_of: Tester) -> bool:
    bounds = ";".join(_value_types(descriptor, 2))
    return is_type_of(f"bounded<{bounds}>")(value)


def _is_tuple(value: Any, descriptor: TypeDescriptor, is_type_of: Tester) -> bool:
    members = descriptor.value_type or ()
    if len(value) != len(members):
        return False
    return all(is_type_of(member)(item) for member, item in zip(members, value))


def _is_bounded_string(value: Any, descriptor: TypeDescriptor) -> bool:
    bounds = _value_types(descriptor, 1)
    lower = _bound(descriptor, bounds[0])
    upper = _bound(descriptor, bounds[1]) if len(bounds) > 1 else len(value)
    return lower <= len(value) <= upper


def _is_formatted_string(value: Any, descriptor: TypeDescriptor) -> bool:
    pattern = _value_types(descriptor, 1)[0]
    return re.search(pattern, value) is not None


def _is_tagged_union(value: Any, descriptor: TypeDescriptor, is_type_of: Tester) -> bool:
    return any(is_type_of(member)(value) for member in descriptor.value_type or ())


def install(registry: TypeRegistry) -> None:
    """Register the extended types on ``registry``."""

    registry.subtype("number")("int", _is_int)
    registry.subtype("number")("bounded", _is_bounded)
    registry.subtype("int")("boundedInt", _is_bounded_int)
    registry.subtype("array")("tuple", _is_tuple)
    registry.subtype("string")("boundedString", _is_bounded_string)
    registry.subtype("string")("formattedString", _is_formatted_string)
    registry.extend("taggedUnion", _is_tagged_union)
