"""Tests for the extended type library."""

from __future__ import annotations

from fractions import Fraction

import pytest

from sigil.dsl.grammar import InvalidSignatureError
from sigil.registry import extended
from sigil.registry.types import TypeRegistry
from sigil.verifier.engine import TypeMismatchError
from sigil.verifier.enforcement import Enforcer


@pytest.fixture()
def registry() -> TypeRegistry:
    registry = TypeRegistry()
    extended.install(registry)
    return registry


def test_all_extended_types_are_installed(registry: TypeRegistry) -> None:
    assert all(name in registry for name in extended.EXTENDED_TYPE_NAMES)
    assert registry.type_chain("boundedInt") == "* -> number -> int -> boundedInt"
    assert registry.type_chain("tuple") == "* -> object -> array -> tuple"
    assert registry.type_chain("taggedUnion") == "* -> taggedUnion"


def test_int(registry: TypeRegistry) -> None:
    is_int = registry.is_type_of("int")

    assert is_int(10) is True
    assert is_int(10.0) is True
    assert is_int(Fraction(1, 2)) is False
    assert is_int(float("inf")) is False
    assert is_int("foo") is False


@pytest.mark.parametrize(
    ("type_string", "value", "expected"),
    [
        ("bounded<0;1>", 0.5, True),
        ("bounded<0;1>", 0, True),
        ("bounded<0;1>", 1, True),
        ("bounded<1;2>", 7, False),
        ("bounded<1;2>", "foo", False),
        ("boundedInt<0;1>", 1, True),
        ("boundedInt<0;1>", 0.5, False),
        ("boundedInt<1;2>", 7, False),
        ("boundedInt<1;2>", "foo", False),
    ],
)
def test_bounded_numbers(registry: TypeRegistry, type_string: str, value: object, expected: bool) -> None:
    assert registry.is_type_of(type_string)(value) is expected


def test_bounded_without_bounds_is_not_a_member(registry: TypeRegistry) -> None:
    assert registry.is_type_of("bounded")(1) is False


def test_fractional_bounds_are_truncated(registry: TypeRegistry) -> None:
    wrapped = Enforcer(registry).enforce("bounded<0.5;2.9> => *", lambda value: value)

    assert wrapped(0) == 0
    assert wrapped(2) == 2
    with pytest.raises(TypeMismatchError):
        wrapped(5)
    assert registry.is_type_of("boundedString<1.7;3.2>")("abc") is True


def test_non_numeric_bounds_are_reported(registry: TypeRegistry) -> None:
    wrapped = Enforcer(registry).enforce("bounded<low;2> => *", lambda value: value)

    with pytest.raises(InvalidSignatureError, match="bound 'low' of bounded"):
        wrapped(1)
    assert registry.is_type_of("bounded<low;2>")(1) is False


def test_tuple_checks_length_and_members(registry: TypeRegistry) -> None:
    assert registry.is_type_of("tuple<number;string;object>")([1, "foo", {}]) is True
    assert registry.is_type_of("tuple<number;number>")([1, 2, 3]) is False
    assert registry.is_type_of("tuple<number;number>")([1, "foo"]) is False
    assert registry.is_type_of("tuple<number;number>")((1, 2)) is True


def test_tuple_nests_with_aliases(registry: TypeRegistry) -> None:
    registry.alias("R2Point", "tuple<number;number>")
    registry.alias("R2Matrix", "tuple<R2Point;R2Point>")

    assert registry.is_type_of("R2Point")([1, 2]) is True
    assert registry.is_type_of("R2Point")([1, "x"]) is False
    assert registry.is_type_of("R2Matrix")([[1, 2], [3, 4]]) is True
    assert registry.type_chain("R2Matrix") == "* -> object -> array -> tuple -> R2Matrix"


def test_tuple_nests_without_aliases(registry: TypeRegistry) -> None:
    is_matrix = registry.is_type_of("tuple<tuple<number;number>;tuple<number;number>>")

    assert is_matrix([[1, 2], [3, 4]]) is True
    assert is_matrix([[1, 2], [3, "4"]]) is False


def test_bounded_string(registry: TypeRegistry) -> None:
    assert registry.is_type_of("boundedString<5;10>")("Hello!") is True
    assert registry.is_type_of("boundedString<5;10>")("foo") is False
    assert registry.is_type_of("boundedString<3>")("Acceptable string") is True


def test_formatted_string(registry: TypeRegistry) -> None:
    assert registry.is_type_of(r"formattedString<\-+>")("my-test-string") is True
    assert registry.is_type_of(r"formattedString<\-+>")("my test string") is False
    ssn = registry.is_type_of("formattedString<^[0-9]{3}-[0-9]{2}-[0-9]{4}$>")
    assert ssn("123-45-6789") is True
    assert ssn("123-456-789") is False


def test_tagged_union(registry: TypeRegistry) -> None:
    is_string_or_int = registry.is_type_of("taggedUnion<int;string>")

    assert is_string_or_int("foo") is True
    assert is_string_or_int(5) is True
    assert is_string_or_int(0.7) is False
