"""Tests for the stage verification state machine."""

from __future__ import annotations

import pytest

from sigil.dsl.descriptors import Stage
from sigil.dsl.grammar import parse_signature
from sigil.registry.types import TypeRegistry
from sigil.verifier.engine import (
    ABSENT,
    TypeMismatchError,
    UnfulfilledOptionalError,
    VerificationState,
    verify_stage,
)


@pytest.fixture()
def registry() -> TypeRegistry:
    return TypeRegistry()


def _stage(registry: TypeRegistry, signature: str) -> Stage:
    return parse_signature(signature, registry)[0]


def test_matching_values_are_accepted(registry: TypeRegistry) -> None:
    stage = _stage(registry, "number, string => number")

    assert verify_stage(registry, stage, [1, "a"]) is VerificationState.ACCEPT


def test_first_mismatch_is_raised(registry: TypeRegistry) -> None:
    stage = _stage(registry, "number, string => number")

    with pytest.raises(TypeMismatchError) as exc:
        verify_stage(registry, stage, [5, 5])

    assert exc.value.expected == "string"
    assert exc.value.position == 1
    assert "Expected type string but got int" in str(exc.value)


def test_later_mismatches_are_detected(registry: TypeRegistry) -> None:
    stage = _stage(registry, "number, string, number => number")

    with pytest.raises(TypeMismatchError) as exc:
        verify_stage(registry, stage, [5, "foo", "5"])
    assert exc.value.position == 2


def test_skipped_optional_absorbs_a_descriptor_not_a_value(registry: TypeRegistry) -> None:
    stage = _stage(registry, "[number], string => number")

    assert verify_stage(registry, stage, ["foo"]) is VerificationState.ACCEPT


def test_trailing_optional_left_unfulfilled(registry: TypeRegistry) -> None:
    stage = _stage(registry, "[number], string, [number] => number")

    with pytest.raises(UnfulfilledOptionalError) as exc:
        verify_stage(registry, stage, ["foo", "bar"])
    assert exc.value.remaining == ("bar",)


def test_optional_is_consumed_when_it_matches(registry: TypeRegistry) -> None:
    stage = _stage(registry, "[number], string => number")

    assert verify_stage(registry, stage, [1, "foo"]) is VerificationState.ACCEPT


def test_required_type_after_skip_still_fails(registry: TypeRegistry) -> None:
    stage = _stage(registry, "[number], string => number")

    with pytest.raises(TypeMismatchError):
        verify_stage(registry, stage, [True])


def test_no_values_are_checked_as_absent(registry: TypeRegistry) -> None:
    assert verify_stage(registry, _stage(registry, "() => string"), []) is VerificationState.ACCEPT
    assert verify_stage(registry, _stage(registry, "* => string"), []) is VerificationState.ACCEPT
    with pytest.raises(TypeMismatchError):
        verify_stage(registry, _stage(registry, "number => number"), [])


def test_missing_optional_without_values_is_not_an_error(registry: TypeRegistry) -> None:
    stage = _stage(registry, "[number] => number")

    assert verify_stage(registry, stage, []) is VerificationState.SKIP


def test_extra_values_end_the_pass(registry: TypeRegistry) -> None:
    stage = _stage(registry, "number => number")

    assert verify_stage(registry, stage, [1, "x"]) is VerificationState.ACCEPT


def test_values_running_out_end_the_pass(registry: TypeRegistry) -> None:
    stage = _stage(registry, "number, string => number")

    assert verify_stage(registry, stage, [1]) is VerificationState.ACCEPT


def test_parent_rejection_by_subtype_counts_as_mismatch(registry: TypeRegistry) -> None:
    registry.subtype("number")("small", lambda value: value < 10)

    optional = _stage(registry, "[small], string => number")
    assert verify_stage(registry, optional, ["foo"]) is VerificationState.ACCEPT

    required = _stage(registry, "small => number")
    with pytest.raises(TypeMismatchError):
        verify_stage(registry, required, ["foo"])


def test_absent_marker_is_consumed_by_an_optional(registry: TypeRegistry) -> None:
    stage = _stage(registry, "number, [number], string => number")

    assert verify_stage(registry, stage, [1, ABSENT, "x"]) is VerificationState.ACCEPT
    with pytest.raises(TypeMismatchError) as exc:
        verify_stage(registry, stage, [1, ABSENT, 5])
    assert exc.value.position == 2


def test_absent_marker_fails_a_required_type(registry: TypeRegistry) -> None:
    stage = _stage(registry, "number, string => number")

    with pytest.raises(TypeMismatchError) as exc:
        verify_stage(registry, stage, [ABSENT, "x"])
    assert exc.value.value is None
