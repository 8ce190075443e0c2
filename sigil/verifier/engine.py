"""Verification of positional values against one signature stage.

The engine is a single left-to-right pass driven by three states:

``accept``
    The last descriptor matched its value; both cursors advance.
``skip``
    The last descriptor was optional and did not match; only the descriptor
    cursor advances so the value is offered to the next descriptor.
``fail``
    A required descriptor did not match.  Terminal: raised immediately.

The pass stops as soon as either descriptors or values run out.  When no
values are supplied at all, the first descriptor is still evaluated against an
absent value (``None``), which is how ``()`` and ``*`` accept empty calls.

A value may also be the :data:`ABSENT` marker, standing for a positional
parameter the caller left out while passing later ones by keyword.  An
optional descriptor skips the marker and consumes it; a required descriptor
sees it as ``None``.
"""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING, Any, Sequence

from sigil.dsl.descriptors import Stage, TypeDescriptor

if TYPE_CHECKING:  # pragma: no cover - import only for annotations
    from sigil.registry.types import TypeRegistry

__all__ = [
    "ABSENT",
    "TypeMismatchError",
    "UnfulfilledOptionalError",
    "VerificationState",
    "verify_stage",
]


class _Absent:
    __slots__ = ()

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT = _Absent()


class TypeMismatchError(TypeError):
    """Raised when a required value fails its declared type."""

    def __init__(self, expected: str, value: Any, position: int) -> None:
        super().__init__(
            f"Expected type {expected} but got {type(value).__name__} at position {position}"
        )
        self.expected = expected
        self.value = value
        self.position = position


class UnfulfilledOptionalError(TypeError):
    """Raised when a skipped optional type leaves values unconsumed."""

    def __init__(self, expected: str, remaining: Sequence[Any]) -> None:
        super().__init__(
            f"Optional types were not fulfilled properly: {expected} skipped "
            f"with {len(remaining)} value(s) left unconsumed"
        )
        self.expected = expected
        self.remaining = tuple(remaining)


class VerificationState(enum.Enum):
    ACCEPT = "accept"
    SKIP = "skip"
    FAIL = "fail"


def _matches(registry: "TypeRegistry", descriptor: TypeDescriptor, value: Any) -> bool:
    try:
        return bool(registry.matches(descriptor, value))
    except TypeMismatchError:
        # Enforced predicates reject values outside their parent type this way.
        return False


def _next_state(registry: "TypeRegistry", descriptor: TypeDescriptor, value: Any) -> VerificationState:
    if _matches(registry, descriptor, value):
        return VerificationState.ACCEPT
    if descriptor.optional:
        return VerificationState.SKIP
    return VerificationState.FAIL


def verify_stage(registry: "TypeRegistry", stage: Stage, values: Sequence[Any]) -> VerificationState:
    """Verify ``values`` against ``stage`` and return the final state.

    Raises
    ------
    TypeMismatchError
        On the first required descriptor whose predicate rejects its value.
    UnfulfilledOptionalError
        When the pass ends on a skipped optional descriptor while values remain.
    """

    remaining = list(values)
    state = VerificationState.ACCEPT
    descriptor_index = 0
    consumed = 0

    while True:
        descriptor = stage[descriptor_index]
        absent = bool(remaining) and remaining[0] is ABSENT
        value = None if absent or not remaining else remaining[0]
        if absent and descriptor.optional:
            state = VerificationState.SKIP
        else:
            state = _next_state(registry, descriptor, value)
        if state is VerificationState.FAIL:
            raise TypeMismatchError(descriptor.type_string, value, consumed)
        if remaining and (state is VerificationState.ACCEPT or absent):
            remaining.pop(0)
            consumed += 1
        descriptor_index += 1
        if descriptor_index >= len(stage) or not remaining:
            break

    if state is VerificationState.SKIP and remaining:
        raise UnfulfilledOptionalError(descriptor.type_string, remaining)
    return state
