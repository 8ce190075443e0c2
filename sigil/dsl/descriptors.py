"""Data model for parsed signatures.

A signature such as ``number, [string] => boolean`` is represented as a
:class:`SignatureTree`: an ordered tuple of stages, each stage an ordered tuple
of :class:`TypeDescriptor` values.  Every stage except the last lists the
parameters of one call; the last stage holds the single return type.  Trees
with more than two stages describe curried functions.

The classes are frozen, slot-based dataclasses so a tree can be shared between
wrappers without any risk of one curry level mutating another.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional, Sequence

__all__ = [
    "Stage",
    "SignatureTree",
    "TypeDescriptor",
    "format_descriptor",
    "format_signature",
]


@dataclass(slots=True, frozen=True)
class TypeDescriptor:
    """One parsed type reference.

    ``sub_type`` holds the free-form label of ``object:<label>`` and
    ``value_type`` the generic arguments of ``name<a;b;...>``.  The parser never
    populates both.
    """

    name: str
    sub_type: Optional[str] = None
    value_type: Optional[tuple[str, ...]] = None
    optional: bool = False

    def __post_init__(self) -> None:
        if self.sub_type is not None and self.value_type is not None:
            raise ValueError("a type descriptor cannot carry both a sub type and value types")

    @property
    def type_string(self) -> str:
        """Return the descriptor as a type expression, without optional brackets."""

        return format_descriptor(self, include_optional=False)

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-friendly mapping used by the CLI and debugging helpers."""

        payload: dict[str, object] = {"type": self.name, "optional": self.optional}
        if self.sub_type is not None:
            payload["subType"] = self.sub_type
        if self.value_type is not None:
            payload["valueType"] = list(self.value_type)
        return payload


Stage = tuple[TypeDescriptor, ...]


@dataclass(slots=True, frozen=True)
class SignatureTree:
    """Ordered stages of a (possibly curried) function contract."""

    stages: tuple[Stage, ...]

    def __len__(self) -> int:
        return len(self.stages)

    def __iter__(self) -> Iterator[Stage]:
        return iter(self.stages)

    def __getitem__(self, index: int) -> Stage:
        return self.stages[index]

    @property
    def parameters(self) -> Stage:
        """Descriptors of the first call's parameters."""

        return self.stages[0]

    @property
    def is_curried(self) -> bool:
        return len(self.stages) > 2

    def remaining(self) -> "SignatureTree":
        """Return the tree describing the value produced by the first call."""

        return SignatureTree(self.stages[1:])

    def to_list(self) -> list[list[dict[str, object]]]:
        return [[descriptor.to_dict() for descriptor in stage] for stage in self.stages]

    def __str__(self) -> str:
        return format_signature(self.stages)


def format_descriptor(descriptor: TypeDescriptor, *, include_optional: bool = True) -> str:
    """Render ``descriptor`` back into signature syntax."""

    text = descriptor.name
    if descriptor.value_type is not None:
        text += "<" + ";".join(descriptor.value_type) + ">"
    elif descriptor.sub_type is not None:
        text += ":" + descriptor.sub_type
    if include_optional and descriptor.optional and descriptor.name != "()":
        text = f"[{text}]"
    return text


def format_signature(stages: Sequence[Stage]) -> str:
    """Render a sequence of stages as ``a, b => c``."""

    return " => ".join(", ".join(format_descriptor(item) for item in stage) for stage in stages)
