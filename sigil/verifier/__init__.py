"""Verification engine and enforcement wrappers."""

from sigil.verifier.enforcement import (
    EnforcedFunction,
    Enforcer,
    ReturnTypeError,
    SignedFunction,
)
from sigil.verifier.engine import (
    TypeMismatchError,
    UnfulfilledOptionalError,
    VerificationState,
    verify_stage,
)

__all__ = [
    "EnforcedFunction",
    "Enforcer",
    "ReturnTypeError",
    "SignedFunction",
    "TypeMismatchError",
    "UnfulfilledOptionalError",
    "VerificationState",
    "verify_stage",
]
