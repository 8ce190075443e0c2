"""Signing and enforcement of callables.

:class:`SignedFunction` pairs a callable with its parsed contract without
changing how it behaves.  :class:`EnforcedFunction` additionally verifies
every call: inputs against the first stage, the result against the declared
return type, and, for curried signatures, re-wraps the returned callable with
the remaining stages so each curry level is checked on its own.
"""

from __future__ import annotations

import functools
import inspect
import types
from typing import TYPE_CHECKING, Any, Callable, Mapping, Optional, Sequence

from sigil.dsl.descriptors import SignatureTree
from sigil.dsl.grammar import InvalidSignatureError, check_parameter_count, parse_signature
from sigil.telemetry.logger import get_logger
from sigil.verifier.engine import ABSENT, TypeMismatchError, UnfulfilledOptionalError, verify_stage

if TYPE_CHECKING:  # pragma: no cover - import only for annotations
    from sigil.registry.types import TypeRegistry

__all__ = [
    "EnforcedFunction",
    "Enforcer",
    "ReturnTypeError",
    "SignedFunction",
]

_LOGGER = get_logger("sigil.verifier.enforcement")

CALLABLE_TYPE = "function"


class ReturnTypeError(TypeError):
    """Raised when an enforced call returns a value of the wrong type."""

    def __init__(self, expected: str, value: Any) -> None:
        super().__init__(
            f"Expected return value of type {expected} but got {type(value).__name__}"
        )
        self.expected = expected
        self.value = value


class SignedFunction:
    """A callable carrying an immutable signature.

    Calling the proxy calls the wrapped callable unchanged.  When a context
    object is supplied and ``bind_context`` is true, the callable is bound to
    it the way a function is bound to an instance, so the context arrives as
    the first argument and does not count towards the declared parameters.
    """

    def __init__(
        self,
        fn: Callable[..., Any],
        tree: SignatureTree,
        context: Any = None,
        *,
        raw_signature: Optional[str] = None,
        bind_context: bool = True,
    ) -> None:
        if not callable(fn):
            raise TypeError(f"only callables can be signed, got {type(fn).__name__}")
        target = types.MethodType(fn, context) if context is not None and bind_context else fn
        functools.update_wrapper(self, target)
        self._original = fn
        self._target = target
        self._tree = tree
        self._raw_signature = raw_signature if raw_signature is not None else str(tree)
        self._context = context

    @property
    def signature(self) -> str:
        """Normalised signature text rebuilt from the tree."""

        return str(self._tree)

    @property
    def raw_signature(self) -> str:
        return self._raw_signature

    @property
    def signature_tree(self) -> SignatureTree:
        return self._tree

    @property
    def execution_context(self) -> Any:
        return self._context

    @property
    def original(self) -> Callable[..., Any]:
        return self._original

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self._target(*args, **kwargs)

    def __repr__(self) -> str:
        return repr(self._original)

    def __str__(self) -> str:
        return str(self._original)


class EnforcedFunction(SignedFunction):
    """Signed callable whose every invocation is verified."""

    def __init__(self, signed: SignedFunction, enforcer: "Enforcer") -> None:
        functools.update_wrapper(self, signed)
        self._original = signed.original
        self._target = signed
        self._tree = signed.signature_tree
        self._raw_signature = signed.raw_signature
        self._context = signed.execution_context
        self._enforcer = enforcer

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self._enforcer.call(self._target, args, kwargs)


_POSITIONAL_KINDS = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


def _positional_values(fn: Callable[..., Any], args: Sequence[Any], kwargs: Mapping[str, Any]) -> list[Any]:
    """Lay ``args`` and ``kwargs`` out in declaration order.

    Parameters left out before a later supplied one become :data:`ABSENT`
    so every value stays aligned with its descriptor.
    """

    if not kwargs:
        return list(args)
    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError):
        return list(args)
    bound = signature.bind_partial(*args, **kwargs).arguments
    values: list[Any] = []
    pending = 0
    for parameter in signature.parameters.values():
        if parameter.kind is inspect.Parameter.VAR_POSITIONAL:
            values.extend(bound.get(parameter.name, ()))
            break
        if parameter.kind not in _POSITIONAL_KINDS:
            break
        if parameter.name in bound:
            values.extend([ABSENT] * pending)
            values.append(bound[parameter.name])
            pending = 0
        else:
            pending += 1
    return values


def _describe(fn: Callable[..., Any]) -> str:
    return getattr(fn, "__qualname__", None) or getattr(fn, "__name__", None) or repr(fn)


class Enforcer:
    """Sign, verify and enforce callables against one :class:`TypeRegistry`."""

    def __init__(self, registry: "TypeRegistry") -> None:
        self.registry = registry

    def sign(self, signature: str, fn: Callable[..., Any], context: Any = None) -> SignedFunction:
        """Parse ``signature``, check it fits ``fn`` and return the signed proxy."""

        tree = parse_signature(signature, self.registry)
        signed = SignedFunction(fn, tree, context, raw_signature=signature)
        check_parameter_count(tree, signed)
        return signed

    def verify(self, signed: Callable[..., Any], args: Sequence[Any]) -> None:
        """Check ``args`` against the first stage of ``signed``'s contract."""

        tree = getattr(signed, "signature_tree", None)
        if not isinstance(tree, SignatureTree):
            raise InvalidSignatureError(f"{_describe(signed)} has not been signed")
        verify_stage(self.registry, tree.parameters, list(args))

    def enforce(self, signature: str, fn: Callable[..., Any], context: Any = None) -> EnforcedFunction:
        return self.wrap(self.sign(signature, fn, context))

    def wrap(self, signed: SignedFunction) -> EnforcedFunction:
        return EnforcedFunction(signed, self)

    def call(self, signed: SignedFunction, args: Sequence[Any], kwargs: Mapping[str, Any]) -> Any:
        """Verify, invoke and check the result of one call through ``signed``."""

        try:
            self.verify(signed, _positional_values(signed, args, kwargs))
        except (TypeMismatchError, UnfulfilledOptionalError) as exc:
            _LOGGER.debug("rejected arguments for %s: %s", _describe(signed), exc)
            raise

        result = signed(*args, **kwargs)

        remaining = signed.signature_tree.remaining()
        curried = len(remaining) > 1
        expected = CALLABLE_TYPE if curried else remaining[0][0].type_string
        if not self.registry.is_type_of(expected)(result):
            _LOGGER.debug("rejected result of %s: expected %s", _describe(signed), expected)
            raise ReturnTypeError(expected, result)

        if not curried:
            return result
        next_stage = SignedFunction(result, remaining, signed.execution_context, bind_context=False)
        check_parameter_count(remaining, next_stage)
        return self.wrap(next_stage)
