"""Parser for the sigil signature language.

The grammar is deliberately small::

    signature   := stage ("=>" stage)+
    stage       := "()" | typeList
    typeList    := typeToken ("," typeToken)*
    typeToken   := "[" typeExpr "]" | typeExpr
    typeExpr    := name ( "<" valueArgs ">" | ":" label )?
    valueArgs   := typeExprLike (";" typeExprLike)*

Splitting is bracket aware: delimiters nested inside ``<...>`` never split a
stage or a token, which is what allows recursive generics such as
``tuple<tuple<number;number>;string>``.  The parser itself knows nothing about
which type names exist; callers pass the registry (anything supporting ``in``)
so unknown names are rejected while parsing.
"""

from __future__ import annotations

import inspect
from typing import Any, Callable, Container, Optional

from sigil.dsl.descriptors import SignatureTree, Stage, TypeDescriptor
from sigil.telemetry.logger import get_logger

__all__ = [
    "InvalidSignatureError",
    "check_parameter_count",
    "parameter_count",
    "parse_signature",
    "parse_type",
    "split_top_level",
    "split_value_types",
]

_LOGGER = get_logger("sigil.dsl.grammar")

STAGE_DELIMITER = "=>"
NO_PARAMETERS = "()"
COMPOSITE_KIND = "object"

_POSITIONAL_KINDS = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


class InvalidSignatureError(ValueError):
    """Raised when a signature is malformed or does not fit its function."""

    def __init__(self, message: str, signature: Optional[str] = None) -> None:
        if signature is not None:
            super().__init__(f"{message} (signature: {signature!r})")
        else:
            super().__init__(message)
        self.message = message
        self.signature = signature


def split_top_level(text: str, delimiter: str) -> list[str]:
    """Split ``text`` on ``delimiter`` while ignoring delimiters inside ``<...>``."""

    parts: list[str] = []
    depth = 0
    start = 0
    index = 0
    length = len(text)
    while index < length:
        if depth == 0 and text.startswith(delimiter, index):
            parts.append(text[start:index])
            index += len(delimiter)
            start = index
            continue
        ch = text[index]
        if ch == "<":
            depth += 1
        elif ch == ">":
            if depth == 0:
                raise InvalidSignatureError(f"unbalanced '>' at position {index}", text)
            depth -= 1
        index += 1
    if depth != 0:
        raise InvalidSignatureError("unbalanced '<' in type expression", text)
    parts.append(text[start:])
    return parts


def split_value_types(raw: str) -> tuple[str, ...]:
    """Split the body of ``name<...>`` into its ``;`` separated arguments."""

    return tuple(part.strip() for part in split_top_level(raw, ";"))


def parse_type(token: str) -> TypeDescriptor:
    """Build a :class:`TypeDescriptor` from a single type token.

    Registry membership is not checked here; see :func:`parse_signature`.
    """

    text = token.strip()
    if text == NO_PARAMETERS:
        return TypeDescriptor(NO_PARAMETERS, optional=True)

    optional = False
    if len(text) >= 2 and text[0] == "[" and text[-1] == "]":
        optional = True
        text = text[1:-1].strip()
    if not text:
        raise InvalidSignatureError("empty type expression", token)

    for index, ch in enumerate(text):
        if ch == "<":
            if not text.endswith(">"):
                raise InvalidSignatureError("value types must be closed with '>'", token)
            return TypeDescriptor(
                text[:index].strip(),
                value_type=split_value_types(text[index + 1 : -1]),
                optional=optional,
            )
        if ch == ":":
            return TypeDescriptor(text[:index].strip(), sub_type=text[index + 1 :].strip(), optional=optional)
    return TypeDescriptor(text, optional=optional)


def _parse_stage(raw: str, signature: str) -> Stage:
    text = raw.strip()
    if not text:
        raise InvalidSignatureError("every stage must declare at least one type", signature)
    tokens = [token.strip() for token in split_top_level(text, ",")]
    if any(not token for token in tokens):
        raise InvalidSignatureError("type list contains an empty entry", signature)
    if NO_PARAMETERS in tokens and len(tokens) > 1:
        raise InvalidSignatureError("'()' must be the only entry of its stage", signature)
    return tuple(parse_type(token) for token in tokens)


def _validate_types(tree: SignatureTree, known_types: Container[str], signature: str) -> None:
    unknown: list[str] = []
    for stage in tree:
        for descriptor in stage:
            if descriptor.name not in known_types and descriptor.name not in unknown:
                unknown.append(descriptor.name)
            if descriptor.sub_type is not None and descriptor.name != COMPOSITE_KIND:
                raise InvalidSignatureError(
                    f"type {descriptor.name!r} does not accept a ':' label", signature
                )
    if unknown:
        names = ", ".join(repr(name) for name in unknown)
        raise InvalidSignatureError(f"Signature contains unknown data types: {names}", signature)


def parse_signature(signature: str, known_types: Optional[Container[str]] = None) -> SignatureTree:
    """Parse ``signature`` into a :class:`SignatureTree`.

    Parameters
    ----------
    signature:
        Raw signature text, e.g. ``"number, [string] => boolean"``.
    known_types:
        Registered type names.  When given, every descriptor name must be a
        member; when ``None`` only the grammar is checked.

    Raises
    ------
    InvalidSignatureError
        On any grammar violation or unknown type name.
    """

    if not isinstance(signature, str):
        raise InvalidSignatureError(f"signature must be a string, got {type(signature).__name__}")

    raw_stages = split_top_level(signature, STAGE_DELIMITER)
    if len(raw_stages) < 2:
        raise InvalidSignatureError(
            "Invalid signature: all signatures must have input and output types", signature
        )

    tree = SignatureTree(tuple(_parse_stage(raw, signature) for raw in raw_stages))
    if len(tree[-1]) != 1:
        raise InvalidSignatureError("the final stage must declare exactly one return type", signature)
    if known_types is not None:
        _validate_types(tree, known_types, signature)

    _LOGGER.debug("parsed signature %r into %d stages", signature, len(tree))
    return tree


def parameter_count(fn: Callable[..., Any]) -> int:
    """Return the number of positional parameters ``fn`` declares."""

    try:
        parameters = inspect.signature(fn).parameters.values()
    except (TypeError, ValueError):
        return 0
    return sum(1 for parameter in parameters if parameter.kind in _POSITIONAL_KINDS)


def check_parameter_count(tree: SignatureTree, fn: Callable[..., Any]) -> None:
    """Ensure ``fn`` can receive the first stage of ``tree``.

    The callable must declare at least as many positional parameters as the
    stage has required types, and no more than the stage has types overall.
    """

    stage = tree.parameters
    required = sum(1 for descriptor in stage if not descriptor.optional)
    declared = parameter_count(fn)
    if declared > len(stage) or declared < required:
        raise InvalidSignatureError(
            "Function parameter count and argument type count do not match "
            f"({declared} declared, {required}-{len(stage)} typed)",
            str(tree),
        )
