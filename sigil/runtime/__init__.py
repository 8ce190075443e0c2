"""Public entry points for sigil runtime contracts.

The module-level operations are bound to a default :class:`Signet` created at
import time.  Build a separate ``Signet()`` when an isolated registry is needed.
"""

from sigil.dsl.grammar import InvalidSignatureError
from sigil.registry.types import DuplicateTypeError, UnknownTypeError
from sigil.runtime.api import Signet
from sigil.runtime.settings import RuntimeSettings, load_settings
from sigil.verifier.engine import TypeMismatchError, UnfulfilledOptionalError
from sigil.verifier.enforcement import EnforcedFunction, ReturnTypeError, SignedFunction

default = Signet()

sign = default.sign
verify = default.verify
enforce = default.enforce
extend = default.extend
subtype = default.subtype
alias = default.alias
is_type_of = default.is_type_of
type_chain = default.type_chain
contract = default.contract

__all__ = [
    "DuplicateTypeError",
    "EnforcedFunction",
    "InvalidSignatureError",
    "ReturnTypeError",
    "RuntimeSettings",
    "SignedFunction",
    "Signet",
    "TypeMismatchError",
    "UnfulfilledOptionalError",
    "UnknownTypeError",
    "alias",
    "contract",
    "default",
    "enforce",
    "extend",
    "is_type_of",
    "load_settings",
    "sign",
    "subtype",
    "type_chain",
    "verify",
]
