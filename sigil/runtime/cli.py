"""sigil command-line interface."""

from __future__ import annotations

import argparse
import ast
import json
import sys
from pathlib import Path
from typing import Sequence

from sigil.dsl.grammar import InvalidSignatureError, parse_signature
from sigil.registry.types import UnknownTypeError
from sigil.runtime.api import Signet
from sigil.runtime.settings import DEFAULT_SETTINGS_PATH, load_settings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sigil", description="Inspect sigil signatures and types")
    parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_SETTINGS_PATH if DEFAULT_SETTINGS_PATH.exists() else None,
        help="Optional path to a runtime settings YAML file.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    parse_cmd = subparsers.add_parser("parse", help="Parse a signature and print its tree")
    parse_cmd.add_argument("signature", help="Signature text, e.g. 'number, [string] => boolean'")

    chain_cmd = subparsers.add_parser("chain", help="Print the type chain of a registered type")
    chain_cmd.add_argument("name")

    check_cmd = subparsers.add_parser("check", help="Test a Python literal against a type")
    check_cmd.add_argument("type_expression")
    check_cmd.add_argument("value", help="Python literal evaluated with ast.literal_eval")

    subparsers.add_parser("types", help="List registered type names with their chains")

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        runtime = Signet(load_settings(args.config))
        if args.command == "parse":
            return _cmd_parse(runtime, args.signature)
        if args.command == "chain":
            print(runtime.type_chain(args.name))
            return 0
        if args.command == "check":
            return _cmd_check(runtime, args.type_expression, args.value)
        if args.command == "types":
            for name in runtime.registry:
                print(f"{name}\t{runtime.registry.type_chain(name)}")
            return 0
    except (InvalidSignatureError, UnknownTypeError, ValueError, FileNotFoundError) as exc:
        print(f"[sigil] error: {exc}", file=sys.stderr)
        return 1

    parser.print_help()
    return 1


def _cmd_parse(runtime: Signet, signature: str) -> int:
    tree = parse_signature(signature, runtime.registry)
    payload = {"signature": str(tree), "tree": tree.to_list()}
    print(json.dumps(payload, indent=2))
    return 0


def _cmd_check(runtime: Signet, type_expression: str, raw_value: str) -> int:
    try:
        value = ast.literal_eval(raw_value)
    except (SyntaxError, ValueError) as exc:
        raise ValueError(f"value must be a Python literal: {raw_value!r}") from exc
    result = runtime.is_type_of(type_expression)(value)
    print("true" if result else "false")
    return 0 if result else 2


if __name__ == "__main__":  # pragma: no cover - manual execution helper
    sys.exit(main())
