"""lexshift command-line interface."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Sequence

import yaml

from packages.telemetry import logger

from .errors import ConfigError, TranslatorError
from .lexize import TranslationDictionary
from .options import DictionaryOptions, load_definitions
from .table import load_table

_FORMAT_CHOICES = ("json", "yaml")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="lexshift", description="Translation dictionary tools")
    parser.add_argument(
        "--data-dir",
        type=Path,
        help="Directory searched for bare dictionary names (defaults to data/dictionaries).",
    )
    parser.add_argument(
        "--log-level",
        help="Level for lexshift loggers (e.g. DEBUG to list skipped dictionary lines).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    _add_inspect_parser(subparsers)
    _add_translate_parser(subparsers)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        if args.log_level:
            logger.configure(level=args.log_level, force=True)
        if args.command == "inspect":
            return _cmd_inspect(args)
        if args.command == "translate":
            return _cmd_translate(args)
    except (TranslatorError, ValueError) as exc:
        print(f"[lexshift] error: {exc}", file=sys.stderr)
        return 1

    parser.print_help()
    return 1


# ---------------------------------------------------------------------------
# Sub-command wiring


def _add_source_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--dict-file", help="Dictionary file path or bare name")
    parser.add_argument(
        "--config", type=Path, help="YAML file with a 'dictionaries' section"
    )
    parser.add_argument("--dictionary", help="Name of the dictionary defined in --config")
    parser.add_argument(
        "--format",
        choices=_FORMAT_CHOICES,
        default="json",
        help="Output format (default: json)",
    )


def _add_inspect_parser(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("inspect", help="Load a dictionary file and print its entries")
    _add_source_arguments(parser)


def _add_translate_parser(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("translate", help="Translate tokens through a dictionary")
    _add_source_arguments(parser)
    parser.add_argument(
        "--input-dict",
        default="simple",
        help="Upstream normalizer used with --dict-file (default: simple)",
    )
    parser.add_argument("tokens", nargs="*", help="Tokens to translate (omit to read stdin)")


# ---------------------------------------------------------------------------
# Command implementations


def _cmd_inspect(args: argparse.Namespace) -> int:
    if args.dict_file:
        dict_file = args.dict_file
    else:
        dict_file = _configured_options(args).dict_file
    table = load_table(dict_file, data_dir=args.data_dir)
    payload = table.to_dict()
    payload["count"] = len(table)
    payload["duplicates"] = list(table.duplicate_keys())
    print(_render(payload, args.format))
    return 0


def _cmd_translate(args: argparse.Namespace) -> int:
    if args.dict_file:
        options = DictionaryOptions(dict_file=args.dict_file, input_dict=args.input_dict)
        name = None
    else:
        options = _configured_options(args)
        name = args.dictionary
    dictionary = TranslationDictionary.from_options(options, data_dir=args.data_dir, name=name)
    tokens = args.tokens or sys.stdin.read().split()
    results: list[dict[str, Any]] = []
    for token in tokens:
        result = dictionary.translate(token)
        results.append({"token": token, "lexemes": result.to_list() if result is not None else None})
    print(_render(results, args.format))
    return 0


# ---------------------------------------------------------------------------
# Helpers


def _configured_options(args: argparse.Namespace) -> DictionaryOptions:
    if not args.config or not args.dictionary:
        raise ConfigError("either --dict-file or both --config and --dictionary are required")
    definitions = load_definitions(args.config)
    try:
        return definitions[args.dictionary]
    except KeyError:
        raise ConfigError(
            f"dictionary {args.dictionary!r} is not defined in {args.config}"
        ) from None


def _render(payload: Any, fmt: str) -> str:
    if fmt == "yaml":
        return yaml.safe_dump(payload, sort_keys=False, allow_unicode=True).rstrip()
    return json.dumps(payload, indent=2, ensure_ascii=False)


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
