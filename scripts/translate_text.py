#!/usr/bin/env python3
"""Translate every whitespace-separated token of a text file."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from packages.translator import cli

_FORMAT_CHOICES = ("json", "yaml")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Translate the tokens of a text file")
    parser.add_argument("text", type=Path, help="Text file whose tokens should be translated")
    parser.add_argument("--dict-file", help="Dictionary file path or bare name")
    parser.add_argument("--input-dict", help="Upstream normalizer (default: simple)")
    parser.add_argument("--config", type=Path, help="YAML file with dictionary definitions")
    parser.add_argument("--dictionary", help="Dictionary name inside --config")
    parser.add_argument("--format", choices=_FORMAT_CHOICES, help="Output format")

    args = parser.parse_args(argv)

    cli_args: list[str] = ["translate"]
    if args.dict_file:
        cli_args.extend(["--dict-file", args.dict_file])
    if args.input_dict:
        cli_args.extend(["--input-dict", args.input_dict])
    if args.config:
        cli_args.extend(["--config", str(args.config)])
    if args.dictionary:
        cli_args.extend(["--dictionary", args.dictionary])
    if args.format:
        cli_args.extend(["--format", args.format])
    cli_args.extend(args.text.read_text(encoding="utf-8").split())
    return cli.main(cli_args)


if __name__ == "__main__":
    sys.exit(main())
