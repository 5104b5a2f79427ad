#!/usr/bin/env python3
"""Translate a piece of text into LIBRAS glosses without the artificial delay."""

from __future__ import annotations

import argparse
from pathlib import Path

from libras.session import cli


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Translate text into LIBRAS glosses")
    parser.add_argument("--text", help="Text to translate (omit to read from stdin)")
    parser.add_argument("--text-file", type=Path, help="File containing the text")
    parser.add_argument("--config", type=Path, help="Optional configuration file")
    parser.add_argument(
        "--set", dest="overrides", action="append", help="Configuration overrides (key=value)"
    )
    parser.add_argument("--dictionary", type=Path, help="Use a custom dictionary YAML file")
    parser.add_argument(
        "--no-detect", action="store_true", help="Skip language detection"
    )
    parser.add_argument("--json", action="store_true", help="Emit the final state as JSON")

    args = parser.parse_args(argv)

    cli_args: list[str] = []
    if args.config:
        cli_args.extend(["--config", str(args.config)])
    cli_args.extend(["--set", "session.processing_delay=0"])
    if args.dictionary:
        cli_args.extend(["--set", f"translator.dictionary_path={args.dictionary}"])
    for override in args.overrides or ():
        cli_args.extend(["--set", override])

    cli_args.append("translate")
    if args.text is not None:
        cli_args.append(args.text)
    if args.text_file is not None:
        cli_args.extend(["--text-file", str(args.text_file)])
    if args.no_detect:
        cli_args.append("--no-detect")
    if args.json:
        cli_args.append("--json")

    return cli.main(cli_args)


if __name__ == "__main__":  # pragma: no cover - script entry point
    raise SystemExit(main())
