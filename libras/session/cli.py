"""Command-line interface for the LIBRAS gloss translator."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Mapping, Sequence

import yaml

from libras.telemetry import exporters, logger
from libras.utils.config import deep_update

from . import coordinator
from .types import AppConfig


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="libras", description="Translate Portuguese text into LIBRAS glosses"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=_default_config_path(),
        help="Optional path to a configuration YAML file.",
    )
    parser.add_argument(
        "--set",
        dest="overrides",
        action="append",
        metavar="KEY=VALUE",
        help="Override configuration values using dot notation (e.g. session.wait_timeout=5).",
    )
    parser.add_argument("--verbose", action="store_true", help="Log at DEBUG level.")

    subparsers = parser.add_subparsers(dest="command", required=True)

    translate = subparsers.add_parser("translate", help="Translate text into glosses")
    _add_text_arguments(translate)
    translate.add_argument(
        "--no-detect",
        action="store_true",
        help="Skip language detection and print the plain translation.",
    )
    translate.add_argument("--json", action="store_true", help="Emit the result as JSON")

    detect = subparsers.add_parser("detect", help="Only identify the language of the text")
    _add_text_arguments(detect)
    detect.add_argument("--json", action="store_true", help="Emit the result as JSON")

    dictionary = subparsers.add_parser("dictionary", help="List the dictionary terms")
    dictionary.add_argument("--json", action="store_true", help="Emit the entries as JSON")

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    fallback = exporters.active()
    installed: exporters.JsonlExporter | None = None
    try:
        overrides = _parse_overrides(args.overrides)
        config = coordinator.load_configuration(args.config, overrides=overrides)
        installed = coordinator.configure_telemetry(config)
        if args.verbose:
            logger.set_level("DEBUG")
        if args.command == "translate":
            return _cmd_translate(args, config)
        if args.command == "detect":
            return _cmd_detect(args, config)
        if args.command == "dictionary":
            return _cmd_dictionary(args, config)
    except Exception as exc:
        print(f"[libras] error: {exc}", file=sys.stderr)
        return 1
    finally:
        if installed is not None:
            exporters.configure(fallback)
            installed.close()

    parser.print_help()
    return 1


def _default_config_path() -> Path | None:
    path = coordinator.DEFAULT_CONFIG_PATH
    return path if path.exists() else None


def _add_text_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("text", nargs="?", help="Text to process (omit to read from stdin)")
    parser.add_argument("--text-file", type=Path, help="File containing the text")


def _cmd_translate(args: argparse.Namespace, config: AppConfig) -> int:
    text = _read_text(args)
    if args.no_detect:
        with coordinator.build_engine(config) as engine:
            outcome = engine.translate(text)
        if args.json:
            _print_json(outcome.to_dict())
        else:
            print(outcome.composed_text)
        return 0

    with coordinator.build_session(config) as session:
        pending = session.request_translation(text)
        if not pending.wait(timeout=config.session.wait_timeout):
            raise TimeoutError("translation did not finish in time")
        state = session.state

    if args.json:
        _print_json(state.to_dict())
    else:
        print(f"Idioma detectado: {state.detected_language}\n")
        print(state.translation_result)
    return 0


def _cmd_detect(args: argparse.Namespace, config: AppConfig) -> int:
    text = _read_text(args)
    with coordinator.build_engine(config) as engine:
        detection = engine.annotate(text)
    if args.json:
        _print_json(
            {"code": detection.code, "language": detection.display_name, "error": detection.error}
        )
    else:
        print(detection.display_name)
    return 0 if not detection.failed else 1


def _cmd_dictionary(args: argparse.Namespace, config: AppConfig) -> int:
    dictionary = coordinator.build_dictionary(config)
    if args.json:
        _print_json(
            {
                "name": dictionary.name,
                "language": dictionary.language,
                "entries": [{"term": term, "gloss": gloss} for term, gloss in dictionary.items()],
            }
        )
        return 0
    width = max((len(term) for term in dictionary), default=0)
    for term, gloss in dictionary.items():
        print(f"{term.ljust(width)}  {gloss}")
    return 0


def _read_text(args: argparse.Namespace) -> str:
    if args.text is not None:
        return args.text
    if args.text_file is not None:
        return Path(args.text_file).read_text(encoding="utf-8").strip()
    return sys.stdin.read().strip()


def _print_json(payload: Mapping[str, Any]) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def _parse_overrides(raw: Sequence[str] | None) -> dict[str, Any]:
    """Turn ``a.b=value`` strings into one nested mapping of overrides."""

    merged: dict[str, Any] = {}
    for item in raw or ():
        key, sep, text = item.partition("=")
        path = [part.strip() for part in key.split(".") if part.strip()]
        if not sep or not path:
            raise ValueError(f"invalid override {item!r}, expected KEY=VALUE")
        nested: Any = _parse_value(text.strip())
        for part in reversed(path):
            nested = {part: nested}
        merged = deep_update(merged, nested)
    return merged


def _parse_value(text: str) -> Any:
    # YAML scalars: "0" -> 0, "true" -> True, "null" -> None, "static:en" stays a string.
    try:
        return yaml.safe_load(text) if text else None
    except yaml.YAMLError:
        return text


if __name__ == "__main__":
    raise SystemExit(main())
