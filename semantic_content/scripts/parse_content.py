#!/usr/bin/env python3
"""CLI entrypoint for the semantic content parser."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from semantic_content.content_parser import by_type, groups, sequence
from semantic_content.content_parser.options import ParseOptions

logger = logging.getLogger("semantic_content.content_parser.cli")


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )


def load_document(source: str) -> dict[str, Any]:
    if source == "-":
        raw = sys.stdin.read()
        label = "<stdin>"
    else:
        path = Path(source).expanduser()
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise SystemExit(f"Cannot read {path}: {exc}") from exc
        label = str(path)
    try:
        document = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise SystemExit(f"Invalid JSON in {label}: {exc}") from exc
    if not isinstance(document, dict):
        raise SystemExit(f"Expected a JSON object in {label}")
    return document


def resolve_options(args: argparse.Namespace) -> ParseOptions:
    try:
        return ParseOptions.from_env(
            parse_code_as_json=True if args.parse_code_as_json else None,
            max_depth=args.max_depth,
        )
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc


def write_output(payload: Any, output: str | None) -> None:
    text = json.dumps(payload, indent=2, ensure_ascii=False)
    if not output:
        print(text)
        return
    path = Path(output).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text + "\n", encoding="utf-8")
    logger.info("Wrote %s (%d characters)", path, len(text))


def command_structure(args: argparse.Namespace) -> None:
    document = load_document(args.input)
    result = groups.structure(document, resolve_options(args))
    logger.debug(
        "Structured %d groups (main: %s)",
        result.metadata.groups,
        "yes" if result.main else "no",
    )
    write_output(result.to_dict(), args.output)


def command_sequence(args: argparse.Namespace) -> None:
    document = load_document(args.input)
    flat = sequence.flatten(document, resolve_options(args))
    logger.debug("Flattened %d elements", len(flat))
    write_output([element.to_dict() for element in flat], args.output)


def command_by_type(args: argparse.Namespace) -> None:
    document = load_document(args.input)
    flat = sequence.flatten(document, resolve_options(args))
    write_output(by_type.index_by_type(flat).to_dict(), args.output)


def add_common_arguments(sub_parser: argparse.ArgumentParser) -> None:
    sub_parser.add_argument("input", help="Document JSON file, or '-' for stdin")
    sub_parser.add_argument("--output", help="Write JSON here instead of stdout")
    sub_parser.add_argument(
        "--parse-code-as-json",
        action="store_true",
        help="Decode code blocks as JSON (overrides CONTENT_PARSER_PARSE_CODE_AS_JSON)",
    )
    sub_parser.add_argument(
        "--max-depth",
        type=int,
        help="Maximum list/blockquote nesting (overrides CONTENT_PARSER_MAX_DEPTH)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser_obj = argparse.ArgumentParser(description="Structure rich-text documents")
    parser_obj.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser_obj.add_subparsers(dest="command")

    structure_parser = subparsers.add_parser("structure", help="Main block plus items")
    add_common_arguments(structure_parser)
    structure_parser.set_defaults(func=command_structure)

    sequence_parser = subparsers.add_parser("sequence", help="Flat element sequence")
    add_common_arguments(sequence_parser)
    sequence_parser.set_defaults(func=command_sequence)

    by_type_parser = subparsers.add_parser("by-type", help="Elements indexed by kind")
    add_common_arguments(by_type_parser)
    by_type_parser.set_defaults(func=command_by_type)

    return parser_obj


def main(argv: list[str] | None = None) -> None:
    parser_obj = build_parser()
    args = parser_obj.parse_args(argv)
    if not getattr(args, "command", None):
        parser_obj.print_help()
        return
    configure_logging(args.verbose)
    args.func(args)


if __name__ == "__main__":
    main()
