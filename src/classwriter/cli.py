"""Command-line interface for classwriter."""

from __future__ import annotations

import argparse
import sys
import tomllib
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, TextIO

from classwriter.cache import DEFAULT_MAXSIZE
from classwriter.errors import ClassWriterError


class Operation(Enum):
    FIRST = "first"
    LAST = "last"
    AFTER = "after"
    IMPLEMENTS = "implements"


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    input_file: Path
    output_file: Path | None
    in_place: bool
    operation: Operation
    method_name: str | None
    interface: str | None
    snippet_file: Path | None
    indent: str
    cache_maxsize: int | None
    debug: bool


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="classwriter",
        description="Insert generated methods and interfaces into a PHP class file",
    )
    p.add_argument("input", help="Input .php file containing one class")

    op = p.add_mutually_exclusive_group(required=True)
    op.add_argument("--first", action="store_true", help="Insert the method before the first method")
    op.add_argument("--last", action="store_true", help="Insert the method after the last method")
    op.add_argument("--after", metavar="NAME", help="Insert the method after method NAME")
    op.add_argument("--implements", metavar="FQN", help="Add interface FQN to the implements clause")

    p.add_argument(
        "-s",
        "--snippet",
        metavar="FILE",
        help="File holding the method to insert (default: stdin)",
    )

    out = p.add_mutually_exclusive_group()
    out.add_argument("-o", "--output", help="Output file (default: stdout)")
    out.add_argument("-i", "--in-place", action="store_true", help="Rewrite the input file")

    p.add_argument(
        "--config",
        metavar="FILE",
        help="Config file (default: auto-discover classwriter.toml)",
    )
    p.add_argument(
        "--indent",
        default=None,
        metavar="STR",
        help="Indent for wrapped implements lists (default: 4 spaces)",
    )
    p.add_argument("--debug", action="store_true", help="Dump the token stream to stderr")
    return p


def load_config(config_path: Path | None, input_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else input_dir / "classwriter.toml"

    if not path.is_file():
        return {}

    with open(path, "rb") as f:
        return tomllib.load(f)


def resolve_options(args: argparse.Namespace) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: defaults < config file < CLI flags.
    """
    input_file = Path(args.input)
    input_dir = input_file.parent
    if not input_dir.parts:
        input_dir = Path(".")

    config_path = Path(args.config) if args.config else None
    config = load_config(config_path, input_dir)

    # Indent: default < config < CLI
    indent = "    "
    cfg_writer = config.get("writer")
    if isinstance(cfg_writer, dict):
        cfg_indent = cfg_writer.get("indent")
        if cfg_indent is not None:
            if not isinstance(cfg_indent, str):
                raise argparse.ArgumentTypeError("writer.indent must be a string")
            indent = cfg_indent
    if args.indent is not None:
        indent = args.indent

    # Cache size: default < config
    cache_maxsize: int | None = DEFAULT_MAXSIZE
    cfg_cache = config.get("cache")
    if isinstance(cfg_cache, dict) and "maxsize" in cfg_cache:
        cfg_maxsize = cfg_cache["maxsize"]
        if isinstance(cfg_maxsize, bool) or not isinstance(cfg_maxsize, int) or cfg_maxsize < 0:
            raise argparse.ArgumentTypeError("cache.maxsize must be a non-negative integer")
        # 0 disables the bound
        cache_maxsize = cfg_maxsize or None

    if args.first:
        operation = Operation.FIRST
    elif args.last:
        operation = Operation.LAST
    elif args.after is not None:
        operation = Operation.AFTER
    else:
        operation = Operation.IMPLEMENTS

    return CliOptions(
        input_file=input_file,
        output_file=Path(args.output) if args.output else None,
        in_place=args.in_place,
        operation=operation,
        method_name=args.after,
        interface=args.implements,
        snippet_file=Path(args.snippet) if args.snippet else None,
        indent=indent,
        cache_maxsize=cache_maxsize,
        debug=args.debug,
    )


def apply_operation(options: CliOptions, source: str, snippet: str = "") -> str:
    """Run the selected writer operation on source and return the new source."""
    from classwriter.analyser import ClassFileAnalyser
    from classwriter.cache import TokenCache
    from classwriter.debug import dump_tokens
    from classwriter.writer import TokenizedCodeWriter

    analyser = ClassFileAnalyser(TokenCache(maxsize=options.cache_maxsize))
    writer = TokenizedCodeWriter(analyser, indent=options.indent)

    if options.debug:
        dump_tokens(analyser.get_tokens(source), file=sys.stderr)

    if options.operation is Operation.FIRST:
        return writer.insert_method_first_in_class(source, snippet)
    if options.operation is Operation.LAST:
        return writer.insert_method_last_in_class(source, snippet)
    if options.operation is Operation.AFTER:
        assert options.method_name is not None
        return writer.insert_after_method(source, options.method_name, snippet)
    assert options.interface is not None
    return writer.insert_implements_in_class(source, options.interface)


def read_snippet(options: CliOptions, stdin: TextIO) -> str:
    """Return the method snippet, or "" for operations that take none."""
    if options.operation is Operation.IMPLEMENTS:
        return ""
    if options.snippet_file is not None:
        return options.snippet_file.read_text(encoding="utf-8")
    return stdin.read()


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        options = resolve_options(args)
    except (argparse.ArgumentTypeError, tomllib.TOMLDecodeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    try:
        # newline="" keeps \r\n line endings intact
        with open(options.input_file, encoding="utf-8", newline="") as f:
            source = f.read()
        snippet = read_snippet(options, sys.stdin)
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    try:
        result = apply_operation(options, source, snippet)
    except ClassWriterError as exc:
        print(exc.format(str(options.input_file)), file=sys.stderr)
        return 1

    if options.in_place:
        options.input_file.write_text(result, encoding="utf-8", newline="")
    elif options.output_file:
        options.output_file.write_text(result, encoding="utf-8", newline="")
    else:
        sys.stdout.write(result)

    return 0
