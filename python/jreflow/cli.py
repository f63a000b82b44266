import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import structlog
from pydantic import ValidationError

from jreflow import __version__
from jreflow.diff import describe_changes
from jreflow.errors import ParseError, ReflowError
from jreflow.formatter import CommandFormatter, NoopFormatter, SourceFormatter
from jreflow.models import DEFAULT_COLUMN_LIMIT, WrapOptions
from jreflow.wrapper import wrap

STDIN = "-"

EXIT_CHANGED = 1
EXIT_PARSE_ERROR = 2
EXIT_FAILURE = 3


def _configure_logging(verbose: bool):
    # Output goes to stdout, so every log line must go to stderr.
    level = logging.DEBUG if verbose else logging.WARNING
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def _read_source(name: str) -> str:
    if name == STDIN:
        return sys.stdin.read()
    path = Path(name)
    if not path.exists():
        print(f"Error: File not found: {path}", file=sys.stderr)
        sys.exit(EXIT_FAILURE)
    # newline="" keeps CRLF/CR line endings intact
    with open(path, "r", encoding="utf-8", newline="") as f:
        return f.read()


def _write_source(name: str, text: str):
    with open(name, "w", encoding="utf-8", newline="") as f:
        f.write(text)


def _build_options(args: argparse.Namespace) -> WrapOptions:
    try:
        return WrapOptions(column_limit=args.column_limit)
    except ValidationError as e:
        print(f"Error: invalid options: {e}", file=sys.stderr)
        sys.exit(EXIT_FAILURE)


def _build_formatter(args: argparse.Namespace) -> SourceFormatter:
    command = getattr(args, "formatter_command", None)
    if command:
        return CommandFormatter(command)
    return NoopFormatter()


def _wrap_or_exit(text: str, name: str, options: WrapOptions, formatter: SourceFormatter) -> str:
    try:
        return wrap(text, options=options, formatter=formatter, source_name=name)
    except ParseError as e:
        print(str(e), file=sys.stderr)
        sys.exit(EXIT_PARSE_ERROR)
    except (ReflowError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(EXIT_FAILURE)


def handle_fix(args: argparse.Namespace):
    """Handler for the 'fix' subcommand."""
    options = _build_options(args)
    formatter = _build_formatter(args)

    if args.in_place and STDIN in args.files:
        print("Error: --in-place cannot be used with stdin.", file=sys.stderr)
        sys.exit(EXIT_FAILURE)

    for name in args.files:
        text = _read_source(name)
        result = _wrap_or_exit(text, name, options, formatter)
        if args.in_place:
            if result != text:
                _write_source(name, result)
                print(f"Reflowed {name}", file=sys.stderr)
        else:
            sys.stdout.write(result)


def handle_check(args: argparse.Namespace):
    """Handler for the 'check' subcommand. Exits 1 if any file would change."""
    options = _build_options(args)
    changed = 0

    for name in args.files:
        text = _read_source(name)
        result = _wrap_or_exit(text, name, options, NoopFormatter())
        if result != text:
            changed += 1
            print(describe_changes(text, result, name, f"{name} (reflowed)"))

    print(f"Stats: {changed} of {len(args.files)} files would be reflowed.", file=sys.stderr)
    if changed:
        sys.exit(EXIT_CHANGED)


def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(prog="jreflow", description="Reflow long Java string literals and text blocks")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr")
    subparsers = parser.add_subparsers(dest="command", required=True, help="Subcommands")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("files", nargs="+", help="Java source files ('-' for stdin)")
    common.add_argument(
        "--column-limit",
        type=int,
        default=DEFAULT_COLUMN_LIMIT,
        help=f"Maximum line width (default: {DEFAULT_COLUMN_LIMIT})",
    )

    p_fix = subparsers.add_parser("fix", parents=[common], help="Reflow files and print or rewrite them")
    p_fix.add_argument("-i", "--in-place", action="store_true", help="Rewrite files instead of printing")
    p_fix.add_argument(
        "--formatter-command",
        type=str,
        help="Formatter run over replaced ranges between rounds, e.g. 'google-java-format --skip-reflowing-long-strings'",
    )
    p_fix.set_defaults(func=handle_fix)

    p_check = subparsers.add_parser("check", parents=[common], help="Report files that would be reflowed")
    p_check.set_defaults(func=handle_check)

    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    args.func(args)


if __name__ == "__main__":
    main()
