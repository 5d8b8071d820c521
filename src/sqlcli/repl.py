"""Command line entry point for the SQL client."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from sqlcli import messages
from sqlcli.client import DEFAULT_HISTORY_FILE, CliClient
from sqlcli.config import VERBOSE
from sqlcli.errors import SqlClientError
from sqlcli.local_executor import LocalExecutor

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def configure_logging(debug: bool = False, log_file: Path | None = None) -> None:
    """Send the client's log records to ``log_file``, or to stderr.

    Without a log file only errors reach stderr so that warnings about
    failed statements do not repeat what the terminal already shows.
    """
    root = logging.getLogger("sqlcli")
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    handler: logging.Handler
    if log_file is not None:
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setLevel(logging.DEBUG if debug else logging.INFO)
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(logging.DEBUG if debug else logging.ERROR)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if debug else logging.INFO)
    root.propagate = False


def _parse_definitions(definitions: list[str]) -> dict[str, str]:
    properties = {}
    for definition in definitions:
        key, sep, value = definition.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"Invalid property definition '{definition}', expected key=value")
        properties[key.strip()] = value.strip()
    return properties


def _read_script(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise ValueError(f"Unable to read file {path}: {e.strerror or e}") from e


def build_arg_parser() -> argparse.ArgumentParser:
    arg_parser = argparse.ArgumentParser(
        prog=messages.CLI_NAME,
        description="Command line client for submitting SQL statements",
    )
    arg_parser.add_argument(
        "-i", "--init",
        type=Path,
        help="SQL file run before anything else; only SET, RESET and DDL statements are allowed",
    )
    arg_parser.add_argument(
        "-f", "--file",
        type=Path,
        help="Execute statements from a file and exit",
    )
    arg_parser.add_argument(
        "-D",
        dest="properties",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Session property set before the first statement (repeatable)",
    )
    arg_parser.add_argument(
        "--history",
        type=Path,
        default=DEFAULT_HISTORY_FILE,
        help=f"Command history file (default: {DEFAULT_HISTORY_FILE})",
    )
    arg_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Print full stack traces for failed statements",
    )
    arg_parser.add_argument(
        "--debug",
        action="store_true",
        help="Log debug output",
    )
    arg_parser.add_argument(
        "--log-file",
        type=Path,
        help="Write log output to this file instead of stderr",
    )
    return arg_parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_arg_parser().parse_args(argv)
    configure_logging(args.debug, args.log_file)

    try:
        properties = _parse_definitions(args.properties)
        if args.verbose:
            properties[VERBOSE.key] = "true"
        executor = LocalExecutor(properties)
        init_script = _read_script(args.init) if args.init else None
        script = _read_script(args.file) if args.file else None
    except (ValueError, SqlClientError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    client = CliClient(executor, history_file=args.history)

    if init_script is not None:
        logger.info("Running initialization file %s", args.init)
        if not client.execute_initialization(init_script):
            print(f"Error: Failed to initialize from sql script: {args.init}", file=sys.stderr)
            return 1

    if script is not None:
        return 0 if client.execute_file(script) else 1

    return 0 if client.execute_interactive() else 1


if __name__ == "__main__":
    sys.exit(main())
