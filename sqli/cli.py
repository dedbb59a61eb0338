#!/usr/bin/env python3
"""sqli - A keyboard-driven terminal browser for SQL databases."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from ._version import __version__
from .domains.connections.app.url_parser import parse_connection_url
from .domains.connections.store.connections import load_connections, save_connections
from .shared.core.errors import StorageError
from .shared.core.logging import setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sqli",
        description="A keyboard-driven terminal browser for SQL databases",
        epilog="Connect via URL: sqli --connect pg://user:pass@host/db, sqli --connect sqlite:///path/to/db.sqlite",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        type=Path,
        help="Path to a connections JSON file (overrides ~/.sqli/connections.json)",
    )
    parser.add_argument(
        "--connect",
        metavar="URL",
        action="append",
        default=[],
        help="Add a connection from a URL, e.g. pg://user@host:5432/db (repeatable)",
    )
    parser.add_argument(
        "--save",
        action="store_true",
        help="Persist connections given with --connect to the connections file",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Write debug logs to ~/.sqli/debug.log",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    log_file = setup_logging(args.debug)
    if log_file is not None:
        logger.debug("Logging to %s", log_file)

    try:
        connections = load_connections(args.config)
    except StorageError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    added = []
    for url in args.connect:
        try:
            added.append(parse_connection_url(url))
        except ValueError as e:
            print(f"Error: invalid connection URL {url!r}: {e}", file=sys.stderr)
            return 1

    if added:
        names = {config.name for config in added}
        connections = added + [config for config in connections if config.name not in names]
        if args.save:
            try:
                save_connections(connections, args.config)
            except StorageError as e:
                print(f"Error: {e}", file=sys.stderr)
                return 1

    from .app import SqliApp

    app = SqliApp(connections)
    app.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
