"""CLI entry point for prstore."""

import argparse
import sys
from pathlib import Path
from typing import NoReturn

from loguru import logger

from ..core.config import Config
from . import commands


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="prstore",
        description="Inspect and maintain the local pull request store",
    )
    parser.add_argument("--version", action="version", version="%(prog)s 1.0.0")
    parser.add_argument("--db", type=Path, help="Database path (default: $PRSTORE_DB_PATH)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=False)

    subparsers.add_parser("migrate", help="Apply pending schema migrations")
    subparsers.add_parser("status", help="Show schema version and stored pull requests")

    list_parser = subparsers.add_parser("list", help="List pull requests of a repository")
    list_parser.add_argument("repo_id", type=int, help="Repository database id")

    purge_parser = subparsers.add_parser(
        "purge", help="Delete all pull requests and the sync mark of a repository"
    )
    purge_parser.add_argument("repo_id", type=int, help="Repository database id")

    return parser


def configure_logging(level: str) -> None:
    """Route loguru output to stderr at the given level."""
    logger.remove()
    logger.add(sys.stderr, level=level)


def main(argv: list[str] | None = None) -> NoReturn:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)
    config = Config.from_env()
    if args.db:
        config.db_path = args.db

    configure_logging("DEBUG" if args.verbose else config.log_level)

    try:
        if args.command == "migrate":
            commands.handle_migrate(args, config)
        elif args.command == "status":
            commands.handle_status(args, config)
        elif args.command == "list":
            commands.handle_list(args, config)
        elif args.command == "purge":
            commands.handle_purge(args, config)
        else:
            parser.print_help()

        sys.exit(0)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
