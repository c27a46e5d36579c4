"""``dumont`` command line: run the server or create the database schema."""

from __future__ import annotations

import argparse
import asyncio
import os

from dumont.config import ServiceConfig
from dumont.logging import configure_logging, get_logger, level_from_verbosity, log_info

logger = get_logger(__name__)


def _add_verbosity_flags(parser: argparse.ArgumentParser) -> None:
    group = parser.add_argument_group("logging")
    group.add_argument(
        "-d",
        "--debug",
        action="count",
        default=0,
        help="Increase verbosity; repeat for trace output",
    )
    group.add_argument(
        "-w", "--warn", action="store_true", help="Only log warnings and errors"
    )
    group.add_argument("-e", "--error", action="store_true", help="Only log errors")


def _selected_level(args: argparse.Namespace) -> str | None:
    if not (args.debug or args.warn or args.error):
        return None
    return level_from_verbosity(debug=args.debug, warn=args.warn, error=args.error)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dumont", description="Label-governed metadata registry."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    _add_verbosity_flags(serve)

    init_db = subparsers.add_parser("init-db", help="Create the database tables")
    init_db.add_argument(
        "--database-url",
        default=None,
        help="SQLAlchemy async URL (defaults to DUMONT_DATABASE_URL)",
    )
    _add_verbosity_flags(init_db)
    return parser


async def _init_db(database_url: str) -> None:
    from dumont.storage import create_storage_engine, init_storage

    engine = create_storage_engine(database_url)
    try:
        await init_storage(engine)
    finally:
        await engine.dispose()


def _run_init_db(args: argparse.Namespace) -> int:
    configure_logging(_selected_level(args) or os.environ.get("DUMONT_LOG_LEVEL"))
    database_url = args.database_url or ServiceConfig.from_env().database_url
    if database_url is None:
        print("init-db needs --database-url or DUMONT_DATABASE_URL")
        return 2

    asyncio.run(_init_db(database_url))
    log_info(logger, "Initialised registry schema")
    return 0


def _run_serve(args: argparse.Namespace) -> int:
    from dumont.runtime import main as serve

    level = _selected_level(args)
    if level is not None:
        # Workers read the level from the environment they inherit.
        os.environ["DUMONT_LOG_LEVEL"] = level
    serve()
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point for the ``dumont`` console script.

    Returns
    -------
    int
        Process exit code.

    """
    args = _build_parser().parse_args(argv)
    if args.command == "init-db":
        return _run_init_db(args)
    return _run_serve(args)


if __name__ == "__main__":
    raise SystemExit(main())
