#!/usr/bin/env python3
"""CLI for Series Catalog API management tasks.

Usage:
    python -m cli <command>

Commands:
    migrate [upgrade|downgrade|current] [target]
               Apply, revert or inspect schema migrations (default: upgrade head)
    stats      Print catalog statistics for the configured database
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from alembic.config import Config

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

API_DIR = Path(__file__).resolve().parent

_DEFAULT_TARGETS = {"upgrade": "head", "downgrade": "-1"}


def get_alembic_config() -> Config:
    """Alembic config with absolute paths, usable from any working directory."""
    cfg = Config(str(API_DIR / "alembic.ini"))
    cfg.set_main_option("script_location", str(API_DIR / "alembic"))
    return cfg


def cmd_migrate(action: str = "upgrade", target: str | None = None) -> int:
    """Run an Alembic command against the configured database."""
    from alembic import command

    cfg = get_alembic_config()
    if action == "current":
        command.current(cfg)
        return 0

    revision = target or _DEFAULT_TARGETS[action]
    logger.info("Running migrations: %s %s", action, revision)
    if action == "upgrade":
        command.upgrade(cfg, revision)
    else:
        command.downgrade(cfg, revision)
    logger.info("Migrations complete")
    return 0


async def _collect_stats() -> dict[str, int]:
    from core.database import create_engine, create_session_maker, dispose_engine
    from services.series_service import get_catalog_counts, get_series_stats

    engine = create_engine()
    try:
        session_maker = create_session_maker(engine)
        async with session_maker() as session:
            stats = await get_series_stats(session)
            counts = await get_catalog_counts(session)
    finally:
        await dispose_engine(engine)
    return {
        "total_series": stats.total_series,
        "unique_genres": stats.unique_genres,
        "total_characters": counts.characters,
    }


def cmd_stats() -> int:
    """Print catalog statistics."""
    for name, value in asyncio.run(_collect_stats()).items():
        print(f"{name}: {value}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Series Catalog API CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    migrate = subparsers.add_parser("migrate", help="Run database migrations")
    migrate.add_argument(
        "action",
        nargs="?",
        default="upgrade",
        choices=["upgrade", "downgrade", "current"],
    )
    migrate.add_argument(
        "target",
        nargs="?",
        help="Revision (default: head for upgrade, -1 for downgrade)",
    )
    subparsers.add_parser(
        "stats",
        help="Print catalog statistics for the configured database",
    )

    args = parser.parse_args(argv)

    if args.command == "migrate":
        return cmd_migrate(args.action, args.target)
    elif args.command == "stats":
        return cmd_stats()
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
