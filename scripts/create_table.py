#!/usr/bin/env python3
"""Print the stats table DDL for a dialect, or create the table in the configured database."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from hourly_stats.core.log import get_console, get_logger, init_logging_from_settings  # noqa: E402
from hourly_stats.db import create_stats_table, engine_scope  # noqa: E402
from hourly_stats.models import TABLE_NAME, render_ddl  # noqa: E402
from hourly_stats.schema import TEST_TABLE_DDL  # noqa: E402
from hourly_stats.sql import Binder, column_table, explain, parse_one  # noqa: E402

logger = get_logger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--dialect",
        choices=("mysql", "postgresql", "sqlite"),
        default="mysql",
        help="SQL dialect used to compile the DDL",
    )
    parser.add_argument("--apply", action="store_true", help="Create the table in the database")
    parser.add_argument("--url", default=None, help="SQLAlchemy URL overriding the configured one")
    parser.add_argument(
        "--explain", action="store_true", help="Show the bound catalog for the canonical DDL"
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    console = get_console()

    if args.explain:
        bound = Binder().bind(parse_one(TEST_TABLE_DDL))
        console.print(column_table(bound))
        print(explain(bound))

    if not args.apply:
        print(render_ddl(args.dialect))
        return 0

    try:
        with engine_scope(args.url) as engine:
            created = create_stats_table(engine)
    except Exception:
        logger.exception("Could not create the stats table")
        return 1
    if created:
        logger.info("Created table %s", TABLE_NAME)
    return 0


if __name__ == "__main__":
    init_logging_from_settings("create-table")
    sys.exit(main())
