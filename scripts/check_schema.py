#!/usr/bin/env python3
"""Check that the stats table matches its canonical definition.

Validates the configured database by default, or one or more DDL files given
with ``--ddl``. Exits with status 1 when any table does not match.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from hourly_stats.core.errors import HourlyStatsError  # noqa: E402
from hourly_stats.core.log import get_console, get_logger, init_logging_from_settings  # noqa: E402
from hourly_stats.db import engine_scope  # noqa: E402
from hourly_stats.schema import SchemaReport, validate_database, validate_ddl  # noqa: E402

logger = get_logger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--ddl",
        type=Path,
        action="append",
        default=[],
        help="DDL file to validate instead of the database (repeatable)",
    )
    parser.add_argument("--table", default=None, help="Table name to reflect from the database")
    parser.add_argument("--url", default=None, help="SQLAlchemy URL overriding the configured one")
    return parser.parse_args(argv)


def _print_report(label: str, report: SchemaReport) -> None:
    console = get_console()
    if report.ok:
        console.print(f"[green]OK[/] {label}: {report.table}")
        return
    console.print(f"[red]MISMATCH[/] {label}: {report.table}")
    for issue in report.issues:
        console.print(f"  {issue}", markup=False)


def check_files(paths: list[Path]) -> bool:
    all_ok = True
    for path in paths:
        try:
            report = validate_ddl(path.read_text(encoding="utf-8"))
        except (OSError, HourlyStatsError) as exc:
            logger.error("Could not validate %s: %s", path, exc)
            all_ok = False
            continue
        _print_report(str(path), report)
        all_ok = all_ok and report.ok
    return all_ok


def check_database(table: str | None, url: str | None) -> bool:
    try:
        with engine_scope(url) as engine, get_console().status("Reflecting table definition"):
            report = validate_database(engine, table=table)
    except Exception:
        logger.exception("Schema check against the database failed")
        return False
    _print_report("database", report)
    return report.ok


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    if args.ddl:
        ok = check_files(args.ddl)
    else:
        ok = check_database(args.table, args.url)
    return 0 if ok else 1


if __name__ == "__main__":
    init_logging_from_settings("check-schema")
    sys.exit(main())
