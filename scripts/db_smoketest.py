#!/usr/bin/env python3
"""Connect to the configured database and report on the stats table."""
from __future__ import annotations

import sys
from pathlib import Path

from sqlalchemy import text

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from hourly_stats.core.config import get_settings  # noqa: E402
from hourly_stats.core.log import get_console, init_logging_from_settings  # noqa: E402
from hourly_stats.db import engine_scope, table_exists  # noqa: E402


def main(url: str | None = None) -> int:
    settings = get_settings()
    console = get_console()
    table = settings.schema.table_name
    with engine_scope(url) as engine, engine.connect() as conn:
        conn.execute(text("SELECT 1"))
        version = ".".join(str(part) for part in conn.dialect.server_version_info or ())
        console.print(
            f"[green]Connected[/] to {engine.url.render_as_string(hide_password=True)} "
            f"({conn.dialect.name} {version or 'unknown version'})"
        )
        present = table_exists(conn, table)
    state = "[green]present[/]" if present else "[yellow]missing[/]"
    console.print(f"Table {table}: {state}")
    return 0


if __name__ == "__main__":
    init_logging_from_settings("db-smoketest")
    sys.exit(main())
