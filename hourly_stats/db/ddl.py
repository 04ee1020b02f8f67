"""Create and drop the stats table on a live database."""
from __future__ import annotations

from sqlalchemy import inspect
from sqlalchemy.engine import Connection, Engine

from hourly_stats.core.log import get_logger, log_context, timeit
from hourly_stats.models import test_table

LOGGER = get_logger(__name__)


def table_exists(bind: Engine | Connection, name: str = test_table.name) -> bool:
    return inspect(bind).has_table(name)


def create_stats_table(bind: Engine | Connection, checkfirst: bool = True) -> bool:
    """Create the stats table; return ``False`` if it already existed."""

    with log_context.bound(table=test_table.name):
        if checkfirst and table_exists(bind):
            LOGGER.info("Table already exists, leaving it untouched")
            return False
        with timeit("Create table", logger=LOGGER):
            test_table.create(bind, checkfirst=False)
    return True


def drop_stats_table(bind: Engine | Connection, checkfirst: bool = True) -> bool:
    """Drop the stats table; return ``False`` if it did not exist."""

    with log_context.bound(table=test_table.name):
        if checkfirst and not table_exists(bind):
            LOGGER.info("Table does not exist, nothing to drop")
            return False
        with timeit("Drop table", logger=LOGGER):
            test_table.drop(bind, checkfirst=False)
    return True
