"""Canonical definition of the stats table."""
from __future__ import annotations

from hourly_stats.catalog import RootCatalog, TableCatalog
from hourly_stats.sql.binder import bind_ddl

TEST_TABLE_DDL = """\
CREATE TABLE `test_table` (
  `id` bigint(20) NOT NULL,
  `dt` int(11) NOT NULL,
  `hour` int(11) NOT NULL,
  `user_id` bigint(20) NOT NULL,
  `action_id` bigint(20) NOT NULL,
  `sales` double,
  `volume` double,
  `pieces` bigint(20),
  `add_time` timestamp NOT NULL,
  `update_time` timestamp NOT NULL
)
"""

EXPECTED_COLUMNS = (
    "id",
    "dt",
    "hour",
    "user_id",
    "action_id",
    "sales",
    "volume",
    "pieces",
    "add_time",
    "update_time",
)


def expected_table(catalog: RootCatalog | None = None) -> TableCatalog:
    """Bind the canonical DDL and return a fresh catalog entry for it."""

    return bind_ddl(TEST_TABLE_DDL, catalog)
