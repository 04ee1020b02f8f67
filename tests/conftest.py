"""Shared fixtures for the test suite."""
from __future__ import annotations

from pathlib import Path
from typing import Iterator
import sys

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from hourly_stats.core.config import get_settings  # noqa: E402
from hourly_stats.core.log import init_logging  # noqa: E402

# Console only, no queue thread and no log files while testing.
init_logging(app_name="hourly_stats-tests", log_dir=None, queue=False, rich_tracebacks=False)


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    for name in ("STATS_TABLE", "CATALOG_DEFAULT_SCHEMA", "DB_DRIVER", "DB_NAME"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def engine() -> Iterator[Engine]:
    engine = create_engine("sqlite:///:memory:", future=True)
    yield engine
    engine.dispose()
