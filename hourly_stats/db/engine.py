"""Engines for the stats database."""
from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url

from hourly_stats.core.config import get_settings
from hourly_stats.core.log import get_logger

LOGGER = get_logger(__name__)


def get_sqlalchemy_url() -> str:
    return get_settings().database.sqlalchemy_url


def create_sync_engine(url: str | None = None, **kwargs) -> Engine:
    """Create an engine for ``url``, or for the configured database when omitted.

    ``SQLALCHEMY_ECHO`` supplies the ``echo`` default; other keyword
    arguments go straight to :func:`sqlalchemy.create_engine`.
    """

    settings = get_settings()
    kwargs.setdefault("echo", settings.sqlalchemy_echo)
    if url is None:
        url, shown = settings.database.sqlalchemy_url, settings.database.masked_url
    else:
        shown = make_url(url).render_as_string(hide_password=True)
    LOGGER.debug("Creating engine for %s", shown)
    return create_engine(url, **kwargs)


@contextmanager
def engine_scope(url: str | None = None, **kwargs) -> Iterator[Engine]:
    """Yield an engine and dispose of its pool when the block exits."""

    engine = create_sync_engine(url, **kwargs)
    try:
        yield engine
    finally:
        engine.dispose()
