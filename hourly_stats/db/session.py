"""Session helpers for reading and writing stats rows."""
from __future__ import annotations

from contextlib import contextmanager
from typing import Iterable, Iterator

from sqlalchemy import insert, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from hourly_stats.core.log import get_logger
from hourly_stats.models import test_table
from hourly_stats.schemas import ActionStatRecord

from .engine import engine_scope

LOGGER = get_logger(__name__)


def get_sessionmaker(bind: Engine) -> sessionmaker:
    return sessionmaker(bind=bind, autoflush=False, expire_on_commit=False)


@contextmanager
def session_scope(bind: Engine | None = None, url: str | None = None, **kwargs) -> Iterator[Session]:
    """Commit on success, roll back and re-raise on error, always close.

    Without ``bind`` an engine is built from ``url`` (or the settings) for
    this block only and disposed when it exits.
    """

    if bind is None:
        with engine_scope(url, **kwargs) as engine:
            with session_scope(engine) as session:
                yield session
        return

    session = get_sessionmaker(bind)()
    try:
        yield session
        session.commit()
    except Exception:
        LOGGER.warning("Rolling back stats session")
        session.rollback()
        raise
    finally:
        session.close()


def add_records(session: Session, records: Iterable[ActionStatRecord]) -> int:
    """Insert validated records as new rows and return how many were added.

    Rows go through a Core ``INSERT`` because ``id`` is not unique in the table.
    """

    rows = [record.to_row() for record in records]
    if rows:
        session.execute(insert(test_table), rows)
    LOGGER.debug("Inserted %d stats rows", len(rows))
    return len(rows)


def load_bucket(
    session: Session, dt: int, hour: int, user_id: int, action_id: int
) -> list[ActionStatRecord]:
    """Rows for one ``(dt, hour, user_id, action_id)`` bucket, ordered by id.

    Nothing enforces uniqueness of a bucket or of ``id``, so several rows may
    come back, including rows that share an ``id``.
    """

    statement = (
        select(test_table)
        .where(
            test_table.c.dt == dt,
            test_table.c.hour == hour,
            test_table.c.user_id == user_id,
            test_table.c.action_id == action_id,
        )
        .order_by(test_table.c.id)
    )
    return [
        ActionStatRecord.model_validate(dict(row))
        for row in session.execute(statement).mappings()
    ]
