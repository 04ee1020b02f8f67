"""Tests for the SQLAlchemy declaration of the stats table."""
from __future__ import annotations

from datetime import datetime
import warnings

import pytest
from sqlalchemy import select, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from hourly_stats.db import add_records, load_bucket, session_scope
from hourly_stats.models import ActionStat, Base, render_ddl, test_table
from hourly_stats.schema import EXPECTED_COLUMNS
from hourly_stats.schemas import ActionStatRecord


def test_table_columns_match_definition() -> None:
    assert test_table.name == "test_table"
    assert tuple(column.name for column in test_table.columns) == EXPECTED_COLUMNS
    nullable = {column.name for column in test_table.columns if column.nullable}
    assert nullable == {"sales", "volume", "pieces"}


def test_table_declares_no_keys_or_indexes() -> None:
    assert list(test_table.primary_key.columns) == []
    assert test_table.foreign_keys == set()
    assert test_table.indexes == set()


def test_render_mysql_ddl() -> None:
    ddl = render_ddl("mysql")

    assert ddl.startswith("CREATE TABLE test_table (")
    assert "id BIGINT(20) NOT NULL" in ddl
    assert "dt INTEGER(11) NOT NULL" in ddl
    assert "sales DOUBLE" in ddl
    assert "pieces BIGINT(20)," in ddl
    assert "add_time TIMESTAMP NOT NULL" in ddl
    assert "PRIMARY KEY" not in ddl


def test_render_sqlite_ddl() -> None:
    ddl = render_ddl("sqlite")

    assert "id BIGINT NOT NULL" in ddl
    assert "sales REAL" in ddl
    assert "update_time TIMESTAMP NOT NULL" in ddl


def test_render_unknown_dialect() -> None:
    with pytest.raises(ValueError, match="Unknown dialect"):
        render_ddl("oracle")


def test_orm_round_trip(engine) -> None:
    Base.metadata.create_all(engine)
    added = datetime(2024, 1, 1, 13, 5)

    with Session(engine) as session:
        session.add(
            ActionStat(
                id=1,
                dt=20240101,
                hour=13,
                user_id=42,
                action_id=7,
                sales=12.5,
                volume=None,
                pieces=3,
                add_time=added,
                update_time=added,
            )
        )
        session.commit()

    with Session(engine) as session:
        row = session.scalars(select(ActionStat).where(ActionStat.user_id == 42)).one()
        record = ActionStatRecord.model_validate(row)

    assert record.bucket == (20240101, 13, 42, 7)
    assert record.sales == 12.5
    assert record.volume is None
    assert record.add_time == added
    assert "user_id=42" in repr(row)


def test_rows_may_share_a_bucket(engine) -> None:
    Base.metadata.create_all(engine)
    stamp = datetime(2024, 1, 2, 0, 0)
    rows = [
        {
            "id": row_id,
            "dt": 20240102,
            "hour": 0,
            "user_id": 5,
            "action_id": 9,
            "sales": None,
            "volume": None,
            "pieces": None,
            "add_time": stamp,
            "update_time": stamp,
        }
        for row_id in (1, 2)
    ]

    with engine.begin() as connection:
        connection.execute(test_table.insert(), rows)
        count = connection.execute(select(test_table.c.id)).all()

    assert len(count) == 2


def _record(row_id: int, **overrides: object) -> ActionStatRecord:
    stamp = datetime(2024, 1, 3, 9, 30)
    values: dict[str, object] = {
        "id": row_id,
        "dt": 20240103,
        "hour": 9,
        "user_id": 77,
        "action_id": 2,
        "add_time": stamp,
        "update_time": stamp,
    }
    values.update(overrides)
    return ActionStatRecord(**values)


def test_session_scope_stores_records(engine) -> None:
    Base.metadata.create_all(engine)

    with session_scope(engine) as session:
        assert add_records(session, [_record(2, sales=3.0), _record(1), _record(3, hour=10)]) == 3

    with session_scope(engine) as session:
        bucket = load_bucket(session, 20240103, 9, 77, 2)

    assert [record.id for record in bucket] == [1, 2]
    assert bucket[1].sales == 3.0


def test_session_scope_rolls_back_on_error(engine) -> None:
    Base.metadata.create_all(engine)

    with pytest.raises(RuntimeError):
        with session_scope(engine) as session:
            add_records(session, [_record(1)])
            session.flush()
            raise RuntimeError("abort")

    with session_scope(engine) as session:
        assert load_bucket(session, 20240103, 9, 77, 2) == []


def test_load_bucket_keeps_rows_sharing_an_id(engine) -> None:
    Base.metadata.create_all(engine)
    rows = [_record(1, sales=1.0).to_row(), _record(1, sales=2.0).to_row()]
    with engine.begin() as connection:
        connection.execute(test_table.insert(), rows)

    with session_scope(engine) as session:
        bucket = load_bucket(session, 20240103, 9, 77, 2)

    assert [record.id for record in bucket] == [1, 1]
    assert sorted(record.sales for record in bucket) == [1.0, 2.0]


def test_add_records_with_shared_id_does_not_warn(engine) -> None:
    Base.metadata.create_all(engine)

    with warnings.catch_warnings():
        warnings.simplefilter("error")
        with session_scope(engine) as session:
            assert add_records(session, [_record(4, sales=1.0), _record(4, sales=2.0)]) == 2
        with session_scope(engine) as session:
            bucket = load_bucket(session, 20240103, 9, 77, 2)

    assert sorted(record.sales for record in bucket) == [1.0, 2.0]


def test_add_records_with_nothing_to_insert(engine) -> None:
    Base.metadata.create_all(engine)

    with session_scope(engine) as session:
        assert add_records(session, []) == 0


def test_session_scope_disposes_only_engines_it_created(engine, monkeypatch) -> None:
    disposed: list[Engine] = []
    original = Engine.dispose

    def tracking_dispose(self, *args, **kwargs):
        disposed.append(self)
        return original(self, *args, **kwargs)

    monkeypatch.setattr(Engine, "dispose", tracking_dispose)

    with session_scope(engine) as session:
        assert session.execute(text("SELECT 1")).scalar() == 1
    assert disposed == []

    with session_scope(url="sqlite://") as session:
        assert session.execute(text("SELECT 1")).scalar() == 1
        created = session.get_bind()
    assert disposed == [created]
    assert created is not engine
