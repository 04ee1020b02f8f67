"""The hourly per-user, per-action stats table."""
from __future__ import annotations

from sqlalchemy import REAL, TIMESTAMP, BigInteger, Column, Double, Integer, Table
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.schema import CreateTable

from .base import Base

TABLE_NAME = "test_table"

# Keep MySQL display widths so the emitted DDL reads like the canonical one.
_BIGINT = BigInteger().with_variant(mysql.BIGINT(display_width=20), "mysql")
_INT = Integer().with_variant(mysql.INTEGER(display_width=11), "mysql")
# SQLite stores every float as an 8-byte REAL.
_DOUBLE = Double().with_variant(REAL(), "sqlite")

# No primary key, foreign key, index or unique constraint is declared.
test_table = Table(
    TABLE_NAME,
    Base.metadata,
    Column("id", _BIGINT, nullable=False),
    Column("dt", _INT, nullable=False),
    Column("hour", _INT, nullable=False),
    Column("user_id", _BIGINT, nullable=False),
    Column("action_id", _BIGINT, nullable=False),
    Column("sales", _DOUBLE, nullable=True),
    Column("volume", _DOUBLE, nullable=True),
    Column("pieces", _BIGINT, nullable=True),
    Column("add_time", TIMESTAMP, nullable=False),
    Column("update_time", TIMESTAMP, nullable=False),
)


class ActionStat(Base):
    """One aggregate row keyed informally by (dt, hour, user_id, action_id)."""

    __table__ = test_table
    # The ORM needs an identity column; this does not add a key to the DDL.
    __mapper_args__ = {"primary_key": [test_table.c.id]}

    def __repr__(self) -> str:
        return (
            f"ActionStat(id={self.id!r}, dt={self.dt!r}, hour={self.hour!r}, "
            f"user_id={self.user_id!r}, action_id={self.action_id!r})"
        )


_DIALECTS = {
    "mysql": mysql.dialect,
    "postgresql": postgresql.dialect,
    "sqlite": sqlite.dialect,
}


def render_ddl(dialect: str = "mysql") -> str:
    """Compile ``CREATE TABLE`` for the stats table in the named dialect."""

    try:
        dialect_factory = _DIALECTS[dialect]
    except KeyError:
        raise ValueError(
            f"Unknown dialect {dialect!r}; expected one of {', '.join(sorted(_DIALECTS))}"
        ) from None
    return str(CreateTable(test_table).compile(dialect=dialect_factory())).strip()
