"""Syntax tree produced by :mod:`hourly_stats.sql.parser`."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class SqlType:
    """A column type as written, e.g. ``bigint(20)`` or ``decimal(10,2)``."""

    name: str
    args: tuple[int | str, ...] = ()
    unsigned: bool = False

    def __str__(self) -> str:
        text = self.name
        if self.args:
            text += "(" + ",".join(_render_arg(arg) for arg in self.args) + ")"
        if self.unsigned:
            text += " unsigned"
        return text


def _render_arg(arg: int | str) -> str:
    if isinstance(arg, str):
        return "'" + arg.replace("'", "''") + "'"
    return str(arg)


class ColumnOptionKind(str, Enum):
    NULL = "NULL"
    NOT_NULL = "NOT NULL"
    PRIMARY_KEY = "PRIMARY KEY"
    UNIQUE = "UNIQUE"
    COMMENT = "COMMENT"
    DEFAULT = "DEFAULT"
    AUTO_INCREMENT = "AUTO_INCREMENT"
    ON_UPDATE = "ON UPDATE"
    CHARACTER_SET = "CHARACTER SET"
    COLLATE = "COLLATE"


@dataclass(frozen=True)
class ColumnOption:
    kind: ColumnOptionKind
    value: str | None = None


@dataclass
class ColumnDef:
    name: str
    data_type: SqlType
    options: list[ColumnOption] = field(default_factory=list)

    def has_option(self, kind: ColumnOptionKind) -> bool:
        return any(option.kind is kind for option in self.options)


class ConstraintKind(str, Enum):
    PRIMARY_KEY = "PRIMARY KEY"
    UNIQUE = "UNIQUE"
    INDEX = "INDEX"
    FOREIGN_KEY = "FOREIGN KEY"


@dataclass
class TableConstraint:
    kind: ConstraintKind
    columns: list[str]
    name: str | None = None
    # FOREIGN KEY only
    ref_table: list[str] = field(default_factory=list)
    ref_columns: list[str] = field(default_factory=list)
    on_delete: str | None = None
    on_update: str | None = None


@dataclass
class CreateTableStatement:
    """``CREATE TABLE`` with its column definitions and table-level constraints."""

    name: list[str]
    columns: list[ColumnDef] = field(default_factory=list)
    constraints: list[TableConstraint] = field(default_factory=list)
    if_not_exists: bool = False
    options: dict[str, str] = field(default_factory=dict)

    @property
    def table_name(self) -> str:
        return self.name[-1]


# Only CREATE TABLE is parsed.
Statement = CreateTableStatement
