"""DDL parsing, binding and explain output."""

from .ast import (
    ColumnDef,
    ColumnOption,
    ColumnOptionKind,
    ConstraintKind,
    CreateTableStatement,
    SqlType,
    Statement,
    TableConstraint,
)
from .binder import Binder, BoundCreateTable, bind_ddl, data_type_from_sql
from .explain import column_table, explain
from .parser import parse, parse_one, tokenize

__all__ = [
    "Binder",
    "BoundCreateTable",
    "ColumnDef",
    "ColumnOption",
    "ColumnOptionKind",
    "ConstraintKind",
    "CreateTableStatement",
    "SqlType",
    "Statement",
    "TableConstraint",
    "bind_ddl",
    "column_table",
    "data_type_from_sql",
    "explain",
    "parse",
    "parse_one",
    "tokenize",
]
