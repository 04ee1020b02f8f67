"""Canonical stats table definition and schema validation."""

from .definition import EXPECTED_COLUMNS, TEST_TABLE_DDL, expected_table
from .reflection import kind_for_type, reflect_table
from .validation import (
    IssueCode,
    SchemaIssue,
    SchemaReport,
    compare_tables,
    validate_database,
    validate_ddl,
)

__all__ = [
    "EXPECTED_COLUMNS",
    "IssueCode",
    "SchemaIssue",
    "SchemaReport",
    "TEST_TABLE_DDL",
    "compare_tables",
    "expected_table",
    "kind_for_type",
    "reflect_table",
    "validate_database",
    "validate_ddl",
]
