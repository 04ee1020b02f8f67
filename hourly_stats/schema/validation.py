"""Compare a table's actual layout with its expected definition."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from sqlalchemy.engine import Connection, Engine

from hourly_stats.catalog import RootCatalog, TableCatalog
from hourly_stats.core.config import get_settings
from hourly_stats.core.errors import CatalogError, SchemaMismatchError
from hourly_stats.core.log import get_logger, log_context, timeit
from hourly_stats.sql.binder import bind_ddl

from .definition import expected_table
from .reflection import reflect_table

LOGGER = get_logger(__name__)


class IssueCode(str, Enum):
    MISSING_TABLE = "MISSING_TABLE"
    MISSING_COLUMN = "MISSING_COLUMN"
    UNEXPECTED_COLUMN = "UNEXPECTED_COLUMN"
    COLUMN_ORDER = "COLUMN_ORDER"
    TYPE_MISMATCH = "TYPE_MISMATCH"
    NULLABILITY_MISMATCH = "NULLABILITY_MISMATCH"
    PRIMARY_KEY_MISMATCH = "PRIMARY_KEY_MISMATCH"


@dataclass(frozen=True)
class SchemaIssue:
    code: IssueCode
    message: str
    column: str | None = None

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"


@dataclass
class SchemaReport:
    """Outcome of checking one table against its expected definition."""

    table: str
    issues: list[SchemaIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues

    def codes(self) -> list[IssueCode]:
        return [issue.code for issue in self.issues]

    def issues_for(self, column: str) -> list[SchemaIssue]:
        return [issue for issue in self.issues if issue.column == column]

    def raise_for_issues(self) -> None:
        if self.issues:
            raise SchemaMismatchError(
                f"Table {self.table!r} does not match its definition", self.issues
            )


def compare_tables(
    expected: TableCatalog,
    actual: Optional[TableCatalog],
    table: str | None = None,
) -> SchemaReport:
    """Report every difference between ``expected`` and ``actual``.

    ``table`` names the checked table in the report; it defaults to the
    actual table name, or the expected one when the table is missing.

    Column types are compared by kind only, so display widths like ``int(11)``
    and string lengths never produce an issue.
    """

    if table is None:
        table = actual.name if actual is not None else expected.name
    report = SchemaReport(table=table)
    if actual is None:
        report.issues.append(
            SchemaIssue(IssueCode.MISSING_TABLE, f"table {table!r} does not exist")
        )
        return report

    expected_names = expected.column_names()
    actual_names = actual.column_names()

    for name in expected_names:
        if name not in actual_names:
            report.issues.append(
                SchemaIssue(IssueCode.MISSING_COLUMN, f"column {name!r} is missing", name)
            )
    for name in actual_names:
        if name not in expected_names:
            report.issues.append(
                SchemaIssue(IssueCode.UNEXPECTED_COLUMN, f"column {name!r} is not expected", name)
            )

    common_expected = [name for name in expected_names if name in actual_names]
    common_actual = [name for name in actual_names if name in expected_names]
    if common_expected != common_actual:
        report.issues.append(
            SchemaIssue(
                IssueCode.COLUMN_ORDER,
                "columns are out of order: expected "
                f"({', '.join(common_expected)}), found ({', '.join(common_actual)})",
            )
        )

    for name in common_expected:
        want = expected.get_column_by_name(name)
        have = actual.get_column_by_name(name)
        if want is None or have is None:
            raise CatalogError(f"column {name!r} is listed but cannot be looked up")
        if want.datatype.kind is not have.datatype.kind:
            report.issues.append(
                SchemaIssue(
                    IssueCode.TYPE_MISMATCH,
                    f"column {name!r} has type {have.datatype.kind}, expected {want.datatype.kind}",
                    name,
                )
            )
        if want.is_nullable != have.is_nullable:
            expected_flag = "NULL" if want.is_nullable else "NOT NULL"
            actual_flag = "NULL" if have.is_nullable else "NOT NULL"
            report.issues.append(
                SchemaIssue(
                    IssueCode.NULLABILITY_MISMATCH,
                    f"column {name!r} is {actual_flag}, expected {expected_flag}",
                    name,
                )
            )

    expected_pk = expected.primary_key_names()
    actual_pk = actual.primary_key_names()
    if expected_pk != actual_pk:
        report.issues.append(
            SchemaIssue(
                IssueCode.PRIMARY_KEY_MISMATCH,
                f"primary key is ({', '.join(actual_pk)}), expected ({', '.join(expected_pk)})",
            )
        )
    return report


def validate_database(
    bind: Engine | Connection,
    table: str | None = None,
    schema: str | None = None,
    expected: TableCatalog | None = None,
) -> SchemaReport:
    """Reflect ``table`` from the database and compare it with ``expected``."""

    name = (table or get_settings().schema.table_name).lower()
    expected = expected or expected_table()
    with log_context.bound(table=name), timeit("Schema validation", logger=LOGGER) as timer:
        report = compare_tables(expected, reflect_table(bind, name, schema=schema), table=name)
        timer.note(issues=len(report.issues))
    _log_report(report)
    return report


def validate_ddl(sql: str, expected: TableCatalog | None = None) -> SchemaReport:
    """Bind ``sql`` and compare the table it defines with ``expected``."""

    expected = expected or expected_table()
    catalog = RootCatalog(get_settings().schema.default_schema)
    actual = bind_ddl(sql, catalog)
    with log_context.bound(table=actual.name):
        report = compare_tables(expected, actual)
        if actual.name != expected.name:
            report.issues.insert(
                0,
                SchemaIssue(
                    IssueCode.MISSING_TABLE,
                    f"DDL defines table {actual.name!r}, expected {expected.name!r}",
                ),
            )
        _log_report(report)
    return report


def _log_report(report: SchemaReport) -> None:
    if report.ok:
        LOGGER.info("Table %s matches its definition", report.table)
        return
    for issue in report.issues:
        LOGGER.warning("%s", issue)
