"""Exception hierarchy shared by the catalog, DDL and validation layers."""
from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:  # pragma: no cover
    from hourly_stats.schema.validation import SchemaIssue


class HourlyStatsError(Exception):
    """Base class for errors raised by this package."""


class CatalogError(HourlyStatsError):
    """Raised when catalog entries are inconsistent."""


class ParseError(HourlyStatsError):
    """Raised when DDL text cannot be parsed."""

    def __init__(self, message: str, line: int | None = None, column: int | None = None) -> None:
        self.message = message
        self.line = line
        self.column = column
        if line is not None and column is not None:
            message = f"{message} at line {line}, column {column}"
        super().__init__(message)


class BindErrorKind(str, Enum):
    INVALID_SCHEMA = "invalid schema"
    DUPLICATED_TABLE = "duplicated table"
    DUPLICATED_COLUMN = "duplicated column"
    INVALID_COLUMN = "invalid column"
    NOT_SUPPORTED = "not supported"
    UNSUPPORTED_TYPE = "unsupported type"


class BindError(HourlyStatsError):
    """Raised when a parsed statement does not fit the catalog."""

    def __init__(self, kind: BindErrorKind, name: str, detail: str | None = None) -> None:
        self.kind = kind
        self.name = name
        self.detail = detail
        message = f"{kind.value}: {name}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class SchemaMismatchError(HourlyStatsError):
    """Raised when a table does not match its expected definition."""

    def __init__(self, message: str, issues: Sequence["SchemaIssue"] = ()) -> None:
        self.issues = list(issues)
        if self.issues:
            message = message + "\n" + "\n".join(f"  - {issue}" for issue in self.issues)
        super().__init__(message)
