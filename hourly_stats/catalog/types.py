"""Logical column types understood by the catalog."""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from .column import ColumnDesc


class DataTypeKind(str, Enum):
    """Type kinds, valued by their SQL spelling."""

    BOOLEAN = "BOOLEAN"
    SMALLINT = "SMALLINT"
    INT = "INT"
    BIGINT = "BIGINT"
    FLOAT = "FLOAT"
    DOUBLE = "DOUBLE"
    DECIMAL = "DECIMAL"
    CHAR = "CHAR"
    VARCHAR = "VARCHAR"
    DATE = "DATE"
    TIMESTAMP = "TIMESTAMP"

    def __str__(self) -> str:
        return self.value

    @property
    def is_integer(self) -> bool:
        return self in (DataTypeKind.SMALLINT, DataTypeKind.INT, DataTypeKind.BIGINT)

    @property
    def bit_width(self) -> int | None:
        """Width in bits for fixed-size numeric kinds."""

        return _BIT_WIDTHS.get(self)

    def not_null(self) -> "DataType":
        return DataType(self, nullable=False)

    def nullable(self) -> "DataType":
        return DataType(self, nullable=True)


_BIT_WIDTHS = {
    DataTypeKind.SMALLINT: 16,
    DataTypeKind.INT: 32,
    DataTypeKind.BIGINT: 64,
    DataTypeKind.FLOAT: 32,
    DataTypeKind.DOUBLE: 64,
}


@dataclass(frozen=True)
class DataType:
    """A type kind plus nullability and optional size parameters."""

    kind: DataTypeKind
    nullable: bool = True
    length: int | None = None
    precision: int | None = None
    scale: int | None = None

    def __str__(self) -> str:
        if self.kind is DataTypeKind.DECIMAL and self.precision is not None:
            if self.scale is not None:
                return f"DECIMAL({self.precision},{self.scale})"
            return f"DECIMAL({self.precision})"
        if self.kind in (DataTypeKind.CHAR, DataTypeKind.VARCHAR) and self.length is not None:
            return f"{self.kind.value}({self.length})"
        return self.kind.value

    def not_null(self) -> "DataType":
        return replace(self, nullable=False)

    def with_nullable(self, nullable: bool) -> "DataType":
        return replace(self, nullable=nullable)

    def to_column(self, name: str, required: bool = False) -> "ColumnDesc":
        from .column import ColumnDesc

        return ColumnDesc(self, name, is_primary=False, is_required=required)

    def to_column_primary_key(self, name: str, required: bool = False) -> "ColumnDesc":
        from .column import ColumnDesc

        return ColumnDesc(self, name, is_primary=True, is_required=required)
