"""Column descriptors and their catalog entries."""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Sequence

from hourly_stats.core.errors import CatalogError

from .types import DataType


@dataclass
class ColumnDesc:
    """Name, type and key flags of a single column."""

    datatype: DataType
    name: str
    is_primary: bool = False
    is_required: bool = False

    def set_primary(self, is_primary: bool) -> None:
        self.is_primary = is_primary

    def set_required(self, is_required: bool) -> None:
        self.is_required = is_required

    def set_nullable(self, is_nullable: bool) -> None:
        self.datatype = self.datatype.with_nullable(is_nullable)

    @property
    def is_nullable(self) -> bool:
        return self.datatype.nullable

    def pretty(self) -> str:
        fields = [f"name: {self.name}", f"type: {self.datatype}"]
        if self.is_primary:
            fields.append("primary: true")
        if self.is_nullable:
            fields.append("nullable: true")
        if self.is_required:
            fields.append("required: true")
        return "Column { " + ", ".join(fields) + " }"


@dataclass
class ColumnCatalog:
    """A column descriptor bound to its ordinal position in a table."""

    id: int
    desc: ColumnDesc

    @property
    def name(self) -> str:
        return self.desc.name

    @property
    def datatype(self) -> DataType:
        return self.desc.datatype

    @property
    def is_primary(self) -> bool:
        return self.desc.is_primary

    @property
    def is_nullable(self) -> bool:
        return self.desc.is_nullable

    @property
    def is_required(self) -> bool:
        return self.desc.is_required

    def set_id(self, column_id: int) -> None:
        self.id = column_id

    def set_primary(self, is_primary: bool) -> None:
        self.desc.set_primary(is_primary)

    def set_nullable(self, is_nullable: bool) -> None:
        self.desc.set_nullable(is_nullable)

    def copy(self) -> "ColumnCatalog":
        return ColumnCatalog(self.id, replace(self.desc))


def find_sort_key_id(columns: Sequence[ColumnCatalog]) -> int | None:
    """Return the position of the primary column, if there is one."""

    key: int | None = None
    for position, column in enumerate(columns):
        if column.is_primary:
            if key is not None:
                raise CatalogError("only one primary key is supported as sort key")
            key = position
    return key
