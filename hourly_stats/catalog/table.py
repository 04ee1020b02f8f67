"""Table, schema and root catalogs."""
from __future__ import annotations

from dataclasses import dataclass, field
from itertools import count
from typing import Iterator

from hourly_stats.core.errors import CatalogError

from .column import ColumnCatalog

DEFAULT_SCHEMA_NAME = "public"


@dataclass
class TableCatalog:
    """Ordered columns of one table plus its declared primary key."""

    id: int
    name: str
    columns: list[ColumnCatalog]
    ordered_pk_ids: list[int] = field(default_factory=list)

    def __iter__(self) -> Iterator[ColumnCatalog]:
        return iter(self.columns)

    def __len__(self) -> int:
        return len(self.columns)

    def get_column_by_name(self, name: str) -> ColumnCatalog | None:
        lowered = name.lower()
        for column in self.columns:
            if column.name == lowered:
                return column
        return None

    def get_column_by_id(self, column_id: int) -> ColumnCatalog | None:
        for column in self.columns:
            if column.id == column_id:
                return column
        return None

    def column_names(self) -> list[str]:
        return [column.name for column in self.columns]

    def primary_key_names(self) -> list[str]:
        names = []
        for column_id in self.ordered_pk_ids:
            column = self.get_column_by_id(column_id)
            if column is None:
                raise CatalogError(f"primary key refers to unknown column id {column_id}")
            names.append(column.name)
        return names


class SchemaCatalog:
    """Named group of tables."""

    def __init__(self, schema_id: int, name: str) -> None:
        self.id = schema_id
        self.name = name
        self._tables: dict[str, TableCatalog] = {}
        self._next_table_id = count()

    def add_table(
        self,
        name: str,
        columns: list[ColumnCatalog],
        ordered_pk_ids: list[int] | None = None,
    ) -> TableCatalog:
        if name in self._tables:
            raise CatalogError(f"table {name!r} already exists in schema {self.name!r}")
        table = TableCatalog(
            id=next(self._next_table_id),
            name=name,
            columns=columns,
            ordered_pk_ids=list(ordered_pk_ids or []),
        )
        self._tables[name] = table
        return table

    def get_table_by_name(self, name: str) -> TableCatalog | None:
        return self._tables.get(name)

    def drop_table(self, name: str) -> None:
        if self._tables.pop(name, None) is None:
            raise CatalogError(f"table {name!r} does not exist in schema {self.name!r}")

    def all_tables(self) -> list[TableCatalog]:
        return list(self._tables.values())


class RootCatalog:
    """Top-level catalog, created with a single default schema."""

    def __init__(self, default_schema: str = DEFAULT_SCHEMA_NAME) -> None:
        self.default_schema_name = default_schema
        self._schemas: dict[str, SchemaCatalog] = {}
        self._next_schema_id = count()
        self.add_schema(default_schema)

    def add_schema(self, name: str) -> SchemaCatalog:
        if name in self._schemas:
            raise CatalogError(f"schema {name!r} already exists")
        schema = SchemaCatalog(next(self._next_schema_id), name)
        self._schemas[name] = schema
        return schema

    def get_schema_by_name(self, name: str) -> SchemaCatalog | None:
        return self._schemas.get(name)

    @property
    def default_schema(self) -> SchemaCatalog:
        return self._schemas[self.default_schema_name]

    def add_table(
        self,
        schema_name: str,
        name: str,
        columns: list[ColumnCatalog],
        ordered_pk_ids: list[int] | None = None,
    ) -> TableCatalog:
        schema = self.get_schema_by_name(schema_name)
        if schema is None:
            raise CatalogError(f"schema {schema_name!r} does not exist")
        return schema.add_table(name, columns, ordered_pk_ids)

    def get_table_by_name(self, name: str, schema_name: str | None = None) -> TableCatalog | None:
        schema = self.get_schema_by_name(schema_name or self.default_schema_name)
        if schema is None:
            return None
        return schema.get_table_by_name(name)

    def drop_table(self, name: str, schema_name: str | None = None) -> None:
        schema = self.get_schema_by_name(schema_name or self.default_schema_name)
        if schema is None:
            raise CatalogError(f"schema {schema_name!r} does not exist")
        schema.drop_table(name)
