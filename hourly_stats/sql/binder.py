"""Bind parsed ``CREATE TABLE`` statements against a :class:`RootCatalog`."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from hourly_stats.catalog import (
    ColumnCatalog,
    ColumnDesc,
    DataType,
    DataTypeKind,
    RootCatalog,
    TableCatalog,
)
from hourly_stats.core.errors import BindError, BindErrorKind, CatalogError
from hourly_stats.core.log import get_logger

from .ast import ColumnDef, ColumnOptionKind, ConstraintKind, CreateTableStatement, SqlType
from .parser import parse_one

LOGGER = get_logger(__name__)

# Column comment that marks a column as required.
REQUIRED_COMMENT = "required"

_TYPE_KINDS: dict[str, DataTypeKind] = {
    "bool": DataTypeKind.BOOLEAN,
    "boolean": DataTypeKind.BOOLEAN,
    "tinyint": DataTypeKind.SMALLINT,
    "smallint": DataTypeKind.SMALLINT,
    "mediumint": DataTypeKind.INT,
    "int": DataTypeKind.INT,
    "integer": DataTypeKind.INT,
    "bigint": DataTypeKind.BIGINT,
    "float": DataTypeKind.FLOAT,
    "double": DataTypeKind.DOUBLE,
    "double precision": DataTypeKind.DOUBLE,
    "real": DataTypeKind.DOUBLE,
    "decimal": DataTypeKind.DECIMAL,
    "numeric": DataTypeKind.DECIMAL,
    "char": DataTypeKind.CHAR,
    "character": DataTypeKind.CHAR,
    "varchar": DataTypeKind.VARCHAR,
    "text": DataTypeKind.VARCHAR,
    "date": DataTypeKind.DATE,
    "timestamp": DataTypeKind.TIMESTAMP,
    "datetime": DataTypeKind.TIMESTAMP,
}

_UNSUPPORTED_OPTIONS = {
    ColumnOptionKind.DEFAULT,
    ColumnOptionKind.AUTO_INCREMENT,
    ColumnOptionKind.ON_UPDATE,
}


@dataclass
class BoundCreateTable:
    """A validated ``CREATE TABLE`` ready to be registered in the catalog."""

    schema_id: int
    schema_name: str
    table_name: str
    columns: list[ColumnCatalog]
    ordered_pk_ids: list[int] = field(default_factory=list)

    def to_table(self, table_id: int = 0) -> TableCatalog:
        return TableCatalog(
            id=table_id,
            name=self.table_name,
            columns=[column.copy() for column in self.columns],
            ordered_pk_ids=list(self.ordered_pk_ids),
        )


def data_type_from_sql(sql_type: SqlType, nullable: bool = True) -> DataType:
    """Map a written column type to a catalog :class:`DataType`.

    Display widths such as ``int(11)`` carry no type information and are dropped.
    """

    kind = _TYPE_KINDS.get(sql_type.name)
    if kind is None or any(isinstance(arg, str) for arg in sql_type.args):
        raise BindError(BindErrorKind.UNSUPPORTED_TYPE, str(sql_type))
    if kind is DataTypeKind.DECIMAL:
        precision = sql_type.args[0] if sql_type.args else None
        scale = sql_type.args[1] if len(sql_type.args) > 1 else None
        return DataType(kind, nullable=nullable, precision=precision, scale=scale)
    if kind in (DataTypeKind.CHAR, DataTypeKind.VARCHAR):
        length = sql_type.args[0] if sql_type.args else None
        return DataType(kind, nullable=nullable, length=length)
    return DataType(kind, nullable=nullable)


def column_from_def(column_def: ColumnDef) -> ColumnCatalog:
    """Build an (unnumbered) catalog column from its definition."""

    is_nullable = True
    is_primary = False
    is_required = False
    for option in column_def.options:
        if option.kind is ColumnOptionKind.NULL:
            is_nullable = True
        elif option.kind is ColumnOptionKind.NOT_NULL:
            is_nullable = False
        elif option.kind is ColumnOptionKind.PRIMARY_KEY:
            is_primary = True
        elif option.kind is ColumnOptionKind.COMMENT:
            is_required = option.value == REQUIRED_COMMENT
        elif option.kind in _UNSUPPORTED_OPTIONS:
            raise BindError(
                BindErrorKind.NOT_SUPPORTED,
                column_def.name,
                f"column option {option.kind.value}",
            )
    return ColumnCatalog(
        0,
        ColumnDesc(
            data_type_from_sql(column_def.data_type, is_nullable),
            column_def.name.lower(),
            is_primary=is_primary,
            is_required=is_required,
        ),
    )


class Binder:
    """Validates DDL statements against the catalog they will be added to."""

    def __init__(self, catalog: Optional[RootCatalog] = None) -> None:
        self.catalog = catalog or RootCatalog()

    def bind(self, statement: CreateTableStatement, register: bool = True) -> BoundCreateTable:
        bound = self.bind_create_table(statement)
        if register:
            self.catalog.add_table(
                bound.schema_name,
                bound.table_name,
                [column.copy() for column in bound.columns],
                bound.ordered_pk_ids,
            )
            LOGGER.debug(
                "Registered table %s.%s with %d columns",
                bound.schema_name,
                bound.table_name,
                len(bound.columns),
            )
        return bound

    def bind_create_table(self, statement: CreateTableStatement) -> BoundCreateTable:
        schema_name, table_name = self._split_name(statement.name)
        schema = self.catalog.get_schema_by_name(schema_name)
        if schema is None:
            raise BindError(BindErrorKind.INVALID_SCHEMA, schema_name)
        if schema.get_table_by_name(table_name) is not None:
            raise BindError(BindErrorKind.DUPLICATED_TABLE, table_name)

        names: list[str] = []
        for column_def in statement.columns:
            lowered = column_def.name.lower()
            if lowered in names:
                raise BindError(BindErrorKind.DUPLICATED_COLUMN, column_def.name)
            names.append(lowered)

        ordered_pk_ids = self._ordered_pks_from_columns(statement.columns)
        if len(ordered_pk_ids) > 1:
            # multi-column keys must be declared with PRIMARY KEY (c1, c2, ...)
            raise BindError(
                BindErrorKind.NOT_SUPPORTED,
                table_name,
                "more than one column declared PRIMARY KEY",
            )

        pk_names = self._pk_names_from_constraints(statement)
        if ordered_pk_ids and pk_names:
            raise BindError(
                BindErrorKind.NOT_SUPPORTED,
                table_name,
                "primary key declared both on a column and as a table constraint",
            )
        if not ordered_pk_ids:
            for name in pk_names:
                if name not in names:
                    raise BindError(BindErrorKind.INVALID_COLUMN, name)
            ordered_pk_ids = [names.index(name) for name in pk_names]

        for constraint in statement.constraints:
            if constraint.kind is ConstraintKind.PRIMARY_KEY:
                continue
            # UNIQUE, INDEX and FOREIGN KEY constraints are not kept in the catalog
            for name in constraint.columns:
                if name.lower() not in names:
                    raise BindError(BindErrorKind.INVALID_COLUMN, name)

        columns: list[ColumnCatalog] = []
        for position, column_def in enumerate(statement.columns):
            column = column_from_def(column_def)
            column.set_id(position)
            columns.append(column)

        for column_id in ordered_pk_ids:
            columns[column_id].set_primary(True)
            columns[column_id].set_nullable(False)

        return BoundCreateTable(
            schema_id=schema.id,
            schema_name=schema.name,
            table_name=table_name,
            columns=columns,
            ordered_pk_ids=ordered_pk_ids,
        )

    def _split_name(self, parts: list[str]) -> tuple[str, str]:
        lowered = [part.lower() for part in parts]
        if len(lowered) == 1:
            return self.catalog.default_schema_name, lowered[0]
        if len(lowered) == 2:
            return lowered[0], lowered[1]
        raise BindError(BindErrorKind.INVALID_SCHEMA, ".".join(lowered), "too many name parts")

    @staticmethod
    def _ordered_pks_from_columns(columns: list[ColumnDef]) -> list[int]:
        return [
            position
            for position, column_def in enumerate(columns)
            if column_def.has_option(ColumnOptionKind.PRIMARY_KEY)
        ]

    @staticmethod
    def _pk_names_from_constraints(statement: CreateTableStatement) -> list[str]:
        """Primary key column names in ``PRIMARY KEY (c1, c2, ...)`` order."""

        names: list[str] = []
        for constraint in statement.constraints:
            if constraint.kind is ConstraintKind.PRIMARY_KEY:
                names.extend(column.lower() for column in constraint.columns)
        return names


def bind_ddl(sql: str, catalog: Optional[RootCatalog] = None) -> TableCatalog:
    """Parse and bind a single ``CREATE TABLE`` and return its catalog entry."""

    binder = Binder(catalog)
    bound = binder.bind(parse_one(sql))
    table = binder.catalog.get_table_by_name(bound.table_name, bound.schema_name)
    if table is None:
        raise CatalogError(f"table {bound.schema_name}.{bound.table_name} was not registered")
    return table
