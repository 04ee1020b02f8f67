"""Build catalog entries from a live database through SQLAlchemy reflection."""
from __future__ import annotations

from sqlalchemy import inspect
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.types import TypeEngine
import sqlalchemy.types as sqltypes

from hourly_stats.catalog import ColumnCatalog, ColumnDesc, DataType, DataTypeKind, TableCatalog
from hourly_stats.core.errors import SchemaMismatchError
from hourly_stats.core.log import get_logger

LOGGER = get_logger(__name__)

# Single-precision floats have at most 24 bits of mantissa.
_FLOAT_PRECISION_BITS = 24


def kind_for_type(sa_type: TypeEngine) -> DataTypeKind | None:
    """Return the catalog kind for a reflected SQLAlchemy type, if it has one."""

    if isinstance(sa_type, sqltypes.Boolean):
        return DataTypeKind.BOOLEAN
    if isinstance(sa_type, sqltypes.BigInteger):
        return DataTypeKind.BIGINT
    if isinstance(sa_type, sqltypes.SmallInteger):
        return DataTypeKind.SMALLINT
    if isinstance(sa_type, sqltypes.Integer):
        if getattr(sa_type, "__visit_name__", "") == "TINYINT":
            return DataTypeKind.SMALLINT
        return DataTypeKind.INT
    if isinstance(sa_type, (sqltypes.Double, sqltypes.REAL)):
        return DataTypeKind.DOUBLE
    if isinstance(sa_type, sqltypes.Float):
        precision = getattr(sa_type, "precision", None)
        if precision is not None and precision > _FLOAT_PRECISION_BITS:
            return DataTypeKind.DOUBLE
        return DataTypeKind.FLOAT
    if isinstance(sa_type, sqltypes.Numeric):
        return DataTypeKind.DECIMAL
    if isinstance(sa_type, sqltypes.DateTime):
        return DataTypeKind.TIMESTAMP
    if isinstance(sa_type, sqltypes.Date):
        return DataTypeKind.DATE
    if isinstance(sa_type, sqltypes.CHAR):
        return DataTypeKind.CHAR
    if isinstance(sa_type, sqltypes.String):
        return DataTypeKind.VARCHAR
    return None


def data_type_for(sa_type: TypeEngine, nullable: bool) -> DataType:
    kind = kind_for_type(sa_type)
    if kind is None:
        raise SchemaMismatchError(f"Unsupported column type {sa_type!r}")
    if kind in (DataTypeKind.CHAR, DataTypeKind.VARCHAR):
        return DataType(kind, nullable=nullable, length=getattr(sa_type, "length", None))
    if kind is DataTypeKind.DECIMAL:
        return DataType(
            kind,
            nullable=nullable,
            precision=getattr(sa_type, "precision", None),
            scale=getattr(sa_type, "scale", None),
        )
    return DataType(kind, nullable=nullable)


def reflect_table(
    bind: Engine | Connection,
    name: str,
    schema: str | None = None,
) -> TableCatalog | None:
    """Reflect ``name`` into a :class:`TableCatalog`; ``None`` when it is absent."""

    inspector = inspect(bind)
    if not inspector.has_table(name, schema=schema):
        LOGGER.debug("Table %s not found during reflection", name)
        return None

    columns: list[ColumnCatalog] = []
    for position, info in enumerate(inspector.get_columns(name, schema=schema)):
        column_name = str(info["name"]).lower()
        try:
            datatype = data_type_for(info["type"], bool(info.get("nullable", True)))
        except SchemaMismatchError as exc:
            raise SchemaMismatchError(f"Column {column_name!r} of {name!r}: {exc}") from exc
        columns.append(ColumnCatalog(position, ColumnDesc(datatype, column_name)))

    pk_names = [
        str(column).lower()
        for column in inspector.get_pk_constraint(name, schema=schema).get("constrained_columns") or []
    ]
    ordered_pk_ids: list[int] = []
    for pk_name in pk_names:
        for column in columns:
            if column.name == pk_name:
                column.set_primary(True)
                ordered_pk_ids.append(column.id)

    LOGGER.debug("Reflected %d columns from %s", len(columns), name)
    return TableCatalog(id=0, name=name.lower(), columns=columns, ordered_pk_ids=ordered_pk_ids)
