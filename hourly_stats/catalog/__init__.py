"""In-memory catalog of schemas, tables and columns."""

from .column import ColumnCatalog, ColumnDesc, find_sort_key_id
from .table import DEFAULT_SCHEMA_NAME, RootCatalog, SchemaCatalog, TableCatalog
from .types import DataType, DataTypeKind

__all__ = [
    "DEFAULT_SCHEMA_NAME",
    "ColumnCatalog",
    "ColumnDesc",
    "DataType",
    "DataTypeKind",
    "RootCatalog",
    "SchemaCatalog",
    "TableCatalog",
    "find_sort_key_id",
]
