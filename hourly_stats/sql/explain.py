"""Human-readable renderings of bound DDL and catalog tables."""
from __future__ import annotations

from typing import Union

from rich.table import Table

from hourly_stats.catalog import TableCatalog

from .binder import BoundCreateTable


def explain(bound: BoundCreateTable) -> str:
    """Render ``bound`` as a ``CreateTable { ... }`` record."""

    columns = ", ".join(column.desc.pretty() for column in bound.columns)
    ordered_ids = ", ".join(str(column_id) for column_id in bound.ordered_pk_ids)
    return (
        "CreateTable { "
        f"schema_id: {bound.schema_id}, "
        f"name: {bound.table_name}, "
        f"columns: [{columns}], "
        f"ordered_ids: [{ordered_ids}] "
        "}"
    )


def column_table(table: Union[TableCatalog, BoundCreateTable]) -> Table:
    """Build a rich table listing the columns of ``table``."""

    name = table.name if isinstance(table, TableCatalog) else table.table_name
    view = Table(title=name, show_lines=False)
    view.add_column("#", justify="right", style="dim")
    view.add_column("column", style="bold")
    view.add_column("type")
    view.add_column("nullable", justify="center")
    view.add_column("primary", justify="center")
    view.add_column("required", justify="center")
    for column in table.columns:
        view.add_row(
            str(column.id),
            column.name,
            str(column.datatype),
            "yes" if column.is_nullable else "no",
            "yes" if column.is_primary else "",
            "yes" if column.is_required else "",
        )
    return view
