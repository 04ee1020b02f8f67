"""Database models for the stats table."""
from __future__ import annotations

from .action_stat import TABLE_NAME, ActionStat, render_ddl, test_table
from .base import Base

__all__ = ["Base", "ActionStat", "TABLE_NAME", "render_ddl", "test_table"]
