"""Pydantic schemas for stats rows."""

from .action_stat import INT32_MAX, INT32_MIN, INT64_MAX, INT64_MIN, ActionStatRecord

__all__ = ["ActionStatRecord", "INT32_MAX", "INT32_MIN", "INT64_MAX", "INT64_MIN"]
