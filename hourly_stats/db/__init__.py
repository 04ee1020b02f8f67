"""Database helpers and SQLAlchemy session factories."""

from .ddl import create_stats_table, drop_stats_table, table_exists
from .engine import create_sync_engine, engine_scope, get_sqlalchemy_url
from .session import add_records, get_sessionmaker, load_bucket, session_scope

__all__ = [
    "add_records",
    "create_stats_table",
    "create_sync_engine",
    "drop_stats_table",
    "engine_scope",
    "get_sessionmaker",
    "get_sqlalchemy_url",
    "load_bucket",
    "session_scope",
    "table_exists",
]
