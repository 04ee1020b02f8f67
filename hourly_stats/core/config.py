"""Configuration loaded from environment variables (optionally via ``.env``)."""
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env file from project root
env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

_FALSE_FLAGS = {"0", "false", "False", "no", ""}


@dataclass(slots=True)
class DatabaseSettings:
    """Connection details for the analytics database."""

    driver: str
    host: str
    port: int
    user: str
    password: str
    name: str

    @property
    def sqlalchemy_url(self) -> str:
        """Build a SQLAlchemy compatible URL."""

        if self.driver.startswith("sqlite"):
            return f"{self.driver}:///{self.name}"
        if self.password:
            credentials = f"{self.user}:{self.password}"
        else:
            credentials = self.user
        return f"{self.driver}://{credentials}@{self.host}:{self.port}/{self.name}"

    @property
    def masked_url(self) -> str:
        """Return the URL with the password replaced, safe for logs."""

        if self.driver.startswith("sqlite"):
            return self.sqlalchemy_url
        pwd = "***" if self.password else ""
        return f"{self.driver}://{self.user}:{pwd}@{self.host}:{self.port}/{self.name}"


@dataclass(slots=True)
class SchemaSettings:
    """Names used when creating and validating the stats table."""

    table_name: str = "test_table"
    default_schema: str = "public"


@dataclass(slots=True)
class Settings:
    """Top-level application configuration container."""

    database: DatabaseSettings
    schema: SchemaSettings
    sqlalchemy_echo: bool = False
    log_level: str = "INFO"
    log_dir: Optional[Path] = Path("logs")

    @classmethod
    def from_env(cls) -> "Settings":
        """Load configuration values from environment variables."""

        def _get_env(name: str, default: str) -> str:
            return os.getenv(name, default)

        def _get_int(name: str, default: str) -> int:
            raw_value = _get_env(name, default).strip()
            try:
                return int(raw_value)
            except ValueError:
                raise ValueError(f"{name} must be an integer, got {raw_value!r}") from None

        db = DatabaseSettings(
            driver=_get_env("DB_DRIVER", "mysql+pymysql"),
            host=_get_env("DB_HOST", "127.0.0.1"),
            port=_get_int("DB_PORT", "3306"),
            user=_get_env("DB_USER", "stats"),
            password=_get_env("DB_PASSWORD", "stats"),
            name=_get_env("DB_NAME", "stats"),
        )
        schema = SchemaSettings(
            table_name=_get_env("STATS_TABLE", "test_table").strip().lower(),
            default_schema=_get_env("CATALOG_DEFAULT_SCHEMA", "public").strip().lower(),
        )
        if not schema.table_name:
            raise ValueError("STATS_TABLE must not be empty.")
        if not schema.default_schema:
            raise ValueError("CATALOG_DEFAULT_SCHEMA must not be empty.")

        raw_log_dir = _get_env("LOG_DIR", "logs").strip()
        return cls(
            database=db,
            schema=schema,
            sqlalchemy_echo=_get_env("SQLALCHEMY_ECHO", "0") not in _FALSE_FLAGS,
            log_level=_get_env("LOG_LEVEL", "INFO").upper(),
            log_dir=Path(raw_log_dir) if raw_log_dir else None,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached ``Settings`` instance."""

    settings = Settings.from_env()

    # Import locally to avoid circular dependencies during module import time.
    from .log import get_logger

    logger = get_logger(__name__)
    logger.debug(
        "Settings initialised",
        extra={
            "sqlalchemy_echo": settings.sqlalchemy_echo,
            "database": {
                "driver": settings.database.driver,
                "host": settings.database.host,
                "port": settings.database.port,
                "name": settings.database.name,
                "user": settings.database.user,
            },
            "schema": {
                "table_name": settings.schema.table_name,
                "default_schema": settings.schema.default_schema,
            },
        },
    )
    return settings
