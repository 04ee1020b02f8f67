"""Logging for the stats tooling: rich console output, per-day files and a queue listener.

Library modules only call :func:`get_logger`. Scripts call
:func:`init_logging_from_settings` once in ``__main__``; tests call
:func:`init_logging` with files and the queue thread turned off.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import date, datetime
from logging.handlers import QueueHandler, QueueListener
from pathlib import Path
from queue import SimpleQueue
from threading import RLock
from typing import TYPE_CHECKING, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.traceback import install as install_rich_traceback

from .context import ContextFilter, log_context
from .timing import timeit

if TYPE_CHECKING:  # pragma: no cover
    from hourly_stats.core.config import Settings

__all__ = [
    "DailyFileHandler",
    "LoggingConfig",
    "init_logging",
    "init_logging_from_settings",
    "get_console",
    "get_logger",
    "set_level",
    "shutdown_logging",
    "log_context",
    "timeit",
]

_FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(context)s%(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass
class LoggingConfig:
    """Options accepted by :func:`init_logging`."""

    app_name: str = "hourly_stats"
    level: str | int = "INFO"
    log_dir: Optional[Path] = Path("logs")
    console: bool = True
    rich_tracebacks: bool = True
    queue: bool = True

    @classmethod
    def from_settings(cls, settings: "Settings", app_name: str) -> "LoggingConfig":
        return cls(app_name=app_name, level=settings.log_level, log_dir=settings.log_dir)

    @property
    def numeric_level(self) -> int:
        if isinstance(self.level, int):
            return self.level
        return getattr(logging, str(self.level).upper(), logging.INFO)


_lock = RLock()
_active: LoggingConfig | None = None
_listener: QueueListener | None = None
# Shared with the scripts so status spinners and log lines do not interleave.
_console = Console(stderr=True)
_context_filter = ContextFilter()


class DailyFileHandler(logging.FileHandler):
    """Write to ``<directory>/<prefix>-YYYY-MM-DD.log``, switching files at midnight."""

    def __init__(self, directory: Path, prefix: str, *, encoding: str = "utf-8") -> None:
        self.directory = Path(directory)
        self.prefix = prefix
        self.directory.mkdir(parents=True, exist_ok=True)
        self.day: date = datetime.now().date()
        super().__init__(self.path_for(self.day), mode="a", encoding=encoding)

    def path_for(self, day: date) -> Path:
        return self.directory / f"{self.prefix}-{day.isoformat()}.log"

    def _roll_over(self, day: date) -> None:
        self.day = day
        if self.stream:
            self.stream.flush()
            self.stream.close()
        self.baseFilename = os.fspath(self.path_for(day))
        self.stream = self._open()

    def emit(self, record: logging.LogRecord) -> None:
        day = datetime.fromtimestamp(record.created).date()
        if day != self.day:
            self._roll_over(day)
        super().emit(record)


def _console_handler(cfg: LoggingConfig) -> logging.Handler:
    handler = RichHandler(
        console=_console,
        rich_tracebacks=cfg.rich_tracebacks,
        show_path=False,
        markup=False,
        log_time_format=_DATE_FORMAT,
    )
    handler.setFormatter(logging.Formatter("%(context)s%(message)s"))
    return handler


def _file_handler(cfg: LoggingConfig, log_dir: Path) -> logging.Handler:
    handler = DailyFileHandler(log_dir, cfg.app_name)
    handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_DATE_FORMAT))
    return handler


def _build_handlers(cfg: LoggingConfig) -> list[logging.Handler]:
    handlers: list[logging.Handler] = []
    if cfg.console:
        handlers.append(_console_handler(cfg))
    if cfg.log_dir:
        handlers.append(_file_handler(cfg, Path(cfg.log_dir)))
    for handler in handlers:
        handler.setLevel(cfg.numeric_level)
        handler.addFilter(_context_filter)
    return handlers


def init_logging(**options: object) -> None:
    """Install handlers on the root logger.

    Options are the fields of :class:`LoggingConfig`; unknown names are
    ignored. Calling again with the same options does nothing, while
    different options replace the installed handlers.
    """

    cfg = LoggingConfig()
    for key, value in options.items():
        if hasattr(cfg, key):
            setattr(cfg, key, value)

    global _active, _listener
    with _lock:
        if _active == cfg:
            return
        _teardown_locked()

        if cfg.rich_tracebacks:
            install_rich_traceback(show_locals=False, console=_console)

        root = logging.getLogger()
        root.setLevel(logging.NOTSET)
        handlers = _build_handlers(cfg)
        if cfg.queue and handlers:
            queue_handler = QueueHandler(SimpleQueue())
            queue_handler.setLevel(cfg.numeric_level)
            queue_handler.addFilter(_context_filter)
            root.addHandler(queue_handler)
            _listener = QueueListener(queue_handler.queue, *handlers, respect_handler_level=True)
            _listener.start()
        else:
            for handler in handlers:
                root.addHandler(handler)
        _active = cfg


def init_logging_from_settings(app_name: str) -> None:
    """Configure logging from ``LOG_LEVEL`` / ``LOG_DIR`` for a script run."""

    from hourly_stats.core.config import get_settings

    cfg = LoggingConfig.from_settings(get_settings(), app_name)
    init_logging(**vars(cfg))


def _teardown_locked() -> None:
    global _active, _listener
    if _listener is not None:
        _listener.stop()
        for handler in _listener.handlers:
            handler.close()
        _listener = None
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    _active = None


def shutdown_logging() -> None:
    """Flush the queue listener and remove every installed handler."""

    with _lock:
        _teardown_locked()


def get_console() -> Console:
    return _console


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger, installing the default configuration on first use."""

    with _lock:
        if _active is None:
            init_logging()
        return logging.getLogger(name or _active.app_name)


def set_level(level: str | int) -> None:
    """Change the threshold of every installed handler."""

    numeric = LoggingConfig(level=level).numeric_level
    with _lock:
        handlers = list(logging.getLogger().handlers)
        if _listener is not None:
            handlers.extend(_listener.handlers)
        for handler in handlers:
            handler.setLevel(numeric)
        if _active is not None:
            _active.level = numeric
