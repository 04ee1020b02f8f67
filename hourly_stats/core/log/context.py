"""Key/value pairs carried by ``contextvars`` and prefixed to log lines."""
from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from types import MappingProxyType
from typing import Iterator, Mapping

_EMPTY: Mapping[str, object] = MappingProxyType({})

_fields: contextvars.ContextVar[Mapping[str, object]] = contextvars.ContextVar(
    "hourly_stats_log_fields", default=_EMPTY
)


def _merged(values: Mapping[str, object]) -> Mapping[str, object]:
    merged = dict(_fields.get())
    merged.update((key, value) for key, value in values.items() if value is not None)
    return MappingProxyType(merged)


def format_fields(fields: Mapping[str, object]) -> str:
    """Render ``fields`` as ``"k=v k=v "``; empty when there are none."""

    if not fields:
        return ""
    return " ".join(f"{key}={value}" for key, value in fields.items()) + " "


class LogContext:
    """Bind fields such as the table being checked to every later log record.

    ``None`` values are skipped so callers can pass optional names directly.
    """

    def bind(self, **values: object) -> None:
        _fields.set(_merged(values))

    def unbind(self, *keys: str) -> None:
        _fields.set(
            MappingProxyType({k: v for k, v in _fields.get().items() if k not in keys})
        )

    @contextmanager
    def bound(self, **values: object) -> Iterator[None]:
        """Bind ``values`` inside a ``with`` block and restore the previous fields after."""

        token = _fields.set(_merged(values))
        try:
            yield
        finally:
            _fields.reset(token)

    def clear(self) -> None:
        _fields.set(_EMPTY)

    def as_dict(self) -> dict[str, object]:
        return dict(_fields.get())


class ContextFilter(logging.Filter):
    """Expose the bound fields to formatters as ``%(context)s``."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.context = format_fields(_fields.get())
        return True


log_context = LogContext()
