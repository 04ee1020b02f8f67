"""Timing helper that logs how long a schema operation took."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from time import perf_counter
from typing import Iterator, Optional


@dataclass
class _Timer:
    label: str
    logger: logging.Logger
    level: int
    details: dict[str, object] = field(default_factory=dict)
    start: float = field(default_factory=perf_counter)

    def note(self, **details: object) -> None:
        """Attach details that are appended to the final log line."""

        self.details.update(details)

    @property
    def elapsed(self) -> float:
        return perf_counter() - self.start

    def _suffix(self) -> str:
        if not self.details:
            return ""
        return " (" + ", ".join(f"{k}={v}" for k, v in self.details.items()) + ")"

    def finish(self, success: bool = True) -> None:
        if success:
            self.logger.log(
                self.level, f"{self.label} completed in {self.elapsed:.3f}s{self._suffix()}"
            )
        else:
            self.logger.error(f"{self.label} failed after {self.elapsed:.3f}s{self._suffix()}")


@contextmanager
def timeit(
    label: str,
    *,
    logger: Optional[logging.Logger] = None,
    level: int = logging.INFO,
) -> Iterator[_Timer]:
    """Log the duration of the wrapped block, or its failure.

    Args:
        label: Description of the operation being timed
        logger: Logger instance to use (defaults to "hourly_stats.timer")
        level: Logging level for the success message
    """
    log = logger or logging.getLogger("hourly_stats.timer")
    timer = _Timer(label=label, logger=log, level=level)
    try:
        yield timer
    except Exception:
        timer.finish(success=False)
        raise
    else:
        timer.finish(success=True)
