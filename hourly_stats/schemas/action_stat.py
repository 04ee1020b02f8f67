"""Pydantic record mirroring one row of the stats table."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

INT32_MIN, INT32_MAX = -(2**31), 2**31 - 1
INT64_MIN, INT64_MAX = -(2**63), 2**63 - 1

Int32 = Annotated[int, Field(ge=INT32_MIN, le=INT32_MAX)]
Int64 = Annotated[int, Field(ge=INT64_MIN, le=INT64_MAX)]


class ActionStatRecord(BaseModel):
    """Aggregates for one user and action within an hour of a day.

    Only the column types are enforced: ``dt`` is not checked to be a real
    ``YYYYMMDD`` date and ``hour`` is not checked to lie in 0-23.
    """

    model_config = ConfigDict(from_attributes=True)

    id: Int64
    dt: Int32
    hour: Int32
    user_id: Int64
    action_id: Int64
    sales: float | None = None
    volume: float | None = None
    pieces: Int64 | None = None
    add_time: datetime
    update_time: datetime

    @property
    def bucket(self) -> tuple[int, int, int, int]:
        """Informal row key: ``(dt, hour, user_id, action_id)``."""

        return (self.dt, self.hour, self.user_id, self.action_id)

    def to_row(self) -> dict[str, object]:
        """Column/value mapping in table column order."""

        return self.model_dump()
