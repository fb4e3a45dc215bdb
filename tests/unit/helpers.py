from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Sequence

from perceivedload.domain.record import Record
from perceivedload.domain.series import TimeSeries


def utc(day: int, hour: int = 0, minute: int = 0, *, month: int = 1, year: int = 2018) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


def make_daily_series(values: Sequence[float], start: datetime) -> TimeSeries:
    return TimeSeries(
        Record(time=start + timedelta(days=offset), value=value)
        for offset, value in enumerate(values)
    )


def make_series(points: Sequence[tuple[datetime, float]]) -> TimeSeries:
    return TimeSeries(Record(time=t, value=v) for t, v in points)
