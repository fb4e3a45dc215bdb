from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from datetime import datetime, timedelta
from statistics import mean
from typing import Optional, Sequence

from perceivedload.domain.series import DEFAULT_GRANULARITY, SeriesReader, TimeSeries
from perceivedload.errors import EmptyRangeError
from perceivedload.utils.time import ONE_DAY, truncate_time

logger = logging.getLogger(__name__)

_RAISE = object()


def window_start(as_of: datetime, lookback_days: int) -> datetime:
    """First instant of a ``lookback_days`` window that ends on ``as_of``'s day.

    A one-day window starts at ``as_of`` itself.
    """
    if lookback_days < 1:
        raise ValueError(f"lookback must be at least one day, got {lookback_days}")
    return as_of - timedelta(days=lookback_days - 1)


def average(series: SeriesReader, as_of: datetime, lookback_days: int) -> float:
    """Mean of every record from the start of the window onwards.

    Raises EmptyRangeError when the window holds no records, so an empty
    window is never confused with an average of zero.
    """
    start = window_start(as_of, lookback_days)
    window = series.since(start)
    if not len(window):
        raise EmptyRangeError(start, lookback_days)
    return mean(window.values())


def averages(
    series: SeriesReader,
    as_of: datetime,
    *lookback_days: int,
    default=_RAISE,
    max_workers: Optional[int] = None,
) -> list[Optional[float]]:
    """Evaluate ``average`` for each lookback in parallel and join the results.

    Results follow the order of ``lookback_days``. With ``default`` set, empty
    windows yield it instead of raising; otherwise the first failing window
    (in argument order) is raised once every task has finished.
    """
    if not lookback_days:
        return []
    view = series.freeze() if isinstance(series, TimeSeries) else series
    logger.debug("Averaging %d records over windows %s", len(view), list(lookback_days))

    def _task(lookback: int) -> Optional[float]:
        try:
            return average(view, as_of, lookback)
        except EmptyRangeError:
            if default is _RAISE:
                raise
            logger.debug("No records in the %d-day window", lookback)
            return default

    workers = max_workers or len(lookback_days)
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="average") as executor:
        futures = [executor.submit(_task, lookback) for lookback in lookback_days]
        wait(futures)
    return [future.result() for future in futures]


def prepare(series: TimeSeries, granularity: timedelta = DEFAULT_GRANULARITY) -> SeriesReader:
    """Resample and gap-fill ``series`` in place, then hand back a read-only view.

    Everything here finishes before any averaging task sees the records.
    """
    series.resample(granularity)
    series.interpolate()
    return series.freeze()


def trailing_averages(
    series: TimeSeries,
    now: datetime,
    lookbacks: Sequence[int],
    granularity: timedelta = DEFAULT_GRANULARITY,
) -> list[tuple[int, Optional[float]]]:
    """Per-lookback averages of the days ending today.

    Empty windows come back as ``None``.
    """
    view = prepare(series, granularity)
    today = truncate_time(now, ONE_DAY)
    results = averages(view, today, *lookbacks, default=None)
    return list(zip(lookbacks, results))
