from __future__ import annotations

import logging
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional, Sequence, TextIO

from perceivedload.analysis.average import trailing_averages
from perceivedload.domain.series import DEFAULT_GRANULARITY, TimeSeries
from perceivedload.io.csv_store import read_series, write_series

logger = logging.getLogger(__name__)

OPTIMUM_NOTE = "Optimum is 1.0; higher values mean delayed tasks"


def _format_average(value: Optional[float]) -> str:
    return "n/a" if value is None else f"{value:.1f}"


def render_report(results: Sequence[tuple[int, Optional[float]]]) -> str:
    days = ", ".join(str(lookback) for lookback, _ in results)
    avgs = ", ".join(_format_average(avg) for _, avg in results)
    return f"Perceived task load average ({days} days): {avgs}\n{OPTIMUM_NOTE}"


def load_series(db: Path) -> TimeSeries:
    if not db.exists():
        logger.info("No database at %s yet; starting empty", db)
        return TimeSeries()
    return read_series(db)


def handle(
    *,
    db: Path,
    value: Optional[float],
    lookbacks: Sequence[int],
    granularity: timedelta = DEFAULT_GRANULARITY,
    now: Optional[datetime] = None,
    out: Optional[TextIO] = None,
) -> list[tuple[int, Optional[float]]]:
    """Record an optional reading, then print the trailing load averages.

    Without a new reading the latest value is carried forward to ``now`` in
    memory so the windows reach today; the database is left untouched.
    """
    now = now or datetime.now(timezone.utc)
    series = load_series(db)

    if value is not None:
        series.insert(now, value)
        write_series(db, series)
        logger.info("Recorded %s at %s in %s", value, now.isoformat(), db)
    elif series.last is not None:
        series.insert(now, series.last.value)

    results = trailing_averages(series, now, lookbacks, granularity)
    print(render_report(results), file=out or sys.stdout)
    return results
