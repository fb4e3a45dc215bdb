from __future__ import annotations

from datetime import timedelta
from itertools import pairwise
from typing import Sequence

from perceivedload.domain.record import Record
from perceivedload.utils.time import round_time


def missing_records(records: Sequence[Record], granularity: timedelta) -> list[Record]:
    """Linearly interpolated records for every empty period between neighbours.

    ``records`` must already be bucketed to ``granularity`` and sorted. Both
    neighbours are rounded to the granularity before measuring the gap, so
    sub-period drift never produces a synthetic record. The result is unsorted;
    callers merge and sort once.
    """
    missing: list[Record] = []
    for prev, curr in pairwise(records):
        start = round_time(prev.time, granularity)
        end = round_time(curr.time, granularity)
        periods = round((end - start) / granularity)
        if periods < 1:
            continue

        step = (curr.value - prev.value) / periods
        for period in range(periods - 1, 0, -1):
            missing.append(
                Record(
                    time=end - (periods - period) * granularity,
                    value=prev.value + step * period,
                )
            )
    return missing
