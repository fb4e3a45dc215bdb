from __future__ import annotations

from collections import defaultdict
from datetime import datetime, timedelta
from statistics import mean
from typing import Iterable

from perceivedload.domain.record import Record
from perceivedload.utils.time import truncate_time


def bucket_values(
    records: Iterable[Record], granularity: timedelta
) -> dict[datetime, list[float]]:
    """Group record values by the start of their ``granularity`` interval."""
    buckets: dict[datetime, list[float]] = defaultdict(list)
    for record in records:
        buckets[truncate_time(record.time, granularity)].append(record.value)
    return dict(buckets)


def resample_records(records: Iterable[Record], granularity: timedelta) -> list[Record]:
    """Collapse ``records`` into one mean-valued record per bucket, oldest first.

    Every bucket holds at least one value, so the mean is always defined and
    the output never has more records than the input.
    """
    buckets = bucket_values(records, granularity)
    return [
        Record(time=bucket, value=mean(values))
        for bucket, values in sorted(buckets.items())
    ]
