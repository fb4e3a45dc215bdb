from __future__ import annotations

import bisect
import logging
from datetime import datetime, timedelta
from operator import attrgetter
from typing import Iterable, Iterator, Optional

from perceivedload.domain.record import Record
from perceivedload.errors import InvalidTimestamp
from perceivedload.transforms.interpolate import missing_records
from perceivedload.transforms.resample import resample_records
from perceivedload.utils.time import ONE_DAY, ensure_utc

logger = logging.getLogger(__name__)

DEFAULT_GRANULARITY = ONE_DAY

_record_time = attrgetter("time")


class SeriesReader:
    """Read-only operations over a sorted run of records.

    Subclasses provide the backing list and the ``[lo, hi)`` bounds they cover.
    """

    granularity: timedelta
    _records: list[Record]

    def _bounds(self) -> tuple[int, int]:
        raise NotImplementedError

    def _search(self, timestamp: datetime) -> int:
        """Index of the leftmost record not before ``timestamp``."""
        lo, hi = self._bounds()
        return bisect.bisect_left(
            self._records, ensure_utc(timestamp), lo, hi, key=_record_time
        )

    def __len__(self) -> int:
        lo, hi = self._bounds()
        return hi - lo

    def __iter__(self) -> Iterator[Record]:
        lo, hi = self._bounds()
        for index in range(lo, hi):
            yield self._records[index]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(records={len(self)}, granularity={self.granularity})"

    @property
    def first(self) -> Optional[Record]:
        lo, hi = self._bounds()
        return self._records[lo] if hi > lo else None

    @property
    def last(self) -> Optional[Record]:
        lo, hi = self._bounds()
        return self._records[hi - 1] if hi > lo else None

    def timestamps(self) -> list[datetime]:
        return [record.time for record in self]

    def values(self) -> list[float]:
        return [record.value for record in self]

    def lookup(self, timestamp: datetime) -> float:
        """Return the value recorded at exactly ``timestamp``.

        Raises InvalidTimestamp when no record has that exact time; nearby
        records do not match.
        """
        index = self._search(timestamp)
        _, hi = self._bounds()
        if index == hi or self._records[index].time != timestamp:
            raise InvalidTimestamp(timestamp)
        return self._records[index].value

    def get(self, timestamp: datetime, default: Optional[float] = None) -> Optional[float]:
        try:
            return self.lookup(timestamp)
        except InvalidTimestamp:
            return default

    def since(self, timestamp: datetime) -> "SeriesView":
        """Borrow the records at or after ``timestamp`` without copying."""
        _, hi = self._bounds()
        return SeriesView(self._records, self._search(timestamp), hi, self.granularity)

    def is_sorted(self) -> bool:
        times = self.timestamps()
        return all(a <= b for a, b in zip(times, times[1:]))


class SeriesView(SeriesReader):
    """A read-only window onto another series' storage.

    The view aliases its parent's list. Mutating the parent while a view is
    alive is unsupported: the view keeps the bounds it was created with.
    """

    def __init__(
        self,
        records: list[Record],
        start: int,
        stop: int,
        granularity: timedelta,
    ) -> None:
        self._records = records
        self._start = start
        self._stop = max(start, stop)
        self.granularity = granularity

    def _bounds(self) -> tuple[int, int]:
        return self._start, self._stop


class TimeSeries(SeriesReader):
    """Sorted (timestamp, value) records plus the granularity they were bucketed to."""

    def __init__(
        self,
        records: Iterable[Record] = (),
        granularity: timedelta = DEFAULT_GRANULARITY,
    ) -> None:
        self.granularity = granularity
        self._records = list(records)
        self.sort()

    def _bounds(self) -> tuple[int, int]:
        return 0, len(self._records)

    def sort(self) -> None:
        self._records.sort(key=_record_time)

    def insert(self, timestamp: datetime, value: float) -> Record:
        """Add a reading at its chronological position.

        Readings sharing a timestamp keep insertion order.
        """
        record = Record(time=timestamp, value=value)
        last = self.last
        if last is None or last.time <= record.time:
            self._records.append(record)
        else:
            logger.warning(
                "Reading at %s is older than the latest record (%s); inserting in order",
                record.time.isoformat(),
                last.time.isoformat(),
            )
            bisect.insort_right(self._records, record, key=_record_time)
        return record

    def extend(self, records: Iterable[Record]) -> None:
        """Add many records and restore order with a single sort."""
        self._records.extend(records)
        self.sort()

    def replace(self, records: Iterable[Record], granularity: Optional[timedelta] = None) -> None:
        """Swap in a whole new record sequence in one step."""
        replacement = sorted(records, key=_record_time)
        if granularity is not None:
            self.granularity = granularity
        self._records = replacement

    def resample(self, granularity: timedelta = DEFAULT_GRANULARITY) -> None:
        before = len(self)
        self.replace(resample_records(self._records, granularity), granularity=granularity)
        logger.debug("Resampled %d records into %d buckets of %s", before, len(self), granularity)

    def interpolate(self) -> None:
        missing = missing_records(self._records, self.granularity)
        if missing:
            self.replace([*self._records, *missing])
        logger.debug("Interpolated %d missing records", len(missing))

    def freeze(self) -> SeriesView:
        """Read-only handle over the current records, safe to share across threads."""
        return SeriesView(self._records, 0, len(self._records), self.granularity)
