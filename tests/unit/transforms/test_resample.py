from datetime import timedelta

import pytest

from perceivedload.transforms.resample import bucket_values, resample_records
from perceivedload.utils.time import truncate_time
from tests.unit.helpers import make_series, utc

DAY = timedelta(days=1)


def test_readings_on_distinct_days_keep_their_values():
    # 10:00 on consecutive days truncates to two separate midnight buckets.
    series = make_series([(utc(1, 10), 10.0), (utc(2, 10), 20.0)])
    series.resample(DAY)
    assert series.timestamps() == [utc(1), utc(2)]
    assert series.lookup(utc(1)) == 10.0
    assert series.lookup(utc(2)) == 20.0


def test_readings_in_same_bucket_are_averaged():
    series = make_series([(utc(1, 10), 10.0), (utc(1, 22), 20.0), (utc(2, 1), 3.0)])
    series.resample(DAY)
    assert series.lookup(utc(1)) == 15.0
    assert series.lookup(utc(2)) == 3.0


def test_bucket_count_matches_distinct_truncated_times():
    points = [(utc(d, h), float(d * h)) for d in (1, 2, 2, 5, 9) for h in (0, 7, 23)]
    series = make_series(points)
    expected = {truncate_time(t, DAY) for t, _ in points}
    series.resample(DAY)
    assert len(series) == len(expected)
    assert set(series.timestamps()) == expected
    assert series.is_sorted()


def test_resample_updates_granularity():
    series = make_series([(utc(1, 1, 10), 1.0), (utc(1, 1, 50), 3.0), (utc(1, 2, 5), 5.0)])
    series.resample(timedelta(hours=1))
    assert series.granularity == timedelta(hours=1)
    assert series.values() == [2.0, 5.0]


def test_resample_never_grows_and_handles_empty():
    assert resample_records([], DAY) == []
    series = make_series([(utc(1), 1.0)])
    series.resample(DAY)
    assert len(series) == 1


def test_duplicate_timestamps_collapse():
    records = list(make_series([(utc(1), 1.0), (utc(1), 2.0), (utc(1), 6.0)]))
    assert bucket_values(records, DAY) == {utc(1): [1.0, 2.0, 6.0]}
    assert [r.value for r in resample_records(records, DAY)] == [3.0]


def test_resample_rejects_nonpositive_granularity():
    with pytest.raises(ValueError):
        make_series([(utc(1), 1.0)]).resample(timedelta(0))
