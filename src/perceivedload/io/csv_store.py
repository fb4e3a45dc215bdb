from __future__ import annotations

import csv
import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Iterable, Iterator, Optional, TextIO

from perceivedload.domain.record import Record
from perceivedload.domain.series import SeriesReader, TimeSeries
from perceivedload.errors import SeriesParseError, SeriesReadError, SeriesWriteError
from perceivedload.utils.time import format_timestamp, parse_timestamp

logger = logging.getLogger(__name__)

FIELDS_PER_RECORD = 2


def parse_row(row: list[str], line_number: int, path: Optional[Path] = None) -> Record:
    if len(row) != FIELDS_PER_RECORD:
        raise SeriesParseError(
            path, line_number, row,
            f"expected {FIELDS_PER_RECORD} fields, got {len(row)}",
        )
    raw_time, raw_value = row
    try:
        timestamp = parse_timestamp(raw_time)
    except ValueError as exc:
        raise SeriesParseError(path, line_number, row, str(exc)) from exc
    try:
        value = float(raw_value)
    except ValueError as exc:
        raise SeriesParseError(
            path, line_number, row, f"invalid value {raw_value!r}"
        ) from exc
    return Record(time=timestamp, value=value)


def _decoded_lines(
    lines: Iterable[bytes], path: Optional[Path] = None, encoding: str = "utf-8"
) -> Iterator[str]:
    """Decode one physical line at a time so a bad byte only costs its own line."""
    for line_number, raw in enumerate(lines, start=1):
        try:
            text = raw.decode(encoding)
        except UnicodeDecodeError as exc:
            text = raw.decode(encoding, errors="replace").rstrip("\r\n")
            raise SeriesParseError(
                path, line_number, [text], f"not valid {encoding}: {exc.reason}"
            ) from exc
        yield text


def iter_records(lines: Iterable[str], path: Optional[Path] = None) -> Iterator[Record]:
    """Yield records from CSV text, stopping at the first malformed line.

    Blank lines are skipped. There is no header row.
    """
    reader = csv.reader(lines)
    while True:
        try:
            row = next(reader)
        except StopIteration:
            return
        except csv.Error as exc:
            raise SeriesParseError(path, reader.line_num, [], str(exc)) from exc
        if not row:
            continue
        yield parse_row(row, reader.line_num, path)


def read_into(series: TimeSeries, lines: Iterable[str], path: Optional[Path] = None) -> TimeSeries:
    """Populate ``series`` from CSV ``lines`` and sort once.

    On a malformed line the records parsed before it are still added to
    ``series`` before the error propagates.
    """
    parsed: list[Record] = []
    try:
        for record in iter_records(lines, path):
            parsed.append(record)
    finally:
        series.extend(parsed)
    return series


def read_series(path: Path, series: Optional[TimeSeries] = None) -> TimeSeries:
    path = Path(path)
    series = series if series is not None else TimeSeries()
    try:
        with path.open("rb") as fh:
            read_into(series, _decoded_lines(fh, path), path)
    except OSError as exc:
        raise SeriesReadError(path, exc) from exc
    logger.debug("Read %d records from %s", len(series), path)
    return series


def format_value(value: float) -> str:
    text = repr(float(value))
    return text[:-2] if text.endswith(".0") else text


def write_records(fh: TextIO, records: Iterable[Record]) -> int:
    writer = csv.writer(fh, lineterminator="\n")
    count = 0
    for record in records:
        writer.writerow([format_timestamp(record.time), format_value(record.value)])
        count += 1
    return count


@contextmanager
def atomic_text_file(dest: Path) -> Iterator[IO[str]]:
    """Write through a sibling temp file and move it over ``dest`` on success."""
    dest.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{dest.name}.", suffix=".tmp", dir=dest.parent)
    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as fh:
            yield fh
        os.replace(tmp, dest)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


def write_series(path: Path, series: SeriesReader) -> int:
    """Persist ``series`` in its current order, one RFC3339 line per record."""
    path = Path(path)
    try:
        with atomic_text_file(path) as fh:
            count = write_records(fh, series)
    except OSError as exc:
        raise SeriesWriteError(path, exc) from exc
    logger.debug("Wrote %d records to %s", count, path)
    return count
