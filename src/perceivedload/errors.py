from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Optional

from perceivedload.utils.time import format_timestamp


class SeriesError(Exception):
    """Base class for perceived-load failures."""


class SeriesReadError(SeriesError):
    def __init__(self, path: Path, cause: OSError) -> None:
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"cannot read {self.path}: {cause.strerror or cause}")


class SeriesWriteError(SeriesError):
    def __init__(self, path: Path, cause: OSError) -> None:
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"cannot write {self.path}: {cause.strerror or cause}")


class SeriesParseError(SeriesError, ValueError):
    """A malformed database line; reading stops at the first one."""

    def __init__(
        self,
        path: Optional[Path],
        line_number: int,
        line: list[str],
        reason: str,
    ) -> None:
        self.path = Path(path) if path is not None else None
        self.line_number = line_number
        self.line = list(line)
        self.reason = reason
        where = f"{self.path}:{line_number}" if self.path else f"line {line_number}"
        super().__init__(f"{where}: {reason} ({','.join(self.line)!r})")


class InvalidTimestamp(SeriesError, KeyError):
    """No record carries exactly the queried timestamp."""

    def __init__(self, timestamp: datetime) -> None:
        self.timestamp = timestamp
        super().__init__(timestamp)

    def __str__(self) -> str:
        return f"invalid timestamp {format_timestamp(self.timestamp)}"


class EmptyRangeError(SeriesError, ValueError):
    """An average was requested over a window holding no records."""

    def __init__(self, start: datetime, lookback: int) -> None:
        self.start = start
        self.lookback = lookback
        super().__init__(
            f"no records since {format_timestamp(start)} for a {lookback}-day window"
        )
