from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone

DATE_FORMAT = "%Y-%m-%d"
ONE_DAY = timedelta(days=1)

# Truncation and rounding count whole granularity steps from this instant.
TIME_ORIGIN = datetime(1, 1, 1, tzinfo=timezone.utc)

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_RFC3339_RE = re.compile(
    r"^(?P<base>\d{4}-\d{2}-\d{2}[Tt ]\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<frac>\d+))?"
    r"(?P<tz>[Zz]|[+-]\d{2}:\d{2})$"
)
_TIMECODE_RE = re.compile(r"^\s*(?P<n>\d+)\s*(?P<unit>w|d|h|min|m|s)\s*$", re.IGNORECASE)
_TIMECODE_UNITS = {
    "w": "weeks",
    "d": "days",
    "h": "hours",
    "m": "minutes",
    "min": "minutes",
    "s": "seconds",
}


def parse_timestamp(text: str) -> datetime:
    """Parse an RFC3339 timestamp or a bare ``YYYY-MM-DD`` date.

    Dates are normalized to midnight UTC; every result is a UTC-aware datetime.
    """
    raw = text.strip()
    if _DATE_RE.match(raw):
        day = datetime.strptime(raw, DATE_FORMAT)
        return day.replace(tzinfo=timezone.utc)

    match = _RFC3339_RE.match(raw)
    if match is None:
        raise ValueError(f"invalid timestamp {text!r}")
    tz = match.group("tz")
    if tz in {"Z", "z"}:
        tz = "+00:00"
    frac = match.group("frac")
    # fromisoformat only keeps microseconds
    frac = f".{frac[:6].ljust(6, '0')}" if frac else ""
    base = match.group("base").replace("t", "T").replace(" ", "T")
    try:
        parsed = datetime.fromisoformat(f"{base}{frac}{tz}")
    except ValueError as exc:
        raise ValueError(f"invalid timestamp {text!r}: {exc}") from exc
    return parsed.astimezone(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Render ``value`` as RFC3339 at second precision in UTC."""
    return ensure_utc(value).strftime("%Y-%m-%dT%H:%M:%SZ")


def ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        raise ValueError("time must be timezone-aware")
    return value.astimezone(timezone.utc)


def _check_granularity(granularity: timedelta) -> None:
    if granularity <= timedelta(0):
        raise ValueError(f"granularity must be positive, got {granularity!r}")


def truncate_time(value: datetime, granularity: timedelta) -> datetime:
    """Floor ``value`` to the start of its ``granularity`` interval.

    With a one-day granularity this is midnight UTC of the same day.
    """
    _check_granularity(granularity)
    value = ensure_utc(value)
    return value - (value - TIME_ORIGIN) % granularity


def round_time(value: datetime, granularity: timedelta) -> datetime:
    """Round ``value`` to the nearest ``granularity`` boundary; halfway rounds up."""
    _check_granularity(granularity)
    value = ensure_utc(value)
    remainder = (value - TIME_ORIGIN) % granularity
    if remainder + remainder < granularity:
        return value - remainder
    return value + (granularity - remainder)


def parse_timecode(code: str | timedelta) -> timedelta:
    """Parse duration strings such as ``1d``, ``24h``, ``30m``/``30min``, ``45s`` or ``1w``."""
    if isinstance(code, timedelta):
        return code
    match = _TIMECODE_RE.match(str(code))
    if match is None:
        raise ValueError(f"Unsupported timecode: {code!r}")
    amount = int(match.group("n"))
    unit = _TIMECODE_UNITS[match.group("unit").lower()]
    delta = timedelta(**{unit: amount})
    if delta <= timedelta(0):
        raise ValueError(f"timecode must be positive, got {code!r}")
    return delta
