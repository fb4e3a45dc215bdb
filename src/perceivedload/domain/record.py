from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from perceivedload.utils.time import ensure_utc


@dataclass(frozen=True)
class Record:
    """A single timestamped reading."""

    time: datetime
    value: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "time", ensure_utc(self.time))
        object.__setattr__(self, "value", float(self.value))
