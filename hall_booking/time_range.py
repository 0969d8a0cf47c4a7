from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class TimeWindow:
    start_time: str
    end_time: str

    def to_dict(self) -> dict[str, str]:
        return {"startTime": self.start_time, "endTime": self.end_time}


def overlaps(a_start: str, a_end: str, b_start: str, b_end: str) -> bool:
    """Return True when two wall-clock windows share at least one minute.

    Windows are half-open ranges [start, end), so touching boundaries
    (e.g. 09:00-10:00 and 10:00-11:00) do not overlap. Values are zero-padded
    "HH:MM" strings, which makes lexicographic order equal to time order.
    """
    return a_start < b_end and b_start < a_end


def duration_hours(start: str, end: str) -> float:
    start_hour, start_minute = _split(start)
    end_hour, end_minute = _split(end)
    return (end_hour + end_minute / 60) - (start_hour + start_minute / 60)


def find_conflicts(window: TimeWindow, existing: Iterable[TimeWindow]) -> list[TimeWindow]:
    """Return the existing windows that overlap the requested one, in input order."""
    return [
        other
        for other in existing
        if overlaps(window.start_time, window.end_time, other.start_time, other.end_time)
    ]


def _split(value: str) -> tuple[int, int]:
    hour, minute = value.split(":")
    return int(hour), int(minute)
