from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache

from classgrid.core.config import WEEKDAY_NAMES

DAY_VALUES = set(WEEKDAY_NAMES)

TIME_PATTERN = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")
SLOT_PATTERN = re.compile(r"^\s*(\d{1,2}:\d{2})\s*-\s*(\d{1,2}:\d{2})\s*$")


def parse_time_to_minutes(value: str) -> int:
    match = TIME_PATTERN.match(value.strip())
    if not match:
        raise ValueError("Time must be in H:MM 24-hour format")
    return int(match.group(1)) * 60 + int(match.group(2))


def format_minutes(value: int) -> str:
    return f"{value // 60}:{value % 60:02d}"


@dataclass(frozen=True, order=True)
class TimeSlot:
    start_minutes: int
    end_minutes: int

    @property
    def label(self) -> str:
        return f"{format_minutes(self.start_minutes)}-{format_minutes(self.end_minutes)}"

    @property
    def duration_minutes(self) -> int:
        return self.end_minutes - self.start_minutes

    @property
    def duration_hours(self) -> float:
        return self.duration_minutes / 60

    def overlaps(self, other: "TimeSlot") -> bool:
        return max(self.start_minutes, other.start_minutes) < min(self.end_minutes, other.end_minutes)

    def cells(self, granularity_minutes: int) -> range:
        """Grid cell indexes covered by this slot.

        Raises ValueError when a boundary is not on the grid, since a
        partially covered cell cannot be keyed without false positives.
        """
        if self.start_minutes % granularity_minutes or self.end_minutes % granularity_minutes:
            raise ValueError(
                f"Time slot {self.label} is not aligned to the {granularity_minutes}-minute grid"
            )
        return range(self.start_minutes // granularity_minutes, self.end_minutes // granularity_minutes)


@lru_cache(maxsize=512)
def parse_time_slot(value: str) -> TimeSlot:
    match = SLOT_PATTERN.match(value)
    if not match:
        raise ValueError("Time slot must look like H:MM-H:MM")
    start = parse_time_to_minutes(match.group(1))
    end = parse_time_to_minutes(match.group(2))
    if end <= start:
        raise ValueError("Time slot end must be after its start")
    return TimeSlot(start, end)


def normalize_time_slot(value: str) -> str:
    return parse_time_slot(value).label


def normalize_day(value: str) -> str:
    day = value.strip().capitalize()
    if day not in DAY_VALUES:
        raise ValueError("Invalid day value")
    return day
