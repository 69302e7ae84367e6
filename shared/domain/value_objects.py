"""
Common Value Objects

Value objects used across multiple domains:
- WallClockTime: A local HH:MM time of day
- TimeRange: A half-open range of minutes within one service day
"""

from dataclasses import dataclass
from datetime import time

from shared.domain.base import ValueObject

MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True, order=True)
class WallClockTime(ValueObject):
    """
    Wall-clock time value object

    Stored as minutes since midnight so that slot arithmetic stays in
    integers. Values past midnight are allowed while adding durations
    (a 23:00 booking for 120 minutes ends at minute 1500).
    """
    minutes: int

    def __post_init__(self):
        if self.minutes < 0:
            raise ValueError("Time of day cannot be negative")

    @classmethod
    def parse(cls, value) -> 'WallClockTime':
        """
        Parse ``HH:MM`` / ``HH:MM:SS`` strings or ``datetime.time`` values.
        """
        if isinstance(value, WallClockTime):
            return value
        if isinstance(value, time):
            return cls(value.hour * 60 + value.minute)
        if not isinstance(value, str):
            raise TypeError(f"Cannot parse time from {type(value).__name__}")

        parts = value.strip().split(':')
        if len(parts) not in (2, 3):
            raise ValueError(f"Invalid time format: {value!r} (expected HH:MM)")
        try:
            hours, minutes = int(parts[0]), int(parts[1])
        except ValueError:
            raise ValueError(f"Invalid time format: {value!r} (expected HH:MM)") from None
        if not (0 <= hours < 24 and 0 <= minutes < 60):
            raise ValueError(f"Time out of range: {value!r}")
        return cls(hours * 60 + minutes)

    def add_minutes(self, minutes: int) -> 'WallClockTime':
        return WallClockTime(self.minutes + minutes)

    def distance_to(self, other: 'WallClockTime') -> int:
        """Absolute distance in minutes"""
        return abs(self.minutes - other.minutes)

    def to_time(self) -> time:
        minutes = self.minutes % MINUTES_PER_DAY
        return time(minutes // 60, minutes % 60)

    def __str__(self):
        minutes = self.minutes % MINUTES_PER_DAY
        return f"{minutes // 60:02d}:{minutes % 60:02d}"

    def __repr__(self):
        return f"WallClockTime('{self}')"


@dataclass(frozen=True)
class TimeRange(ValueObject):
    """
    Time range value object

    Represents [start, end): start is inclusive, end is exclusive.
    Used for slot windows and for the interval a booking occupies.
    """
    start: WallClockTime
    end: WallClockTime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start ({self.start}) must be before end ({self.end})")

    @classmethod
    def starting_at(cls, start, duration_minutes: int) -> 'TimeRange':
        start = WallClockTime.parse(start)
        return cls(start, start.add_minutes(duration_minutes))

    def overlaps_with(self, other: 'TimeRange') -> bool:
        """
        Check if this range overlaps with another

        Note: end is exclusive, so adjacent ranges don't overlap.

        Examples:
            - [13:00, 15:00) overlaps with [14:30, 15:00) -> True
            - [13:00, 15:00) overlaps with [15:00, 15:30) -> False (adjacent)
        """
        if not isinstance(other, TimeRange):
            raise TypeError("Can only check overlap with another TimeRange")

        # Overlap formula: start1 < end2 AND end1 > start2
        return (self.start < other.end and
                self.end > other.start)

    def contains(self, moment: WallClockTime) -> bool:
        return self.start <= moment < self.end

    def __len__(self) -> int:
        """Length in minutes"""
        return self.end.minutes - self.start.minutes

    def __str__(self):
        return f"{self.start}-{self.end}"

    def __repr__(self):
        return f"TimeRange({self.start}, {self.end})"
