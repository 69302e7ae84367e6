"""
Overlap Capacity Calculator

The one place that decides whether an existing booking eats into a slot.
A booking occupies ``[start, start + duration)``; it counts against a window
iff the two half-open ranges overlap (``TimeRange.overlaps_with``). A booking
ending exactly when a slot starts does not count.

The same calculator serves two questions:
- slot availability: remaining covers in a fixed-width slot
- admission: remaining covers for a new booking of a given duration
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Mapping

from django.conf import settings

from shared.domain.value_objects import TimeRange, WallClockTime

from .policies import PolicyTable


@dataclass(frozen=True)
class VenueCapacityConfig:
    """Venue-wide capacity settings, sourced from ``settings.BOOKING_ENGINE``."""

    default_max_covers: int = 50
    slot_interval_minutes: int = 30
    default_duration_minutes: int = 120
    next_available_horizon_days: int = 56
    sunday_lunch_cutoff_hour: int = 13

    def __post_init__(self):
        if self.default_max_covers < 0:
            raise ValueError("Venue capacity cannot be negative")
        if self.slot_interval_minutes <= 0:
            raise ValueError("Slot interval must be positive")
        if self.default_duration_minutes <= 0:
            raise ValueError("Default booking duration must be positive")

    @classmethod
    def from_settings(cls) -> 'VenueCapacityConfig':
        engine = getattr(settings, 'BOOKING_ENGINE', {})
        return cls(
            default_max_covers=int(engine.get('DEFAULT_MAX_COVERS', cls.default_max_covers)),
            slot_interval_minutes=int(engine.get('SLOT_INTERVAL_MINUTES', cls.slot_interval_minutes)),
            default_duration_minutes=int(engine.get('DEFAULT_DURATION_MINUTES', cls.default_duration_minutes)),
            next_available_horizon_days=int(
                engine.get('NEXT_AVAILABLE_HORIZON_DAYS', cls.next_available_horizon_days)
            ),
            sunday_lunch_cutoff_hour=int(engine.get('SUNDAY_LUNCH_CUTOFF_HOUR', cls.sunday_lunch_cutoff_hour)),
        )


@dataclass(frozen=True)
class BookedParty:
    """An existing booking as far as capacity is concerned."""

    start: WallClockTime
    party_size: int
    booking_type: str | None = None
    duration_minutes: int | None = None
    booking_id: int | None = field(default=None, compare=False)

    @classmethod
    def from_booking(cls, booking) -> 'BookedParty':
        return cls(
            start=WallClockTime.parse(booking.booking_time),
            party_size=booking.party_size,
            booking_type=booking.booking_type,
            duration_minutes=booking.duration_minutes,
            booking_id=booking.pk,
        )


class OverlapCapacityCalculator:
    def __init__(self, config: VenueCapacityConfig, policies: PolicyTable | None = None,
                 slot_overrides: Mapping[str, int] | None = None):
        self.config = config
        self.policies = policies or PolicyTable(default_duration_minutes=config.default_duration_minutes)
        self.slot_overrides = dict(slot_overrides or {})

    def occupied_range(self, party: BookedParty) -> TimeRange:
        duration = self.policies.duration_for(party.booking_type, party.duration_minutes)
        return TimeRange.starting_at(party.start, duration)

    def booked_covers(self, window: TimeRange, bookings: Iterable[BookedParty]) -> int:
        return sum(
            party.party_size
            for party in bookings
            if self.occupied_range(party).overlaps_with(window)
        )

    def max_covers_for(self, slot_time) -> int:
        key = str(WallClockTime.parse(slot_time))
        override = self.slot_overrides.get(key)
        return override if override is not None else self.config.default_max_covers

    def remaining_for_slot(self, slot_time, bookings: Iterable[BookedParty]) -> int:
        """Covers left in the slot starting at ``slot_time``, never negative."""
        window = TimeRange.starting_at(slot_time, self.config.slot_interval_minutes)
        booked = self.booked_covers(window, bookings)
        return max(0, self.max_covers_for(slot_time) - booked)

    def remaining_for_booking(self, start_time, duration_minutes: int,
                              bookings: Iterable[BookedParty]) -> int:
        """Covers left across the whole interval a new booking would occupy."""
        window = TimeRange.starting_at(start_time, duration_minutes)
        booked = self.booked_covers(window, bookings)
        return max(0, self.max_covers_for(start_time) - booked)
