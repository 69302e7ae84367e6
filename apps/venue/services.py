"""Venue lookups used by the availability engine."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from typing import Dict

from apps.bookings.domain.policies import PolicyTable

from .models import BookingPolicy, BookingTimeSlot, BusinessHours, SpecialHours


BUSINESS_HOURS = "business_hours"
SPECIAL_HOURS = "special_hours"


@dataclass(frozen=True)
class EffectiveHours:
    """Hours that apply on one date after special-hours overrides."""

    source: str
    opens: time | None = None
    closes: time | None = None
    kitchen_opens: time | None = None
    kitchen_closes: time | None = None
    is_closed: bool = False
    is_kitchen_closed: bool = False
    notes: str = ""

    @property
    def kitchen_is_open(self) -> bool:
        return (
            not self.is_closed
            and not self.is_kitchen_closed
            and self.kitchen_opens is not None
            and self.kitchen_closes is not None
        )

    @classmethod
    def from_record(cls, record, source: str) -> "EffectiveHours":
        return cls(
            source=source,
            opens=record.opens,
            closes=record.closes,
            kitchen_opens=record.kitchen_opens,
            kitchen_closes=record.kitchen_closes,
            is_closed=record.is_closed,
            is_kitchen_closed=record.is_kitchen_closed,
            notes=record.notes,
        )


class BusinessHoursResolver:
    """Special hours for the date win; otherwise the weekly default; otherwise nothing."""

    def resolve(self, target_date: date) -> EffectiveHours | None:
        special = SpecialHours.objects.filter(date=target_date).first()
        if special is not None:
            return EffectiveHours.from_record(special, SPECIAL_HOURS)

        weekly = BusinessHours.objects.filter(day_of_week=target_date.weekday()).first()
        if weekly is not None:
            return EffectiveHours.from_record(weekly, BUSINESS_HOURS)
        return None


def slot_capacity_overrides(target_date: date, booking_type: str | None) -> Dict[str, int]:
    """
    Per-slot ``max_covers`` keyed by ``HH:MM`` for the date's weekday.

    A row for the exact booking type beats a row that applies to any type.
    """
    rows = BookingTimeSlot.objects.filter(day_of_week=target_date.weekday(), is_active=True)
    overrides: Dict[str, int] = {}
    typed: Dict[str, int] = {}
    for row in rows:
        key = row.slot_time.strftime("%H:%M")
        if row.booking_type is None or row.booking_type == "":
            overrides.setdefault(key, row.max_covers)
        elif row.booking_type == booking_type:
            typed[key] = row.max_covers
    overrides.update(typed)
    return overrides


def load_policy_table(default_duration_minutes: int | None = None) -> PolicyTable:
    return PolicyTable(default_duration_minutes=default_duration_minutes).with_overrides(
        BookingPolicy.objects.all()
    )
