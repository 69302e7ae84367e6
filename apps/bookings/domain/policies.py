"""
Booking Type Policies

One policy table keyed by booking type. Both the availability service and
the overlap calculator read durations from here, so every overlap check
assumes the same length for a booking that carries no explicit duration.

Temporal rules:
- Advance window: a slot must start at least ``min_advance_hours`` from now
  and no more than ``max_advance_days`` calendar days ahead.
- Sunday-lunch cutover: Sunday lunch for a given Sunday closes at 13:00
  venue-local time on the preceding Saturday.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime, time, timedelta
from typing import Iterable, Mapping

from django.utils import timezone


REGULAR = 'regular'
SUNDAY_LUNCH = 'sunday_lunch'

SUNDAY = 6
SUNDAY_LUNCH_CUTOFF_HOUR = 13


@dataclass(frozen=True)
class BookingTypePolicy:
    booking_type: str
    default_duration_minutes: int = 120
    min_advance_hours: int = 0
    max_advance_days: int = 56
    requires_prepayment: bool = False
    modification_allowed: bool = True


DEFAULT_POLICIES: Mapping[str, BookingTypePolicy] = {
    REGULAR: BookingTypePolicy(booking_type=REGULAR),
    SUNDAY_LUNCH: BookingTypePolicy(
        booking_type=SUNDAY_LUNCH,
        requires_prepayment=True,
    ),
}


class PolicyTable:
    """
    Resolves the policy for a booking type

    Unknown or missing booking types get the regular policy.
    """

    def __init__(self, policies: Mapping[str, BookingTypePolicy] | None = None,
                 default_duration_minutes: int | None = None):
        policies = dict(policies or DEFAULT_POLICIES)
        if default_duration_minutes is not None:
            policies = {
                key: replace(policy, default_duration_minutes=default_duration_minutes)
                for key, policy in policies.items()
            }
        self._policies = policies

    def for_type(self, booking_type: str | None) -> BookingTypePolicy:
        if booking_type and booking_type in self._policies:
            return self._policies[booking_type]
        return self._policies.get(REGULAR, BookingTypePolicy(booking_type=REGULAR))

    def duration_for(self, booking_type: str | None, explicit_minutes: int | None = None) -> int:
        if explicit_minutes:
            return explicit_minutes
        return self.for_type(booking_type).default_duration_minutes

    def with_overrides(self, rows: Iterable) -> 'PolicyTable':
        """
        Layer stored ``BookingPolicy`` rows over this table.

        Null columns keep the built-in value.
        """
        policies = dict(self._policies)
        for row in rows:
            base = policies.get(row.booking_type) or BookingTypePolicy(booking_type=row.booking_type)
            changes = {'modification_allowed': row.modification_allowed}
            for name in ('min_advance_hours', 'max_advance_days',
                         'default_duration_minutes', 'requires_prepayment'):
                value = getattr(row, name)
                if value is not None:
                    changes[name] = value
            policies[row.booking_type] = replace(base, **changes)
        return PolicyTable(policies)


def local_datetime(day: date, moment: time) -> datetime:
    """Aware datetime for a venue-local wall-clock time."""
    return timezone.make_aware(datetime.combine(day, moment), timezone.get_current_timezone())


def sunday_lunch_cutoff(target_date: date, cutoff_hour: int = SUNDAY_LUNCH_CUTOFF_HOUR) -> datetime:
    saturday = target_date - timedelta(days=1)
    return local_datetime(saturday, time(cutoff_hour, 0))


def is_past_sunday_lunch_cutoff(target_date: date, now: datetime,
                                cutoff_hour: int = SUNDAY_LUNCH_CUTOFF_HOUR) -> bool:
    """Only Sunday dates have a cutover; other dates are never past it."""
    if target_date.weekday() != SUNDAY:
        return False
    return now > sunday_lunch_cutoff(target_date, cutoff_hour)


def is_within_advance_window(policy: BookingTypePolicy, slot_start: datetime, now: datetime) -> bool:
    if slot_start < now + timedelta(hours=policy.min_advance_hours):
        return False
    today = timezone.localtime(now).date()
    days_ahead = (timezone.localtime(slot_start).date() - today).days
    return days_ahead <= policy.max_advance_days
