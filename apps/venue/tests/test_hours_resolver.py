from datetime import date, time

import pytest

from apps.bookings.domain.policies import REGULAR, SUNDAY_LUNCH
from apps.venue.models import BookingPolicy, BookingTimeSlot, BookingType, BusinessHours, DayOfWeek, SpecialHours
from apps.venue.services import (
    BUSINESS_HOURS,
    SPECIAL_HOURS,
    BusinessHoursResolver,
    load_policy_table,
    slot_capacity_overrides,
)

TUESDAY = date(2026, 6, 16)


@pytest.fixture
def tuesday_hours():
    return BusinessHours.objects.create(
        day_of_week=DayOfWeek.TUESDAY,
        opens=time(11, 0),
        closes=time(23, 0),
        kitchen_opens=time(12, 0),
        kitchen_closes=time(21, 0),
    )


@pytest.mark.django_db
def test_weekly_hours_apply_without_special_hours(tuesday_hours):
    hours = BusinessHoursResolver().resolve(TUESDAY)

    assert hours.source == BUSINESS_HOURS
    assert hours.kitchen_opens == time(12, 0)
    assert hours.kitchen_is_open


@pytest.mark.django_db
def test_special_hours_replace_weekly_hours(tuesday_hours):
    SpecialHours.objects.create(
        date=TUESDAY,
        opens=time(11, 0),
        closes=time(18, 0),
        kitchen_opens=time(12, 0),
        kitchen_closes=time(16, 0),
        notes="Early close for a private function",
    )

    hours = BusinessHoursResolver().resolve(TUESDAY)

    assert hours.source == SPECIAL_HOURS
    assert hours.kitchen_closes == time(16, 0)
    assert hours.notes == "Early close for a private function"


@pytest.mark.django_db
def test_missing_hours_resolve_to_nothing():
    assert BusinessHoursResolver().resolve(TUESDAY) is None


@pytest.mark.django_db
def test_kitchen_closed_flag_or_missing_window_closes_kitchen(tuesday_hours):
    tuesday_hours.is_kitchen_closed = True
    tuesday_hours.save()
    assert not BusinessHoursResolver().resolve(TUESDAY).kitchen_is_open

    tuesday_hours.is_kitchen_closed = False
    tuesday_hours.kitchen_opens = None
    tuesday_hours.kitchen_closes = None
    tuesday_hours.save()
    assert not BusinessHoursResolver().resolve(TUESDAY).kitchen_is_open


@pytest.mark.django_db
def test_typed_slot_override_beats_untyped_one():
    BookingTimeSlot.objects.create(day_of_week=DayOfWeek.TUESDAY, slot_time=time(18, 0), max_covers=30)
    BookingTimeSlot.objects.create(
        day_of_week=DayOfWeek.TUESDAY,
        slot_time=time(18, 0),
        booking_type=BookingType.REGULAR,
        max_covers=20,
    )
    BookingTimeSlot.objects.create(
        day_of_week=DayOfWeek.TUESDAY,
        slot_time=time(19, 0),
        max_covers=10,
        is_active=False,
    )

    assert slot_capacity_overrides(TUESDAY, REGULAR) == {"18:00": 20}
    assert slot_capacity_overrides(TUESDAY, SUNDAY_LUNCH) == {"18:00": 30}


@pytest.mark.django_db
def test_policy_rows_layer_over_defaults():
    BookingPolicy.objects.create(
        booking_type=BookingType.REGULAR,
        min_advance_hours=4,
        modification_allowed=False,
    )

    table = load_policy_table()

    assert table.for_type(REGULAR).min_advance_hours == 4
    assert not table.for_type(REGULAR).modification_allowed
    assert table.for_type(SUNDAY_LUNCH).modification_allowed
