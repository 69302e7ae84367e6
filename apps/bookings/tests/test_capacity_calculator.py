"""Tests for slot generation and the overlap capacity calculator."""

import pytest

from apps.bookings.domain.capacity import BookedParty, OverlapCapacityCalculator, VenueCapacityConfig
from apps.bookings.domain.policies import PolicyTable, BookingTypePolicy, REGULAR, SUNDAY_LUNCH
from apps.bookings.domain.slots import generate_time_slots
from shared.domain.value_objects import WallClockTime


def party(start, size, duration=None, booking_type=REGULAR):
    return BookedParty(
        start=WallClockTime.parse(start),
        party_size=size,
        booking_type=booking_type,
        duration_minutes=duration,
    )


def test_slots_stop_strictly_before_close():
    assert generate_time_slots("12:00", "14:00") == ["12:00", "12:30", "13:00", "13:30"]


def test_slots_with_interval_that_does_not_divide_window():
    assert generate_time_slots("12:00", "13:00", 45) == ["12:00", "12:45"]


def test_no_slots_when_window_is_empty():
    assert generate_time_slots("14:00", "14:00") == []
    assert generate_time_slots("15:00", "14:00") == []


def test_non_positive_interval_is_rejected():
    with pytest.raises(ValueError):
        generate_time_slots("12:00", "14:00", 0)


def test_full_party_blocks_overlapping_slots_only():
    calculator = OverlapCapacityCalculator(VenueCapacityConfig(default_max_covers=50))
    booked = [party("13:00", 50)]

    remaining = {
        slot: calculator.remaining_for_slot(slot, booked)
        for slot in generate_time_slots("12:00", "16:00")
    }

    assert remaining["12:30"] == 50
    assert remaining["13:00"] == 0
    assert remaining["14:30"] == 0
    # Booking ends 15:00, exactly when the slot starts
    assert remaining["15:00"] == 50


def test_remaining_is_never_negative():
    calculator = OverlapCapacityCalculator(VenueCapacityConfig(default_max_covers=10))

    assert calculator.remaining_for_slot("18:00", [party("18:00", 8), party("17:30", 6)]) == 0


def test_explicit_duration_beats_policy_default():
    calculator = OverlapCapacityCalculator(VenueCapacityConfig(default_max_covers=50))
    booked = [party("13:00", 20, duration=60)]

    assert calculator.remaining_for_slot("13:30", booked) == 30
    assert calculator.remaining_for_slot("14:00", booked) == 50


def test_duration_defaults_come_from_booking_type_policy():
    policies = PolicyTable({
        REGULAR: BookingTypePolicy(booking_type=REGULAR),
        SUNDAY_LUNCH: BookingTypePolicy(booking_type=SUNDAY_LUNCH, default_duration_minutes=90),
    })
    calculator = OverlapCapacityCalculator(VenueCapacityConfig(default_max_covers=50), policies=policies)
    booked = [party("12:00", 10, booking_type=SUNDAY_LUNCH)]

    assert calculator.remaining_for_slot("13:00", booked) == 40
    assert calculator.remaining_for_slot("13:30", booked) == 50


def test_slot_override_replaces_venue_capacity():
    calculator = OverlapCapacityCalculator(
        VenueCapacityConfig(default_max_covers=50),
        slot_overrides={"18:00": 20},
    )
    booked = [party("18:00", 5)]

    assert calculator.remaining_for_slot("18:00", booked) == 15
    assert calculator.remaining_for_slot("17:00", []) == 50


def test_zero_override_closes_the_slot():
    calculator = OverlapCapacityCalculator(
        VenueCapacityConfig(default_max_covers=50),
        slot_overrides={"13:00": 0},
    )

    assert calculator.max_covers_for("13:00") == 0
    assert calculator.remaining_for_slot("13:00", []) == 0
    assert calculator.remaining_for_slot("13:30", []) == 50


def test_booking_admission_checks_the_whole_interval():
    calculator = OverlapCapacityCalculator(VenueCapacityConfig(default_max_covers=50))
    booked = [party("19:30", 48)]

    # The 18:00 slot alone is empty, but a two hour stay runs into 19:30
    assert calculator.remaining_for_slot("18:00", booked) == 50
    assert calculator.remaining_for_booking("18:00", 120, booked) == 2
    assert calculator.remaining_for_booking("17:00", 150, booked) == 50


def test_config_rejects_nonsense_values():
    with pytest.raises(ValueError):
        VenueCapacityConfig(slot_interval_minutes=0)
    with pytest.raises(ValueError):
        VenueCapacityConfig(default_max_covers=-1)
