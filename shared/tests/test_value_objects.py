from datetime import time

import pytest

from shared.domain.value_objects import TimeRange, WallClockTime


def test_parse_accepts_strings_and_times():
    assert WallClockTime.parse("13:30") == WallClockTime(810)
    assert WallClockTime.parse("13:30:00") == WallClockTime(810)
    assert WallClockTime.parse(time(13, 30)) == WallClockTime(810)
    assert str(WallClockTime.parse("09:05")) == "09:05"


@pytest.mark.parametrize("value", ["25:00", "12:60", "noon", "12"])
def test_parse_rejects_malformed_times(value):
    with pytest.raises(ValueError):
        WallClockTime.parse(value)


def test_adding_past_midnight_keeps_ordering_but_prints_wrapped():
    late = WallClockTime.parse("23:00").add_minutes(120)

    assert late > WallClockTime.parse("23:30")
    assert str(late) == "01:00"
    assert late.to_time() == time(1, 0)


def test_adjacent_ranges_do_not_overlap():
    booking = TimeRange.starting_at("13:00", 120)

    assert not booking.overlaps_with(TimeRange.starting_at("15:00", 30))
    assert not booking.overlaps_with(TimeRange.starting_at("12:30", 30))
    assert booking.overlaps_with(TimeRange.starting_at("14:30", 30))
    assert booking.overlaps_with(TimeRange.starting_at("12:45", 30))


def test_range_requires_start_before_end():
    with pytest.raises(ValueError):
        TimeRange(WallClockTime.parse("14:00"), WallClockTime.parse("14:00"))


def test_range_length_and_contains():
    window = TimeRange.starting_at("18:00", 90)

    assert len(window) == 90
    assert window.contains(WallClockTime.parse("18:00"))
    assert not window.contains(WallClockTime.parse("19:30"))
