"""Slot generation for a service window."""

from __future__ import annotations

from typing import List

from shared.domain.value_objects import WallClockTime

DEFAULT_SLOT_INTERVAL_MINUTES = 30


def generate_time_slots(opens, closes, interval_minutes: int = DEFAULT_SLOT_INTERVAL_MINUTES) -> List[str]:
    """
    Slot start times ``[opens, opens + interval, ...)`` strictly before ``closes``.

    ``opens >= closes`` yields no slots. The interval does not have to divide
    the window; the last slot is simply the last start before ``closes``.
    """
    if interval_minutes <= 0:
        raise ValueError("Slot interval must be positive")

    current = WallClockTime.parse(opens)
    end = WallClockTime.parse(closes)

    slots: List[str] = []
    while current < end:
        slots.append(str(current))
        current = current.add_minutes(interval_minutes)
    return slots
