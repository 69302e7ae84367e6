"""
Availability Service

Answers "which times can a party of N book on a date" for table bookings.

Steps for one date:
1. Resolve opening hours (special hours override the weekly default)
2. Generate slots across the kitchen window
3. Keep slots whose remaining covers fit the party
4. Apply the temporal rules (Sunday-lunch cutover, advance window)

The service is stateless; every call reads the current bookings. The
clock is injectable so that temporal rules can be exercised in tests.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime, timedelta
from typing import Callable, Dict, List, Optional

import structlog
from django.utils import timezone

from apps.bookings.domain.capacity import BookedParty, OverlapCapacityCalculator, VenueCapacityConfig
from apps.bookings.domain.policies import (
    REGULAR,
    SUNDAY_LUNCH,
    PolicyTable,
    is_past_sunday_lunch_cutoff,
    is_within_advance_window,
    local_datetime,
)
from apps.bookings.domain.slots import generate_time_slots
from apps.bookings.services import blocking_bookings_for_date
from apps.venue.services import (
    BUSINESS_HOURS,
    BusinessHoursResolver,
    EffectiveHours,
    load_policy_table,
    slot_capacity_overrides,
)
from shared.domain.value_objects import WallClockTime

logger = structlog.get_logger(__name__)

CLOSED_NOTE = "Restaurant closed on this date"
KITCHEN_CLOSED_NOTE = "Kitchen closed on this date"
SUNDAY_LUNCH_CUTOFF_NOTE = "Sunday lunch bookings must be made before 1pm on Saturday"
MIDNIGHT = "00:00"


@dataclass(frozen=True)
class TimeSlotAvailability:
    time: str
    available_capacity: int
    booking_type: str
    requires_prepayment: bool


@dataclass(frozen=True)
class KitchenHours:
    opens: str
    closes: str
    source: str


@dataclass(frozen=True)
class AvailabilityResult:
    available: bool
    kitchen_hours: KitchenHours
    time_slots: List[TimeSlotAvailability] = field(default_factory=list)
    special_notes: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "available": self.available,
            "time_slots": [asdict(slot) for slot in self.time_slots],
            "kitchen_hours": asdict(self.kitchen_hours),
            "special_notes": self.special_notes,
        }


@dataclass(frozen=True)
class NextAvailableSlot:
    date: date
    time: str
    available_capacity: int

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "time": self.time,
            "available_capacity": self.available_capacity,
        }


def _format_time(value) -> str:
    return str(WallClockTime.parse(value)) if value is not None else MIDNIGHT


class AvailabilityService:
    """
    Table availability queries

    Collaborators are injectable; by default they come from settings and
    the venue tables.
    """

    def __init__(
        self,
        config: VenueCapacityConfig | None = None,
        hours_resolver: BusinessHoursResolver | None = None,
        policies: PolicyTable | None = None,
        clock: Callable[[], datetime] = timezone.now,
    ):
        self.config = config or VenueCapacityConfig.from_settings()
        self.hours_resolver = hours_resolver or BusinessHoursResolver()
        self._policies = policies
        self.clock = clock

    @property
    def policies(self) -> PolicyTable:
        if self._policies is None:
            self._policies = load_policy_table(self.config.default_duration_minutes)
        return self._policies

    # ===== Single date =====

    def check_availability(
        self,
        target_date: date,
        party_size: int,
        booking_type: str | None = None,
        now: datetime | None = None,
    ) -> AvailabilityResult:
        now = now or self.clock()
        booking_type = booking_type or REGULAR
        hours = self.hours_resolver.resolve(target_date)

        if hours is None or hours.is_closed:
            logger.info("availability.closed", date=target_date.isoformat(), reason="venue_closed")
            return AvailabilityResult(
                available=False,
                kitchen_hours=KitchenHours(
                    MIDNIGHT,
                    MIDNIGHT,
                    hours.source if hours is not None else BUSINESS_HOURS,
                ),
                special_notes=(hours.notes if hours is not None else "") or CLOSED_NOTE,
            )

        if not hours.kitchen_is_open:
            logger.info("availability.closed", date=target_date.isoformat(), reason="kitchen_closed")
            return AvailabilityResult(
                available=False,
                kitchen_hours=KitchenHours(_format_time(hours.opens), _format_time(hours.closes), hours.source),
                special_notes=KITCHEN_CLOSED_NOTE,
            )

        kitchen_hours = KitchenHours(
            _format_time(hours.kitchen_opens),
            _format_time(hours.kitchen_closes),
            hours.source,
        )

        if booking_type == SUNDAY_LUNCH and is_past_sunday_lunch_cutoff(
            target_date, now, self.config.sunday_lunch_cutoff_hour
        ):
            return AvailabilityResult(
                available=False,
                kitchen_hours=kitchen_hours,
                special_notes=SUNDAY_LUNCH_CUTOFF_NOTE,
            )

        viable = [
            slot
            for slot in self._slots_with_capacity(target_date, hours, booking_type)
            if slot.available_capacity >= party_size
            and self._slot_is_bookable(target_date, slot.time, booking_type, now)
        ]
        return AvailabilityResult(
            available=bool(viable),
            kitchen_hours=kitchen_hours,
            time_slots=viable,
            special_notes=hours.notes or None,
        )

    def _slots_with_capacity(
        self, target_date: date, hours: EffectiveHours, booking_type: str
    ) -> List[TimeSlotAvailability]:
        calculator = OverlapCapacityCalculator(
            self.config,
            policies=self.policies,
            slot_overrides=slot_capacity_overrides(target_date, booking_type),
        )
        booked = [BookedParty.from_booking(booking) for booking in blocking_bookings_for_date(target_date)]
        policy = self.policies.for_type(booking_type)

        return [
            TimeSlotAvailability(
                time=slot_time,
                available_capacity=calculator.remaining_for_slot(slot_time, booked),
                booking_type=booking_type,
                requires_prepayment=policy.requires_prepayment,
            )
            for slot_time in generate_time_slots(
                hours.kitchen_opens, hours.kitchen_closes, self.config.slot_interval_minutes
            )
        ]

    def _slot_is_bookable(self, target_date: date, slot_time: str, booking_type: str, now: datetime) -> bool:
        slot_start = local_datetime(target_date, WallClockTime.parse(slot_time).to_time())
        return is_within_advance_window(self.policies.for_type(booking_type), slot_start, now)

    # ===== Date ranges =====

    def get_availability_range(
        self,
        start: date,
        end: date,
        booking_type: str | None = None,
        now: datetime | None = None,
    ) -> Dict[str, bool]:
        """Inclusive ``{iso_date: available}`` for a party of one."""
        if end < start:
            raise ValueError("Range end must not be before its start")
        days = (end - start).days + 1
        if days > self.config.next_available_horizon_days:
            raise ValueError(
                f"Range cannot exceed {self.config.next_available_horizon_days} days"
            )

        now = now or self.clock()
        return {
            day.isoformat(): self.check_availability(day, 1, booking_type, now=now).available
            for day in (start + timedelta(days=offset) for offset in range(days))
        }

    def get_next_available_slot(
        self,
        party_size: int,
        booking_type: str | None = None,
        preferred_time=None,
        now: datetime | None = None,
    ) -> NextAvailableSlot | None:
        """
        First date within the horizon that has a viable slot.

        With ``preferred_time`` the slot closest to it is picked; on a tie the
        earlier slot wins.
        """
        now = now or self.clock()
        preferred = WallClockTime.parse(preferred_time) if preferred_time else None
        today = timezone.localtime(now).date()

        for offset in range(self.config.next_available_horizon_days + 1):
            day = today + timedelta(days=offset)
            result = self.check_availability(day, party_size, booking_type, now=now)
            if not result.available:
                continue

            slot = result.time_slots[0]
            if preferred is not None:
                slot = min(
                    result.time_slots,
                    key=lambda candidate: WallClockTime.parse(candidate.time).distance_to(preferred),
                )
            return NextAvailableSlot(date=day, time=slot.time, available_capacity=slot.available_capacity)

        logger.info("availability.none_found", party_size=party_size, booking_type=booking_type)
        return None
