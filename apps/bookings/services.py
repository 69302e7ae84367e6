"""Domain services for table booking workflows."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING

import structlog
from django.conf import settings  # type: ignore
from django.db import transaction  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore
from django.utils import timezone  # type: ignore

from apps.finances.models import Payment
from shared.domain.value_objects import WallClockTime

from .domain.capacity import BookedParty, OverlapCapacityCalculator, VenueCapacityConfig
from .domain.policies import PolicyTable, local_datetime
from .exceptions import BookingStateError, ModificationNotAllowedError, SlotUnavailableError

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from .models import TableBooking

logger = structlog.get_logger(__name__)

DEFAULT_HOLD_WINDOW_MINUTES = 15
DEFAULT_DEPOSIT_PER_COVER = Decimal("10.00")


def _engine_setting(name: str, default):
    return getattr(settings, "BOOKING_ENGINE", {}).get(name, default)


def _lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


def blocking_bookings_for_date(booking_date: date, *, exclude_booking_id=None, lock: bool = False):
    """Table bookings on the date that hold covers against capacity."""

    from .models import TableBooking  # Local import to prevent circular dependency

    queryset = TableBooking.objects.filter(
        booking_date=booking_date,
        status__in=TableBooking.BLOCKING_STATUSES,
    )
    if exclude_booking_id is not None:
        queryset = queryset.exclude(pk=exclude_booking_id)
    if lock:
        queryset = _lock_queryset_if_possible(queryset)
    return queryset


def ensure_slot_has_capacity(
    booking_date: date,
    booking_time,
    party_size: int,
    *,
    booking_type: str | None = None,
    duration_minutes: int | None = None,
    exclude_booking_id=None,
    config: VenueCapacityConfig | None = None,
    policies: PolicyTable | None = None,
) -> int:
    """
    Ensure a party fits for the whole interval it would occupy.

    Returns the covers remaining before the party is seated.
    """

    from apps.venue.services import load_policy_table, slot_capacity_overrides

    config = config or VenueCapacityConfig.from_settings()
    policies = policies or load_policy_table(config.default_duration_minutes)
    calculator = OverlapCapacityCalculator(
        config,
        policies=policies,
        slot_overrides=slot_capacity_overrides(booking_date, booking_type),
    )

    booked = [
        BookedParty.from_booking(booking)
        for booking in blocking_bookings_for_date(
            booking_date,
            exclude_booking_id=exclude_booking_id,
            lock=True,
        )
    ]
    duration = policies.duration_for(booking_type, duration_minutes)
    remaining = calculator.remaining_for_booking(booking_time, duration, booked)

    if remaining < party_size:
        raise SlotUnavailableError("No availability for the requested time.")
    return remaining


@transaction.atomic
def create_table_booking(
    *,
    customer,
    booking_date: date,
    booking_time,
    party_size: int,
    booking_type: str,
    duration_minutes: int | None = None,
    special_requirements: str = "",
    now: datetime | None = None,
) -> "TableBooking":
    """
    Create a table booking after re-checking the slot under lock.

    Booking types that require prepayment start in ``pending_payment`` with a
    payment hold and a pending deposit; the rest are confirmed straight away.
    """

    from .application.availability import AvailabilityService
    from .models import BookingHold, TableBooking

    now = now or timezone.now()
    service = AvailabilityService()
    requested = str(WallClockTime.parse(booking_time))

    availability = service.check_availability(booking_date, party_size, booking_type, now=now)
    if requested not in {slot.time for slot in availability.time_slots}:
        raise SlotUnavailableError(availability.special_notes or "No availability for the requested time.")

    ensure_slot_has_capacity(
        booking_date,
        requested,
        party_size,
        booking_type=booking_type,
        duration_minutes=duration_minutes,
        config=service.config,
        policies=service.policies,
    )

    policy = service.policies.for_type(booking_type)
    booking = TableBooking(
        customer=customer,
        booking_date=booking_date,
        booking_time=WallClockTime.parse(requested).to_time(),
        party_size=party_size,
        duration_minutes=duration_minutes,
        booking_type=booking_type,
        special_requirements=special_requirements,
    )

    if policy.requires_prepayment:
        hold_window = int(_engine_setting("HOLD_WINDOW_MINUTES", DEFAULT_HOLD_WINDOW_MINUTES))
        booking.status = TableBooking.Status.PENDING_PAYMENT
        booking.hold_expires_at = now + timedelta(minutes=hold_window)
        booking.save()

        BookingHold.objects.create(
            hold_type=BookingHold.HoldType.PAYMENT_HOLD,
            table_booking=booking,
            seats_or_covers_held=party_size,
            expires_at=booking.hold_expires_at,
        )
        deposit = Decimal(str(_engine_setting("DEPOSIT_PER_COVER", DEFAULT_DEPOSIT_PER_COVER)))
        Payment.objects.create(
            table_booking=booking,
            charge_type=Payment.ChargeType.TABLE_DEPOSIT,
            amount=deposit * party_size,
        )
    else:
        booking.status = TableBooking.Status.CONFIRMED
        booking.confirmed_at = now
        booking.save()

    logger.info(
        "table_booking.created",
        booking_reference=booking.booking_reference,
        status=booking.status,
        party_size=party_size,
    )
    return booking


@dataclass(frozen=True)
class ModificationDecision:
    allowed: bool
    reason: str | None = None


def ensure_modification_allowed(
    booking: "TableBooking",
    new_date: date | None = None,
    new_time=None,
    new_party_size: int | None = None,
    *,
    now: datetime | None = None,
) -> None:
    """Raise ``ModificationNotAllowedError`` when the booking cannot be changed as requested."""

    from apps.venue.services import load_policy_table

    if booking.is_terminal:
        raise ModificationNotAllowedError("Booking can no longer be modified.")

    config = VenueCapacityConfig.from_settings()
    policies = load_policy_table(config.default_duration_minutes)
    policy = policies.for_type(booking.booking_type)
    if not policy.modification_allowed:
        raise ModificationNotAllowedError("Modifications not allowed for this booking type")

    now = now or timezone.now()
    starts_at = local_datetime(booking.booking_date, booking.booking_time)
    if starts_at - now < timedelta(hours=policy.min_advance_hours):
        raise ModificationNotAllowedError(
            f"Modifications must be made at least {policy.min_advance_hours} hours in advance"
        )

    if new_date is None and new_time is None and new_party_size is None:
        return

    try:
        ensure_slot_has_capacity(
            new_date or booking.booking_date,
            new_time or booking.booking_time,
            new_party_size or booking.party_size,
            booking_type=booking.booking_type,
            duration_minutes=booking.duration_minutes,
            exclude_booking_id=booking.pk,
            config=config,
            policies=policies,
        )
    except SlotUnavailableError as exc:
        raise ModificationNotAllowedError("No availability for the requested changes") from exc


def check_modification_allowed(
    booking: "TableBooking",
    new_date: date | None = None,
    new_time=None,
    new_party_size: int | None = None,
    *,
    now: datetime | None = None,
) -> ModificationDecision:
    try:
        ensure_modification_allowed(booking, new_date, new_time, new_party_size, now=now)
    except ModificationNotAllowedError as exc:
        return ModificationDecision(allowed=False, reason=str(exc))
    return ModificationDecision(allowed=True)


@transaction.atomic
def cancel_table_booking(
    booking: "TableBooking",
    *,
    cancelled_by: str | None = None,
    reason: str | None = None,
    now: datetime | None = None,
) -> "TableBooking":
    """Cancel a live booking and release its active holds."""

    from .models import BookingHold, CancellationReason, CancelledBy, TableBooking

    now = now or timezone.now()
    updated = TableBooking.objects.filter(
        pk=booking.pk,
        status__in=TableBooking.BLOCKING_STATUSES,
    ).update(
        status=TableBooking.Status.CANCELLED,
        cancellation_reason=reason or CancellationReason.STAFF_CANCELLED,
        cancelled_by=cancelled_by or CancelledBy.STAFF,
        cancelled_at=now,
        updated_at=now,
    )
    if not updated:
        raise BookingStateError("Only pending or confirmed bookings can be cancelled.")

    BookingHold.objects.filter(
        table_booking=booking,
        status=BookingHold.Status.ACTIVE,
    ).update(status=BookingHold.Status.RELEASED, released_at=now, updated_at=now)

    booking.refresh_from_db()
    logger.info(
        "table_booking.cancelled",
        booking_reference=booking.booking_reference,
        reason=booking.cancellation_reason,
    )
    return booking


@transaction.atomic
def confirm_table_booking_payment(
    booking: "TableBooking",
    *,
    transaction_id: str = "",
    now: datetime | None = None,
) -> "TableBooking":
    """Confirm a deposit while its payment hold is still live."""

    from .models import BookingHold, TableBooking

    now = now or timezone.now()
    updated = TableBooking.objects.filter(
        pk=booking.pk,
        status=TableBooking.Status.PENDING_PAYMENT,
        hold_expires_at__gt=now,
    ).update(
        status=TableBooking.Status.CONFIRMED,
        confirmed_at=now,
        updated_at=now,
    )
    if not updated:
        raise BookingStateError("Booking is not awaiting payment or its payment hold has expired.")

    BookingHold.objects.filter(
        table_booking=booking,
        hold_type=BookingHold.HoldType.PAYMENT_HOLD,
        status=BookingHold.Status.ACTIVE,
    ).update(status=BookingHold.Status.RELEASED, released_at=now, updated_at=now)

    for payment in Payment.objects.filter(
        table_booking=booking,
        charge_type=Payment.ChargeType.TABLE_DEPOSIT,
        status=Payment.Status.PENDING,
    ):
        payment.mark_succeeded(transaction_id or None)

    booking.refresh_from_db()
    logger.info("table_booking.payment_confirmed", booking_reference=booking.booking_reference)
    return booking
