"""Booking domain models: events, event bookings, table bookings and the hold ledger."""

from __future__ import annotations

import secrets

from django.core.exceptions import ValidationError  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from apps.venue.models import BookingType


class CancelledBy(models.TextChoices):
    CUSTOMER = "customer", _("Customer")
    STAFF = "staff", _("Staff")
    SYSTEM = "system", _("System")


class CancellationReason(models.TextChoices):
    """Closed set of reasons a table booking leaves the book."""

    PAYMENT_HOLD_EXPIRED = "payment_hold_expired", _("Deposit not paid in time")
    CARD_CAPTURE_EXPIRED = "card_capture_expired", _("Card details not provided in time")
    EVENT_BOOKING_PAYMENT_HOLD_EXPIRED = (
        "event_booking_payment_hold_expired",
        _("Linked event booking was not paid in time"),
    )
    CUSTOMER_CANCELLED = "customer_cancelled", _("Cancelled by customer")
    STAFF_CANCELLED = "staff_cancelled", _("Cancelled by staff")


class Event(models.Model):
    """A ticketed event with a fixed number of seats."""

    name = models.CharField(max_length=255)
    start_datetime = models.DateTimeField()
    capacity = models.PositiveIntegerField(null=True, blank=True)
    booking_open = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Event")
        verbose_name_plural = _("Events")
        ordering = ["start_datetime"]

    def __str__(self) -> str:
        return self.name


class EventBooking(models.Model):
    """Seats booked for an event."""

    class Status(models.TextChoices):
        PENDING_PAYMENT = "pending_payment", _("Awaiting payment")
        CONFIRMED = "confirmed", _("Confirmed")
        CANCELLED = "cancelled", _("Cancelled")
        EXPIRED = "expired", _("Expired / unpaid")

    TERMINAL_STATUSES = (Status.CANCELLED, Status.EXPIRED)

    event = models.ForeignKey(Event, on_delete=models.PROTECT, related_name="bookings")
    customer = models.ForeignKey(
        "customers.Customer",
        on_delete=models.PROTECT,
        related_name="event_bookings",
    )
    seats = models.PositiveSmallIntegerField(default=1)
    status = models.CharField(max_length=32, choices=Status.choices, default=Status.CONFIRMED)
    hold_expires_at = models.DateTimeField(null=True, blank=True)
    expired_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancelled_by = models.CharField(max_length=20, choices=CancelledBy.choices, blank=True)
    reconcile_run_id = models.UUIDField(null=True, blank=True, editable=False, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Event booking")
        verbose_name_plural = _("Event bookings")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(condition=models.Q(seats__gte=1), name="event_booking_seats_positive"),
        ]
        indexes = [
            models.Index(fields=["status", "hold_expires_at"]),
        ]

    def __str__(self) -> str:
        return f"Event booking #{self.pk} ({self.status})"

    def hold_is_live(self, now=None) -> bool:
        now = now or timezone.now()
        return (
            self.status == self.Status.PENDING_PAYMENT
            and self.hold_expires_at is not None
            and self.hold_expires_at > now
        )


class TableBooking(models.Model):
    """A table reservation for a party at a time slot."""

    class Status(models.TextChoices):
        PENDING_PAYMENT = "pending_payment", _("Awaiting deposit")
        PENDING_CARD_CAPTURE = "pending_card_capture", _("Awaiting card details")
        CONFIRMED = "confirmed", _("Confirmed")
        CANCELLED = "cancelled", _("Cancelled")
        EXPIRED = "expired", _("Expired")
        COMPLETED = "completed", _("Completed")
        NO_SHOW = "no_show", _("No show")

    # Statuses that hold covers against venue capacity
    BLOCKING_STATUSES = (
        Status.PENDING_PAYMENT,
        Status.PENDING_CARD_CAPTURE,
        Status.CONFIRMED,
    )
    TERMINAL_STATUSES = (
        Status.CANCELLED,
        Status.EXPIRED,
        Status.COMPLETED,
        Status.NO_SHOW,
    )

    booking_reference = models.CharField(max_length=16, unique=True, editable=False)
    customer = models.ForeignKey(
        "customers.Customer",
        on_delete=models.PROTECT,
        related_name="table_bookings",
    )
    event_booking = models.ForeignKey(
        EventBooking,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="table_bookings",
    )
    booking_date = models.DateField()
    booking_time = models.TimeField()
    party_size = models.PositiveSmallIntegerField()
    duration_minutes = models.PositiveSmallIntegerField(null=True, blank=True)
    booking_type = models.CharField(max_length=20, choices=BookingType.choices, default=BookingType.REGULAR)
    status = models.CharField(max_length=32, choices=Status.choices, default=Status.CONFIRMED)
    hold_expires_at = models.DateTimeField(null=True, blank=True)
    special_requirements = models.TextField(blank=True)
    cancellation_reason = models.CharField(max_length=64, choices=CancellationReason.choices, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancelled_by = models.CharField(max_length=20, choices=CancelledBy.choices, blank=True)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    reconcile_run_id = models.UUIDField(null=True, blank=True, editable=False, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Table booking")
        verbose_name_plural = _("Table bookings")
        ordering = ["booking_date", "booking_time"]
        constraints = [
            models.CheckConstraint(condition=models.Q(party_size__gte=1), name="table_booking_party_size_positive"),
        ]
        indexes = [
            models.Index(fields=["booking_date", "status"]),
            models.Index(fields=["status", "hold_expires_at"]),
        ]

    def __str__(self) -> str:
        return f"Table booking {self.booking_reference} ({self.status})"

    def clean(self) -> None:
        if self.party_size is not None and self.party_size < 1:
            raise ValidationError(_("Party size must be at least 1."))

    def save(self, *args, **kwargs):  # type: ignore
        if self._state.adding and not self.booking_reference:
            self.booking_reference = self.generate_booking_reference()
        super().save(*args, **kwargs)

    @staticmethod
    def generate_booking_reference() -> str:
        return f"TB-{secrets.token_hex(4).upper()}"

    @property
    def is_terminal(self) -> bool:
        return self.status in self.TERMINAL_STATUSES

    def hold_is_live(self, now=None) -> bool:
        now = now or timezone.now()
        return (
            self.status in (self.Status.PENDING_PAYMENT, self.Status.PENDING_CARD_CAPTURE)
            and self.hold_expires_at is not None
            and self.hold_expires_at > now
        )


class BookingHold(models.Model):
    """
    Hold ledger row: a time-bounded claim owned by exactly one entity.

    At most one active hold exists per (owner, hold type).
    """

    class HoldType(models.TextChoices):
        PAYMENT_HOLD = "payment_hold", _("Payment hold")
        CARD_CAPTURE_HOLD = "card_capture_hold", _("Card capture hold")
        WAITLIST_HOLD = "waitlist_hold", _("Waitlist hold")

    class Status(models.TextChoices):
        ACTIVE = "active", _("Active")
        EXPIRED = "expired", _("Expired")
        RELEASED = "released", _("Released")

    hold_type = models.CharField(max_length=32, choices=HoldType.choices)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.ACTIVE)
    event_booking = models.ForeignKey(
        EventBooking,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="holds",
    )
    table_booking = models.ForeignKey(
        TableBooking,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="holds",
    )
    waitlist_offer = models.ForeignKey(
        "waitlist.WaitlistOffer",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="holds",
    )
    seats_or_covers_held = models.PositiveSmallIntegerField(default=0)
    expires_at = models.DateTimeField()
    expired_at = models.DateTimeField(null=True, blank=True)
    released_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Booking hold")
        verbose_name_plural = _("Booking holds")
        ordering = ["expires_at"]
        constraints = [
            models.CheckConstraint(
                condition=(
                    models.Q(
                        event_booking__isnull=False,
                        table_booking__isnull=True,
                        waitlist_offer__isnull=True,
                    )
                    | models.Q(
                        event_booking__isnull=True,
                        table_booking__isnull=False,
                        waitlist_offer__isnull=True,
                    )
                    | models.Q(
                        event_booking__isnull=True,
                        table_booking__isnull=True,
                        waitlist_offer__isnull=False,
                    )
                ),
                name="booking_hold_single_owner",
            ),
            models.UniqueConstraint(
                fields=["event_booking", "hold_type"],
                condition=models.Q(status="active"),
                name="booking_hold_one_active_per_event_booking",
            ),
            models.UniqueConstraint(
                fields=["table_booking", "hold_type"],
                condition=models.Q(status="active"),
                name="booking_hold_one_active_per_table_booking",
            ),
            models.UniqueConstraint(
                fields=["waitlist_offer", "hold_type"],
                condition=models.Q(status="active"),
                name="booking_hold_one_active_per_waitlist_offer",
            ),
        ]
        indexes = [
            models.Index(fields=["hold_type", "status"]),
        ]

    def __str__(self) -> str:
        return f"{self.hold_type} #{self.pk} ({self.status})"

    @property
    def owner(self):
        return self.event_booking or self.table_booking or self.waitlist_offer
