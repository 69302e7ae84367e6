"""Tests for the expiry reconciler's booking clusters."""

from datetime import time, timedelta
from decimal import Decimal

import pytest
from django.db import DatabaseError
from django.utils import timezone

from apps.analytics.models import AnalyticsEvent, AnalyticsEventType
from apps.bookings.application.reconciler import ExpiryReconciler
from apps.bookings.domain.events import TableBookingPaymentHoldExpired
from apps.bookings.models import BookingHold, CancellationReason, CancelledBy, Event, EventBooking, TableBooking
from apps.customers.models import Customer
from apps.finances.models import CardCapture, Payment
from shared.application.message_bus import message_bus


@pytest.fixture
def customer():
    return Customer.objects.create(first_name="Grace", last_name="Hopper", mobile_number="+447700900456")


@pytest.fixture
def event():
    return Event.objects.create(name="Quiz night", start_datetime=timezone.now() + timedelta(days=3), capacity=60)


@pytest.fixture
def overdue():
    return timezone.now() - timedelta(minutes=1)


def table_booking(customer, status, hold_expires_at=None, **extra):
    return TableBooking.objects.create(
        customer=customer,
        booking_date=timezone.localdate() + timedelta(days=3),
        booking_time=time(19, 0),
        party_size=4,
        status=status,
        hold_expires_at=hold_expires_at,
        **extra,
    )


def hold(hold_type, expires_at, **owner):
    return BookingHold.objects.create(hold_type=hold_type, expires_at=expires_at, seats_or_covers_held=4, **owner)


@pytest.mark.django_db
def test_event_booking_expiry_cascades_to_linked_table_booking(customer, event, overdue):
    event_booking = EventBooking.objects.create(
        event=event,
        customer=customer,
        seats=4,
        status=EventBooking.Status.PENDING_PAYMENT,
        hold_expires_at=overdue,
    )
    event_hold = hold(BookingHold.HoldType.PAYMENT_HOLD, overdue, event_booking=event_booking)
    linked = table_booking(
        customer,
        TableBooking.Status.PENDING_PAYMENT,
        hold_expires_at=timezone.now() + timedelta(minutes=10),
        event_booking=event_booking,
    )
    linked_hold = hold(BookingHold.HoldType.PAYMENT_HOLD, linked.hold_expires_at, table_booking=linked)
    linked_deposit = Payment.objects.create(
        table_booking=linked,
        charge_type=Payment.ChargeType.TABLE_DEPOSIT,
        amount=Decimal("40.00"),
    )
    completed = table_booking(customer, TableBooking.Status.COMPLETED, event_booking=event_booking)

    result = ExpiryReconciler().run()

    event_booking.refresh_from_db()
    event_hold.refresh_from_db()
    linked.refresh_from_db()
    linked_hold.refresh_from_db()
    completed.refresh_from_db()
    linked_deposit.refresh_from_db()

    assert event_booking.status == EventBooking.Status.EXPIRED
    assert event_booking.expired_at is not None
    assert event_hold.status == BookingHold.Status.EXPIRED
    assert linked.status == TableBooking.Status.CANCELLED
    assert linked.cancellation_reason == CancellationReason.EVENT_BOOKING_PAYMENT_HOLD_EXPIRED
    assert linked.cancelled_by == CancelledBy.SYSTEM
    assert linked_hold.status == BookingHold.Status.EXPIRED
    assert completed.status == TableBooking.Status.COMPLETED

    assert result.expired_pending_bookings == 1
    assert result.expired_payment_holds == 1
    assert result.cancelled_event_table_bookings == 1
    assert result.expired_table_payment_holds == 1
    assert result.failed_table_deposit_payments == 1
    assert linked_deposit.status == Payment.Status.FAILED
    assert linked_deposit.failed_at is not None

    later = ExpiryReconciler().run(now=timezone.now() + timedelta(hours=1))
    linked_deposit.refresh_from_db()
    assert later.total_transitions == 0
    assert linked_deposit.status == Payment.Status.FAILED


@pytest.mark.django_db
def test_table_deposit_expiry_fails_payment_and_records_analytics(
    customer, overdue, django_capture_on_commit_callbacks
):
    booking = table_booking(customer, TableBooking.Status.PENDING_PAYMENT, hold_expires_at=overdue)
    payment_hold = hold(BookingHold.HoldType.PAYMENT_HOLD, overdue, table_booking=booking)
    deposit = Payment.objects.create(
        table_booking=booking,
        charge_type=Payment.ChargeType.TABLE_DEPOSIT,
        amount=Decimal("40.00"),
    )

    with django_capture_on_commit_callbacks(execute=True):
        result = ExpiryReconciler().run()

    booking.refresh_from_db()
    payment_hold.refresh_from_db()
    deposit.refresh_from_db()

    assert booking.status == TableBooking.Status.CANCELLED
    assert booking.cancellation_reason == CancellationReason.PAYMENT_HOLD_EXPIRED
    assert payment_hold.status == BookingHold.Status.EXPIRED
    assert deposit.status == Payment.Status.FAILED
    assert result.cancelled_table_bookings == 1
    assert result.expired_table_payment_holds == 1
    assert result.failed_table_deposit_payments == 1

    analytics = AnalyticsEvent.objects.get()
    assert analytics.event_type == AnalyticsEventType.PAYMENT_FAILED
    assert analytics.entity_id == booking.pk
    assert analytics.customer_id == customer.pk
    assert analytics.metadata == {"payment_kind": "table_deposit", "reason": "hold_expired"}


@pytest.mark.django_db
def test_second_run_transitions_nothing(customer, overdue, django_capture_on_commit_callbacks):
    booking = table_booking(customer, TableBooking.Status.PENDING_PAYMENT, hold_expires_at=overdue)
    hold(BookingHold.HoldType.PAYMENT_HOLD, overdue, table_booking=booking)

    with django_capture_on_commit_callbacks(execute=True):
        first = ExpiryReconciler().run()
    with django_capture_on_commit_callbacks(execute=True):
        second = ExpiryReconciler().run()

    assert first.total_transitions > 0
    assert second.total_transitions == 0
    assert AnalyticsEvent.objects.count() == 1


@pytest.mark.django_db
def test_analytics_failure_does_not_undo_the_expiry(customer, overdue, django_capture_on_commit_callbacks):
    booking = table_booking(customer, TableBooking.Status.PENDING_PAYMENT, hold_expires_at=overdue)

    def broken_recorder(event):
        raise RuntimeError("analytics store unavailable")

    message_bus.register_event_handler(TableBookingPaymentHoldExpired, broken_recorder)
    try:
        with django_capture_on_commit_callbacks(execute=True):
            result = ExpiryReconciler().run()
    finally:
        message_bus.unregister_event_handler(TableBookingPaymentHoldExpired, broken_recorder)

    booking.refresh_from_db()
    assert booking.status == TableBooking.Status.CANCELLED
    assert result.cancelled_table_bookings == 1
    # The registered recorder still ran
    assert AnalyticsEvent.objects.filter(event_type=AnalyticsEventType.PAYMENT_FAILED).count() == 1


@pytest.mark.django_db
def test_card_capture_expiry(customer, overdue, django_capture_on_commit_callbacks):
    booking = table_booking(customer, TableBooking.Status.PENDING_CARD_CAPTURE, hold_expires_at=overdue)
    capture_hold = hold(BookingHold.HoldType.CARD_CAPTURE_HOLD, overdue, table_booking=booking)
    capture = CardCapture.objects.create(table_booking=booking, expires_at=overdue)

    with django_capture_on_commit_callbacks(execute=True):
        result = ExpiryReconciler().run()

    booking.refresh_from_db()
    capture_hold.refresh_from_db()
    capture.refresh_from_db()

    assert booking.status == TableBooking.Status.CANCELLED
    assert booking.cancellation_reason == CancellationReason.CARD_CAPTURE_EXPIRED
    assert capture_hold.status == BookingHold.Status.EXPIRED
    assert capture.status == CardCapture.Status.EXPIRED
    assert result.expired_card_captures == 1
    assert result.expired_card_capture_holds == 1
    assert result.expired_card_capture_records == 1
    assert AnalyticsEvent.objects.get().event_type == AnalyticsEventType.CARD_CAPTURE_EXPIRED


@pytest.mark.django_db
def test_holds_that_are_not_due_are_left_alone(customer):
    later = timezone.now() + timedelta(minutes=5)
    pending = table_booking(customer, TableBooking.Status.PENDING_PAYMENT, hold_expires_at=later)
    confirmed = table_booking(
        customer,
        TableBooking.Status.CONFIRMED,
        hold_expires_at=timezone.now() - timedelta(hours=1),
    )

    result = ExpiryReconciler().run()

    pending.refresh_from_db()
    confirmed.refresh_from_db()
    assert pending.status == TableBooking.Status.PENDING_PAYMENT
    assert confirmed.status == TableBooking.Status.CONFIRMED
    assert result.total_transitions == 0


@pytest.mark.django_db
def test_candidates_are_processed_in_batches(customer, overdue):
    bookings = [
        table_booking(customer, TableBooking.Status.PENDING_PAYMENT, hold_expires_at=overdue)
        for _ in range(5)
    ]

    result = ExpiryReconciler(batch_size=2).run()

    assert result.cancelled_table_bookings == 5
    assert TableBooking.objects.filter(
        pk__in=[booking.pk for booking in bookings],
        status=TableBooking.Status.CANCELLED,
    ).count() == 5


@pytest.mark.django_db
def test_database_error_aborts_the_pass_but_keeps_committed_batches(customer, event, overdue, monkeypatch):
    event_booking = EventBooking.objects.create(
        event=event,
        customer=customer,
        status=EventBooking.Status.PENDING_PAYMENT,
        hold_expires_at=overdue,
    )
    card_booking = table_booking(customer, TableBooking.Status.PENDING_CARD_CAPTURE, hold_expires_at=overdue)

    def fail(self, now, result):
        raise DatabaseError("connection lost")

    monkeypatch.setattr(ExpiryReconciler, "_expire_table_booking_payment_holds", fail)

    with pytest.raises(DatabaseError):
        ExpiryReconciler().run()

    event_booking.refresh_from_db()
    card_booking.refresh_from_db()
    assert event_booking.status == EventBooking.Status.EXPIRED
    assert card_booking.status == TableBooking.Status.PENDING_CARD_CAPTURE


def test_payload_uses_camel_case_counts():
    from apps.bookings.application.reconciler import ReconcileResult

    processed_at = timezone.now()
    payload = ReconcileResult(expired_pending_bookings=2).as_payload(processed_at)

    assert payload["success"] is True
    assert payload["expiredPendingBookings"] == 2
    assert payload["cancelledEventTableBookings"] == 0
    assert payload["expiredCardCaptureRecords"] == 0
    assert payload["processedAt"] == processed_at.isoformat()
    assert len(payload) == 14
