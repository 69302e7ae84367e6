from datetime import timedelta

import pytest
from django.utils import timezone

from apps.analytics.models import AnalyticsEvent, AnalyticsEventType
from apps.bookings.application.reconciler import ExpiryReconciler
from apps.bookings.models import BookingHold, Event
from apps.customers.models import Customer
from apps.waitlist.models import WaitlistEntry, WaitlistOffer


@pytest.fixture
def customer():
    return Customer.objects.create(first_name="Alan", last_name="Turing")


@pytest.fixture
def event():
    return Event.objects.create(name="Comedy night", start_datetime=timezone.now() + timedelta(days=7), capacity=40)


def make_offer(event, customer, *, offer_status, entry_status, expires_at):
    entry = WaitlistEntry.objects.create(event=event, customer=customer, requested_seats=2, status=entry_status)
    offer = WaitlistOffer.objects.create(
        waitlist_entry=entry,
        event=event,
        customer=customer,
        seats_held=2,
        status=offer_status,
        expires_at=expires_at,
    )
    waitlist_hold = BookingHold.objects.create(
        hold_type=BookingHold.HoldType.WAITLIST_HOLD,
        waitlist_offer=offer,
        seats_or_covers_held=2,
        expires_at=expires_at,
    )
    return entry, offer, waitlist_hold


@pytest.mark.django_db
def test_expired_offer_expires_entry_and_hold(event, customer, django_capture_on_commit_callbacks):
    entry, offer, waitlist_hold = make_offer(
        event,
        customer,
        offer_status=WaitlistOffer.Status.SENT,
        entry_status=WaitlistEntry.Status.OFFERED,
        expires_at=timezone.now() - timedelta(minutes=2),
    )

    with django_capture_on_commit_callbacks(execute=True):
        result = ExpiryReconciler().run()

    entry.refresh_from_db()
    offer.refresh_from_db()
    waitlist_hold.refresh_from_db()

    assert offer.status == WaitlistOffer.Status.EXPIRED
    assert entry.status == WaitlistEntry.Status.EXPIRED
    assert waitlist_hold.status == BookingHold.Status.EXPIRED
    assert result.expired_waitlist_offers == 1
    assert result.expired_waitlist_entries == 1
    assert result.expired_waitlist_holds == 1

    analytics = AnalyticsEvent.objects.get()
    assert analytics.event_type == AnalyticsEventType.WAITLIST_OFFER_EXPIRED
    assert analytics.entity_id == offer.pk
    assert analytics.metadata == {"waitlist_entry_id": entry.pk, "event_id": event.pk}


@pytest.mark.django_db
def test_accepted_offer_past_deadline_is_untouched(event, customer):
    entry, offer, waitlist_hold = make_offer(
        event,
        customer,
        offer_status=WaitlistOffer.Status.ACCEPTED,
        entry_status=WaitlistEntry.Status.ACCEPTED,
        expires_at=timezone.now() - timedelta(minutes=2),
    )

    result = ExpiryReconciler().run()

    entry.refresh_from_db()
    offer.refresh_from_db()
    waitlist_hold.refresh_from_db()
    assert offer.status == WaitlistOffer.Status.ACCEPTED
    assert entry.status == WaitlistEntry.Status.ACCEPTED
    assert waitlist_hold.status == BookingHold.Status.ACTIVE
    assert result.expired_waitlist_offers == 0


@pytest.mark.django_db
def test_entry_no_longer_offered_keeps_its_status(event, customer):
    entry, offer, _ = make_offer(
        event,
        customer,
        offer_status=WaitlistOffer.Status.SENT,
        entry_status=WaitlistEntry.Status.CANCELLED,
        expires_at=timezone.now() - timedelta(minutes=2),
    )

    result = ExpiryReconciler().run()

    entry.refresh_from_db()
    offer.refresh_from_db()
    assert offer.status == WaitlistOffer.Status.EXPIRED
    assert entry.status == WaitlistEntry.Status.CANCELLED
    assert result.expired_waitlist_entries == 0


@pytest.mark.django_db
def test_live_offer_is_untouched(event, customer):
    _, offer, _ = make_offer(
        event,
        customer,
        offer_status=WaitlistOffer.Status.SENT,
        entry_status=WaitlistEntry.Status.OFFERED,
        expires_at=timezone.now() + timedelta(hours=1),
    )

    ExpiryReconciler().run()

    offer.refresh_from_db()
    assert offer.status == WaitlistOffer.Status.SENT
