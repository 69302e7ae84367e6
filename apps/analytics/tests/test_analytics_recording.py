import pytest

from apps.analytics.handlers import HANDLERS
from apps.analytics.models import AnalyticsEntityType, AnalyticsEvent, AnalyticsEventType
from apps.analytics.services import record_analytics_event
from apps.bookings.domain.events import CardCaptureHoldExpired, WaitlistOfferExpired
from apps.customers.models import Customer
from shared.application.message_bus import message_bus


@pytest.mark.django_db
def test_record_analytics_event_persists_row():
    customer = Customer.objects.create(first_name="Barbara", last_name="Liskov")

    event = record_analytics_event(
        customer_id=customer.pk,
        entity_type=AnalyticsEntityType.TABLE_BOOKING,
        entity_id=42,
        event_type=AnalyticsEventType.PAYMENT_FAILED,
        metadata={"payment_kind": "table_deposit"},
    )

    assert AnalyticsEvent.objects.get() == event
    assert event.customer == customer
    assert event.metadata == {"payment_kind": "table_deposit"}


def test_every_expiry_event_has_a_registered_handler():
    for event_type, handler in HANDLERS.items():
        assert handler in message_bus.handlers_for(event_type)


@pytest.mark.django_db
def test_published_events_become_analytics_rows():
    failures = message_bus.publish_events([
        CardCaptureHoldExpired(table_booking_id=7, customer_id=None),
        WaitlistOfferExpired(waitlist_offer_id=3, waitlist_entry_id=2, event_id=1, customer_id=None),
    ])

    assert failures == 0
    assert set(AnalyticsEvent.objects.values_list("event_type", flat=True)) == {
        AnalyticsEventType.CARD_CAPTURE_EXPIRED,
        AnalyticsEventType.WAITLIST_OFFER_EXPIRED,
    }
    waitlist_row = AnalyticsEvent.objects.get(event_type=AnalyticsEventType.WAITLIST_OFFER_EXPIRED)
    assert waitlist_row.entity_type == AnalyticsEntityType.WAITLIST_OFFER
    assert waitlist_row.entity_id == 3
