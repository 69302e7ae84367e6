"""Message-bus handlers that turn booking expiry events into analytics rows."""

from __future__ import annotations

from apps.bookings.domain.events import (
    CardCaptureHoldExpired,
    TableBookingPaymentHoldExpired,
    WaitlistOfferExpired,
)
from shared.application.message_bus import message_bus

from .models import AnalyticsEntityType, AnalyticsEventType
from .services import record_analytics_event


def on_table_booking_payment_hold_expired(event: TableBookingPaymentHoldExpired) -> None:
    record_analytics_event(
        customer_id=event.customer_id,
        entity_type=AnalyticsEntityType.TABLE_BOOKING,
        entity_id=event.table_booking_id,
        event_type=AnalyticsEventType.PAYMENT_FAILED,
        metadata={"payment_kind": "table_deposit", "reason": "hold_expired"},
    )


def on_card_capture_hold_expired(event: CardCaptureHoldExpired) -> None:
    record_analytics_event(
        customer_id=event.customer_id,
        entity_type=AnalyticsEntityType.TABLE_BOOKING,
        entity_id=event.table_booking_id,
        event_type=AnalyticsEventType.CARD_CAPTURE_EXPIRED,
        metadata={"reason": "hold_expired"},
    )


def on_waitlist_offer_expired(event: WaitlistOfferExpired) -> None:
    record_analytics_event(
        customer_id=event.customer_id,
        entity_type=AnalyticsEntityType.WAITLIST_OFFER,
        entity_id=event.waitlist_offer_id,
        event_type=AnalyticsEventType.WAITLIST_OFFER_EXPIRED,
        metadata={
            "waitlist_entry_id": event.waitlist_entry_id,
            "event_id": event.event_id,
        },
    )


HANDLERS = {
    TableBookingPaymentHoldExpired: on_table_booking_payment_hold_expired,
    CardCaptureHoldExpired: on_card_capture_hold_expired,
    WaitlistOfferExpired: on_waitlist_offer_expired,
}


def register_handlers() -> None:
    for event_type, handler in HANDLERS.items():
        message_bus.register_event_handler(event_type, handler)
