"""
Booking Domain Events

One event class per expiry outcome that other contexts react to.
These are published after the reconciliation batch that produced them commits.
"""

from dataclasses import dataclass

from shared.domain.base import DomainEvent


@dataclass
class TableBookingPaymentHoldExpired(DomainEvent):
    """
    Event: Deposit window closed on a table booking (pending_payment -> cancelled)

    Triggers:
    - Record a payment_failed analytics event for the table deposit
    """
    table_booking_id: int = None
    customer_id: int | None = None


@dataclass
class CardCaptureHoldExpired(DomainEvent):
    """
    Event: Card verification window closed (pending_card_capture -> cancelled)

    Triggers:
    - Record a card_capture_expired analytics event
    """
    table_booking_id: int = None
    customer_id: int | None = None


@dataclass
class WaitlistOfferExpired(DomainEvent):
    """
    Event: A waitlist offer was not taken up in time (sent -> expired)

    Triggers:
    - Record a waitlist_offer_expired analytics event
    """
    waitlist_offer_id: int = None
    waitlist_entry_id: int | None = None
    event_id: int | None = None
    customer_id: int | None = None
