"""
Expiry Reconciler

One ``run()`` is a full sweep over every time-bounded hold:

1. Event-booking payment holds (pending_payment -> expired)
2. Table-booking payment holds (pending_payment -> cancelled)
3. Waitlist offers (sent -> expired)
4. Waitlist entries behind the offers expired in step 3 (offered -> expired)
5. Card-capture holds (pending_card_capture -> cancelled)

Every owning row moves through a conditional UPDATE guarded by its expected
status. The UPDATE stamps the rows it changed with a fresh token, and only the
ids read back by that token drive the cascades, so two overlapping runs never
cascade the same booking twice. Each batch commits on its own; analytics
events are published after the batch commits.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, fields
from datetime import datetime
from typing import Iterable, Iterator, List, Sequence, Tuple

import structlog
from django.conf import settings
from django.db import DatabaseError
from django.utils import timezone

from apps.bookings.domain.events import (
    CardCaptureHoldExpired,
    TableBookingPaymentHoldExpired,
    WaitlistOfferExpired,
)
from apps.bookings.models import (
    BookingHold,
    CancellationReason,
    CancelledBy,
    EventBooking,
    TableBooking,
)
from apps.finances.models import CardCapture, Payment
from apps.waitlist.models import WaitlistEntry, WaitlistOffer
from shared.application.uow import DjangoUnitOfWork

logger = structlog.get_logger(__name__)

DEFAULT_BATCH_SIZE = 200


def _camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


@dataclass
class ReconcileResult:
    """Counts of rows each step of one pass changed."""

    expired_pending_bookings: int = 0
    expired_payment_holds: int = 0
    cancelled_event_table_bookings: int = 0
    expired_table_payment_holds: int = 0
    cancelled_table_bookings: int = 0
    failed_table_deposit_payments: int = 0
    expired_waitlist_offers: int = 0
    expired_waitlist_entries: int = 0
    expired_waitlist_holds: int = 0
    expired_card_captures: int = 0
    expired_card_capture_holds: int = 0
    expired_card_capture_records: int = 0

    def counts(self) -> dict:
        return {item.name: getattr(self, item.name) for item in fields(self)}

    @property
    def total_transitions(self) -> int:
        return sum(self.counts().values())

    def as_payload(self, processed_at: datetime) -> dict:
        payload = {"success": True}
        payload.update({_camel_case(name): value for name, value in self.counts().items()})
        payload["processedAt"] = processed_at.isoformat()
        return payload


def _chunks(ids: Sequence[int], size: int) -> Iterator[List[int]]:
    for start in range(0, len(ids), size):
        yield list(ids[start:start + size])


def _transition(queryset, **changes) -> List[Tuple]:
    """
    Conditionally update ``queryset`` and return the rows this call changed.

    The rows are returned as ``(id, customer_id)`` pairs.
    """
    token = uuid.uuid4()
    updated = queryset.update(reconcile_run_id=token, **changes)
    if not updated:
        return []
    return list(
        queryset.model.objects.filter(reconcile_run_id=token).values_list("id", "customer_id")
    )


class ExpiryReconciler:
    def __init__(self, batch_size: int | None = None, clock=timezone.now):
        engine = getattr(settings, "BOOKING_ENGINE", {})
        self.batch_size = int(batch_size or engine.get("RECONCILE_BATCH_SIZE", DEFAULT_BATCH_SIZE))
        if self.batch_size <= 0:
            raise ValueError("Batch size must be positive")
        self.clock = clock

    def run(self, now: datetime | None = None) -> ReconcileResult:
        now = now or self.clock()
        result = ReconcileResult()
        try:
            self._expire_event_booking_payment_holds(now, result)
            self._expire_table_booking_payment_holds(now, result)
            entry_ids = self._expire_waitlist_offers(now, result)
            self._expire_waitlist_entries(entry_ids, now, result)
            self._expire_card_capture_holds(now, result)
        except DatabaseError:
            logger.exception("reconcile.failed", **result.counts())
            raise

        logger.info("reconcile.completed", transitions=result.total_transitions, **result.counts())
        return result

    # ===== Cluster 1: event bookings =====

    def _expire_event_booking_payment_holds(self, now: datetime, result: ReconcileResult) -> None:
        candidates = list(
            EventBooking.objects.filter(
                status=EventBooking.Status.PENDING_PAYMENT,
                hold_expires_at__lte=now,
            ).order_by("id").values_list("id", flat=True)
        )

        for batch in _chunks(candidates, self.batch_size):
            with DjangoUnitOfWork():
                expired = _transition(
                    EventBooking.objects.filter(id__in=batch, status=EventBooking.Status.PENDING_PAYMENT),
                    status=EventBooking.Status.EXPIRED,
                    expired_at=now,
                    updated_at=now,
                )
                expired_ids = [row_id for row_id, _ in expired]
                if not expired_ids:
                    continue

                result.expired_pending_bookings += len(expired_ids)
                result.expired_payment_holds += self._expire_holds(
                    BookingHold.objects.filter(
                        event_booking_id__in=expired_ids,
                        hold_type=BookingHold.HoldType.PAYMENT_HOLD,
                    ),
                    now,
                )

                cancelled = _transition(
                    TableBooking.objects.filter(
                        event_booking_id__in=expired_ids,
                        status__in=TableBooking.BLOCKING_STATUSES,
                    ),
                    status=TableBooking.Status.CANCELLED,
                    cancellation_reason=CancellationReason.EVENT_BOOKING_PAYMENT_HOLD_EXPIRED,
                    cancelled_by=CancelledBy.SYSTEM,
                    cancelled_at=now,
                    updated_at=now,
                )
                cancelled_ids = [row_id for row_id, _ in cancelled]
                result.cancelled_event_table_bookings += len(cancelled_ids)
                if cancelled_ids:
                    result.expired_table_payment_holds += self._expire_holds(
                        BookingHold.objects.filter(table_booking_id__in=cancelled_ids),
                        now,
                    )
                    result.failed_table_deposit_payments += self._fail_deposits(cancelled_ids, now)

            logger.info("reconcile.batch", cluster="event_booking_payment_holds", transitioned=len(expired_ids))

    # ===== Cluster 2: table booking deposits =====

    def _expire_table_booking_payment_holds(self, now: datetime, result: ReconcileResult) -> None:
        candidates = list(
            TableBooking.objects.filter(
                status=TableBooking.Status.PENDING_PAYMENT,
                hold_expires_at__lte=now,
            ).order_by("id").values_list("id", flat=True)
        )

        for batch in _chunks(candidates, self.batch_size):
            with DjangoUnitOfWork() as uow:
                cancelled = _transition(
                    TableBooking.objects.filter(id__in=batch, status=TableBooking.Status.PENDING_PAYMENT),
                    status=TableBooking.Status.CANCELLED,
                    cancellation_reason=CancellationReason.PAYMENT_HOLD_EXPIRED,
                    cancelled_by=CancelledBy.SYSTEM,
                    cancelled_at=now,
                    updated_at=now,
                )
                if not cancelled:
                    continue

                cancelled_ids = [row_id for row_id, _ in cancelled]
                result.cancelled_table_bookings += len(cancelled_ids)
                result.expired_table_payment_holds += self._expire_holds(
                    BookingHold.objects.filter(
                        table_booking_id__in=cancelled_ids,
                        hold_type=BookingHold.HoldType.PAYMENT_HOLD,
                    ),
                    now,
                )
                result.failed_table_deposit_payments += self._fail_deposits(cancelled_ids, now)

                for booking_id, customer_id in cancelled:
                    uow.add_event(
                        TableBookingPaymentHoldExpired(table_booking_id=booking_id, customer_id=customer_id)
                    )

            logger.info("reconcile.batch", cluster="table_booking_payment_holds", transitioned=len(cancelled))

    # ===== Clusters 3 and 4: waitlist =====

    def _expire_waitlist_offers(self, now: datetime, result: ReconcileResult) -> List[int]:
        candidates = list(
            WaitlistOffer.objects.filter(
                status=WaitlistOffer.Status.SENT,
                expires_at__lte=now,
            ).order_by("id").values_list("id", flat=True)
        )
        entry_ids: List[int] = []

        for batch in _chunks(candidates, self.batch_size):
            with DjangoUnitOfWork() as uow:
                token = uuid.uuid4()
                updated = WaitlistOffer.objects.filter(
                    id__in=batch,
                    status=WaitlistOffer.Status.SENT,
                ).update(
                    status=WaitlistOffer.Status.EXPIRED,
                    expired_at=now,
                    reconcile_run_id=token,
                    updated_at=now,
                )
                if not updated:
                    continue

                expired = list(
                    WaitlistOffer.objects.filter(reconcile_run_id=token).values_list(
                        "id", "waitlist_entry_id", "event_id", "customer_id"
                    )
                )
                offer_ids = [offer_id for offer_id, *_ in expired]
                result.expired_waitlist_offers += len(offer_ids)
                result.expired_waitlist_holds += self._expire_holds(
                    BookingHold.objects.filter(
                        waitlist_offer_id__in=offer_ids,
                        hold_type=BookingHold.HoldType.WAITLIST_HOLD,
                    ),
                    now,
                )

                for offer_id, entry_id, event_id, customer_id in expired:
                    entry_ids.append(entry_id)
                    uow.add_event(
                        WaitlistOfferExpired(
                            waitlist_offer_id=offer_id,
                            waitlist_entry_id=entry_id,
                            event_id=event_id,
                            customer_id=customer_id,
                        )
                    )

            logger.info("reconcile.batch", cluster="waitlist_offers", transitioned=updated)

        return sorted(set(entry_ids))

    def _expire_waitlist_entries(self, entry_ids: Iterable[int], now: datetime,
                                 result: ReconcileResult) -> None:
        for batch in _chunks(list(entry_ids), self.batch_size):
            with DjangoUnitOfWork():
                result.expired_waitlist_entries += WaitlistEntry.objects.filter(
                    id__in=batch,
                    status=WaitlistEntry.Status.OFFERED,
                ).update(status=WaitlistEntry.Status.EXPIRED, expired_at=now, updated_at=now)

    # ===== Cluster 5: card captures =====

    def _expire_card_capture_holds(self, now: datetime, result: ReconcileResult) -> None:
        candidates = list(
            TableBooking.objects.filter(
                status=TableBooking.Status.PENDING_CARD_CAPTURE,
                hold_expires_at__lte=now,
            ).order_by("id").values_list("id", flat=True)
        )

        for batch in _chunks(candidates, self.batch_size):
            with DjangoUnitOfWork() as uow:
                cancelled = _transition(
                    TableBooking.objects.filter(id__in=batch, status=TableBooking.Status.PENDING_CARD_CAPTURE),
                    status=TableBooking.Status.CANCELLED,
                    cancellation_reason=CancellationReason.CARD_CAPTURE_EXPIRED,
                    cancelled_by=CancelledBy.SYSTEM,
                    cancelled_at=now,
                    updated_at=now,
                )
                if not cancelled:
                    continue

                cancelled_ids = [row_id for row_id, _ in cancelled]
                result.expired_card_captures += len(cancelled_ids)
                result.expired_card_capture_holds += self._expire_holds(
                    BookingHold.objects.filter(
                        table_booking_id__in=cancelled_ids,
                        hold_type=BookingHold.HoldType.CARD_CAPTURE_HOLD,
                    ),
                    now,
                )
                result.expired_card_capture_records += CardCapture.objects.filter(
                    table_booking_id__in=cancelled_ids,
                    status=CardCapture.Status.PENDING,
                ).update(status=CardCapture.Status.EXPIRED, updated_at=now)

                for booking_id, customer_id in cancelled:
                    uow.add_event(CardCaptureHoldExpired(table_booking_id=booking_id, customer_id=customer_id))

            logger.info("reconcile.batch", cluster="card_capture_holds", transitioned=len(cancelled))

    # ===== Helpers =====

    @staticmethod
    def _expire_holds(queryset, now: datetime) -> int:
        return queryset.filter(status=BookingHold.Status.ACTIVE).update(
            status=BookingHold.Status.EXPIRED,
            expired_at=now,
            updated_at=now,
        )

    @staticmethod
    def _fail_deposits(table_booking_ids: List[int], now: datetime) -> int:
        return Payment.objects.filter(
            table_booking_id__in=table_booking_ids,
            charge_type=Payment.ChargeType.TABLE_DEPOSIT,
            status=Payment.Status.PENDING,
        ).update(
            status=Payment.Status.FAILED,
            failed_at=now,
            updated_at=now,
        )
