"""Analytics models."""

from __future__ import annotations

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class AnalyticsEventType(models.TextChoices):
    PAYMENT_FAILED = "payment_failed", _("Payment failed")
    CARD_CAPTURE_EXPIRED = "card_capture_expired", _("Card capture expired")
    WAITLIST_OFFER_EXPIRED = "waitlist_offer_expired", _("Waitlist offer expired")


class AnalyticsEntityType(models.TextChoices):
    TABLE_BOOKING = "table_booking", _("Table booking")
    EVENT_BOOKING = "event_booking", _("Event booking")
    WAITLIST_OFFER = "waitlist_offer", _("Waitlist offer")


class AnalyticsEvent(models.Model):
    customer = models.ForeignKey(
        "customers.Customer",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="analytics_events",
    )
    entity_type = models.CharField(max_length=32, choices=AnalyticsEntityType.choices)
    entity_id = models.BigIntegerField()
    event_type = models.CharField(max_length=64, choices=AnalyticsEventType.choices)
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Analytics event")
        verbose_name_plural = _("Analytics events")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["event_type", "created_at"]),
            models.Index(fields=["entity_type", "entity_id"]),
        ]

    def __str__(self) -> str:
        return f"{self.event_type} for {self.entity_type} {self.entity_id}"
