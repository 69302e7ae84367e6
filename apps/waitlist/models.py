"""Waitlist models."""

from __future__ import annotations

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class WaitlistEntry(models.Model):
    """A customer waiting for seats at a sold-out event."""

    class Status(models.TextChoices):
        QUEUED = "queued", _("Queued")
        OFFERED = "offered", _("Offer sent")
        ACCEPTED = "accepted", _("Accepted")
        EXPIRED = "expired", _("Expired")
        CANCELLED = "cancelled", _("Cancelled")

    event = models.ForeignKey("bookings.Event", on_delete=models.CASCADE, related_name="waitlist_entries")
    customer = models.ForeignKey(
        "customers.Customer",
        on_delete=models.PROTECT,
        related_name="waitlist_entries",
    )
    requested_seats = models.PositiveSmallIntegerField(default=1)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.QUEUED)
    expired_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Waitlist entry")
        verbose_name_plural = _("Waitlist entries")
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["event", "status"]),
        ]

    def __str__(self) -> str:
        return f"Waitlist entry #{self.pk} ({self.status})"


class WaitlistOffer(models.Model):
    """A time-limited invitation for one waitlist entry to claim freed seats."""

    class Status(models.TextChoices):
        SENT = "sent", _("Sent")
        ACCEPTED = "accepted", _("Accepted")
        EXPIRED = "expired", _("Expired")
        DECLINED = "declined", _("Declined")

    waitlist_entry = models.ForeignKey(WaitlistEntry, on_delete=models.CASCADE, related_name="offers")
    event = models.ForeignKey("bookings.Event", on_delete=models.CASCADE, related_name="waitlist_offers")
    customer = models.ForeignKey(
        "customers.Customer",
        on_delete=models.PROTECT,
        related_name="waitlist_offers",
    )
    seats_held = models.PositiveSmallIntegerField(default=1)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.SENT)
    expires_at = models.DateTimeField()
    expired_at = models.DateTimeField(null=True, blank=True)
    accepted_at = models.DateTimeField(null=True, blank=True)
    reconcile_run_id = models.UUIDField(null=True, blank=True, editable=False, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Waitlist offer")
        verbose_name_plural = _("Waitlist offers")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "expires_at"]),
        ]

    def __str__(self) -> str:
        return f"Waitlist offer #{self.pk} ({self.status})"
