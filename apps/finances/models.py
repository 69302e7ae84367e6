"""Payment and card-capture models."""

from __future__ import annotations

from decimal import Decimal

from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Payment(models.Model):
    """A charge attempt against a table booking or an event booking."""

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending")
        SUCCEEDED = "succeeded", _("Succeeded")
        FAILED = "failed", _("Failed")
        REFUNDED = "refunded", _("Refunded")

    class ChargeType(models.TextChoices):
        TABLE_DEPOSIT = "table_deposit", _("Table deposit")
        PREPAID_EVENT = "prepaid_event", _("Prepaid event seats")
        APPROVED_CHARGE = "approved_charge", _("Approved charge")

    table_booking = models.ForeignKey(
        "bookings.TableBooking",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="payments",
    )
    event_booking = models.ForeignKey(
        "bookings.EventBooking",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="payments",
    )
    charge_type = models.CharField(max_length=32, choices=ChargeType.choices)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    currency = models.CharField(max_length=3, default="GBP")
    transaction_id = models.CharField(max_length=100, blank=True)
    metadata = models.JSONField(default=dict, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    failed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Payment")
        verbose_name_plural = _("Payments")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=(
                    models.Q(table_booking__isnull=False, event_booking__isnull=True)
                    | models.Q(table_booking__isnull=True, event_booking__isnull=False)
                ),
                name="payment_single_booking",
            ),
        ]
        indexes = [
            models.Index(fields=["charge_type", "status"]),
        ]

    def __str__(self) -> str:
        return f"Payment {self.charge_type} ({self.status})"

    def mark_succeeded(self, transaction_id: str | None = None) -> None:
        self.status = self.Status.SUCCEEDED
        if transaction_id:
            self.transaction_id = transaction_id
        self.paid_at = timezone.now()
        self.save(update_fields=["status", "transaction_id", "paid_at", "updated_at"])

    def mark_failed(self, reason: str | None = None) -> None:
        self.status = self.Status.FAILED
        if reason:
            self.metadata["failure_reason"] = reason
        self.failed_at = timezone.now()
        self.save(update_fields=["status", "metadata", "failed_at", "updated_at"])


class CardCapture(models.Model):
    """Pending card verification for a table booking."""

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending")
        CAPTURED = "captured", _("Captured")
        EXPIRED = "expired", _("Expired")

    table_booking = models.ForeignKey(
        "bookings.TableBooking",
        on_delete=models.CASCADE,
        related_name="card_captures",
    )
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PENDING)
    expires_at = models.DateTimeField(null=True, blank=True)
    captured_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Card capture")
        verbose_name_plural = _("Card captures")
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"Card capture for {self.table_booking_id} ({self.status})"
