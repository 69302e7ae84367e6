"""Admin registration for payments."""

from __future__ import annotations

from django.contrib import admin

from .models import CardCapture, Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("id", "charge_type", "status", "amount", "currency", "table_booking", "event_booking", "created_at")
    list_filter = ("charge_type", "status")
    readonly_fields = ("paid_at", "failed_at", "created_at", "updated_at")


@admin.register(CardCapture)
class CardCaptureAdmin(admin.ModelAdmin):
    list_display = ("id", "table_booking", "status", "expires_at", "captured_at")
    list_filter = ("status",)
