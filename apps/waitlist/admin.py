"""Admin registration for the waitlist."""

from __future__ import annotations

from django.contrib import admin

from .models import WaitlistEntry, WaitlistOffer


@admin.register(WaitlistEntry)
class WaitlistEntryAdmin(admin.ModelAdmin):
    list_display = ("id", "event", "customer", "requested_seats", "status", "created_at")
    list_filter = ("status",)
    search_fields = ("customer__first_name", "customer__last_name", "event__name")


@admin.register(WaitlistOffer)
class WaitlistOfferAdmin(admin.ModelAdmin):
    list_display = ("id", "waitlist_entry", "event", "seats_held", "status", "expires_at")
    list_filter = ("status",)
    readonly_fields = ("expired_at", "accepted_at", "reconcile_run_id", "created_at", "updated_at")
