"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import BookingHold, Event, EventBooking, TableBooking


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ("name", "start_datetime", "capacity", "booking_open")
    list_filter = ("booking_open",)
    search_fields = ("name",)


@admin.register(EventBooking)
class EventBookingAdmin(admin.ModelAdmin):
    list_display = ("id", "event", "customer", "seats", "status", "hold_expires_at", "created_at")
    list_filter = ("status",)
    search_fields = ("event__name", "customer__last_name", "customer__mobile_number")
    readonly_fields = ("reconcile_run_id", "expired_at", "cancelled_at", "created_at", "updated_at")


@admin.register(TableBooking)
class TableBookingAdmin(admin.ModelAdmin):
    list_display = (
        "booking_reference",
        "customer",
        "booking_date",
        "booking_time",
        "party_size",
        "booking_type",
        "status",
        "hold_expires_at",
    )
    list_filter = ("status", "booking_type", "booking_date", "cancellation_reason")
    search_fields = ("booking_reference", "customer__last_name", "customer__mobile_number")
    readonly_fields = (
        "booking_reference",
        "reconcile_run_id",
        "cancelled_at",
        "confirmed_at",
        "created_at",
        "updated_at",
    )


@admin.register(BookingHold)
class BookingHoldAdmin(admin.ModelAdmin):
    list_display = ("id", "hold_type", "status", "owner", "seats_or_covers_held", "expires_at")
    list_filter = ("hold_type", "status")
    readonly_fields = ("expired_at", "released_at", "created_at", "updated_at")
