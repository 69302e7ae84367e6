"""Admin registration for venue opening hours and booking rules."""

from __future__ import annotations

from django.contrib import admin

from .models import BookingPolicy, BookingTimeSlot, BusinessHours, SpecialHours


@admin.register(BusinessHours)
class BusinessHoursAdmin(admin.ModelAdmin):
    list_display = ("day_of_week", "opens", "closes", "kitchen_opens", "kitchen_closes", "is_closed")
    ordering = ("day_of_week",)


@admin.register(SpecialHours)
class SpecialHoursAdmin(admin.ModelAdmin):
    list_display = ("date", "opens", "closes", "kitchen_opens", "kitchen_closes", "is_closed", "notes")
    list_filter = ("is_closed", "is_kitchen_closed")
    date_hierarchy = "date"


@admin.register(BookingTimeSlot)
class BookingTimeSlotAdmin(admin.ModelAdmin):
    list_display = ("day_of_week", "slot_time", "booking_type", "max_covers", "is_active")
    list_filter = ("day_of_week", "booking_type", "is_active")


@admin.register(BookingPolicy)
class BookingPolicyAdmin(admin.ModelAdmin):
    list_display = (
        "booking_type",
        "min_advance_hours",
        "max_advance_days",
        "default_duration_minutes",
        "requires_prepayment",
        "modification_allowed",
    )
