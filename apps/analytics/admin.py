"""Admin registration for analytics."""

from __future__ import annotations

from django.contrib import admin

from .models import AnalyticsEvent


@admin.register(AnalyticsEvent)
class AnalyticsEventAdmin(admin.ModelAdmin):
    list_display = ("event_type", "entity_type", "entity_id", "customer", "created_at")
    list_filter = ("event_type", "entity_type")
    readonly_fields = ("metadata", "created_at")
