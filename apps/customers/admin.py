"""Admin registration for customers."""

from __future__ import annotations

from django.contrib import admin

from .models import Customer


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ("full_name", "mobile_number", "email", "created_at")
    search_fields = ("first_name", "last_name", "mobile_number", "email")
