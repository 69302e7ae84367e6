"""Venue configuration models."""

from __future__ import annotations

from django.core.exceptions import ValidationError  # type: ignore
from django.core.validators import MaxValueValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class BookingType(models.TextChoices):
    REGULAR = "regular", _("Regular")
    SUNDAY_LUNCH = "sunday_lunch", _("Sunday lunch")


class DayOfWeek(models.IntegerChoices):
    """Python ``date.weekday()`` numbering."""

    MONDAY = 0, _("Monday")
    TUESDAY = 1, _("Tuesday")
    WEDNESDAY = 2, _("Wednesday")
    THURSDAY = 3, _("Thursday")
    FRIDAY = 4, _("Friday")
    SATURDAY = 5, _("Saturday")
    SUNDAY = 6, _("Sunday")


class OpeningHoursFields(models.Model):
    """Fields shared by weekly and date-specific hours."""

    opens = models.TimeField(null=True, blank=True)
    closes = models.TimeField(null=True, blank=True)
    kitchen_opens = models.TimeField(null=True, blank=True)
    kitchen_closes = models.TimeField(null=True, blank=True)
    is_closed = models.BooleanField(default=False)
    is_kitchen_closed = models.BooleanField(default=False)
    notes = models.CharField(max_length=255, blank=True)

    class Meta:
        abstract = True

    def clean(self) -> None:
        if bool(self.kitchen_opens) != bool(self.kitchen_closes):
            raise ValidationError(_("Kitchen opening and closing times must be set together."))


class BusinessHours(OpeningHoursFields):
    """Default opening hours for a day of the week."""

    day_of_week = models.PositiveSmallIntegerField(choices=DayOfWeek.choices, unique=True)

    class Meta:
        verbose_name = _("Business hours")
        verbose_name_plural = _("Business hours")
        ordering = ["day_of_week"]

    def __str__(self) -> str:
        return f"{self.get_day_of_week_display()} hours"


class SpecialHours(OpeningHoursFields):
    """Hours for one specific date. Fully replaces the weekly default for that date."""

    date = models.DateField(unique=True)

    class Meta:
        verbose_name = _("Special hours")
        verbose_name_plural = _("Special hours")
        ordering = ["date"]

    def __str__(self) -> str:
        return f"Special hours {self.date:%Y-%m-%d}"


class BookingTimeSlot(models.Model):
    """Capacity override for one slot start time on a day of the week."""

    day_of_week = models.PositiveSmallIntegerField(choices=DayOfWeek.choices)
    slot_time = models.TimeField()
    booking_type = models.CharField(
        max_length=20,
        choices=BookingType.choices,
        null=True,
        blank=True,
        help_text=_("Leave empty to apply to every booking type."),
    )
    max_covers = models.PositiveIntegerField()
    is_active = models.BooleanField(default=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Booking time slot")
        verbose_name_plural = _("Booking time slots")
        ordering = ["day_of_week", "slot_time"]
        indexes = [
            models.Index(fields=["day_of_week", "is_active"]),
        ]

    def __str__(self) -> str:
        return f"{self.get_day_of_week_display()} {self.slot_time:%H:%M} ({self.max_covers} covers)"


class BookingPolicy(models.Model):
    """Per booking type rules. Missing rows fall back to the built-in policy table."""

    booking_type = models.CharField(max_length=20, choices=BookingType.choices, unique=True)
    min_advance_hours = models.PositiveSmallIntegerField(null=True, blank=True)
    max_advance_days = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(0), MaxValueValidator(366)],
    )
    default_duration_minutes = models.PositiveSmallIntegerField(null=True, blank=True)
    requires_prepayment = models.BooleanField(null=True, blank=True)
    modification_allowed = models.BooleanField(default=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Booking policy")
        verbose_name_plural = _("Booking policies")

    def __str__(self) -> str:
        return f"Policy for {self.get_booking_type_display()}"
