"""Venue app package.

Weekly opening hours, date-specific overrides, per-slot capacity overrides
and per-booking-type policies. Everything the availability engine needs to
know about the venue itself lives here; bookings live in ``apps.bookings``.
"""
