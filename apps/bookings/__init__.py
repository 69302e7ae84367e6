"""Bookings app package.

This app encapsulates event and table bookings, the hold ledger that
bounds every unpaid or unverified claim on capacity, the slot availability
engine and the expiry reconciler that reclaims capacity once a hold's
deadline passes. Every expiry is a conditional update, so overlapping
reconciler runs are safe.
"""
