"""Finances app package.

Charge attempts (table deposits, prepaid event seats) and card-capture
records for table bookings. The expiry reconciler fails pending deposits
and expires pending card captures when the owning hold lapses.
"""
