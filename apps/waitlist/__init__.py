"""Waitlist app package.

Customers who want seats at a sold-out event queue here. When seats free
up, the front of the queue gets a time-limited offer backed by a
``waitlist_hold``; the expiry reconciler closes offers that lapse.
"""
