"""Customers app package.

Holds the guest record every event booking, table booking and waitlist
entry belongs to. Contact details are kept for the external notifier;
this app never sends messages itself.
"""
