"""
Shared Kernel

This module contains base classes and utilities shared across all booking contexts:
value objects for wall-clock arithmetic, domain events, the message bus and
the unit of work that publishes events after commit.
"""
