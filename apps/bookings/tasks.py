"""Celery tasks for the booking domain."""

from __future__ import annotations

from celery import shared_task  # type: ignore

from .application.reconciler import ExpiryReconciler


# ============================================================================
# PERIODIC TASKS (run automatically by Celery Beat)
# ============================================================================

@shared_task(name="bookings.reconcile_expired_holds")
def reconcile_expired_holds() -> dict[str, int]:
    """
    Expire every hold whose deadline has passed and cascade the side effects.

    Runs every minute through Celery Beat. A database error propagates so the
    task is marked failed; the next run picks up where this one stopped.

    Returns:
        dict: per-step transition counts
    """
    return ExpiryReconciler().run().counts()
