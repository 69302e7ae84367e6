import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("venue_bookings")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Expire overdue payment, card-capture and waitlist holds - every minute
    "reconcile-expired-holds": {
        "task": "bookings.reconcile_expired_holds",
        "schedule": 60.0,  # every 60 seconds
        "options": {"expires": 50},
    },
}

app.conf.timezone = "Europe/London"
