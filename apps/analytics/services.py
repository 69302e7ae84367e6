"""Analytics recorder."""

from __future__ import annotations

from typing import Any

import structlog
from django.db import transaction  # type: ignore

from .models import AnalyticsEvent

logger = structlog.get_logger(__name__)


def record_analytics_event(
    *,
    customer_id: int | None,
    entity_type: str,
    entity_id: int,
    event_type: str,
    metadata: dict[str, Any] | None = None,
) -> AnalyticsEvent:
    """
    Persist one analytics event.

    Runs in its own savepoint so a failed insert leaves any surrounding
    transaction usable. Errors propagate; callers decide whether they are
    fatal.
    """
    with transaction.atomic():
        event = AnalyticsEvent.objects.create(
            customer_id=customer_id,
            entity_type=entity_type,
            entity_id=entity_id,
            event_type=event_type,
            metadata=metadata or {},
        )
    logger.info(
        "analytics.recorded",
        event_type=event_type,
        entity_type=entity_type,
        entity_id=entity_id,
    )
    return event
