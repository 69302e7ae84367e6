"""URL routing for analytics."""

from __future__ import annotations

from django.urls import path  # type: ignore

from .views import OverviewAnalyticsView

urlpatterns = [
    path("overview/", OverviewAnalyticsView.as_view(), name="analytics-overview"),
]
