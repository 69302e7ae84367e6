"""URL routing for the booking domain."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import AvailabilityRangeView, AvailabilityView, BookingHoldViewSet, NextAvailableSlotView, TableBookingViewSet

router = DefaultRouter()
router.register(r"table-bookings", TableBookingViewSet, basename="table-booking")
router.register(r"holds", BookingHoldViewSet, basename="booking-hold")

urlpatterns = [
    path("availability/", AvailabilityView.as_view(), name="availability"),
    path("availability/range/", AvailabilityRangeView.as_view(), name="availability-range"),
    path("availability/next/", NextAvailableSlotView.as_view(), name="availability-next"),
    path("", include(router.urls)),
]
