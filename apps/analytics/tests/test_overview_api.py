"""Integration tests for the analytics overview endpoint."""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.analytics.models import AnalyticsEntityType, AnalyticsEvent, AnalyticsEventType


class OverviewAnalyticsAPITests(APITestCase):
    def setUp(self) -> None:
        user_model = get_user_model()
        self.staff = user_model.objects.create_user(username="ops", password="OpsPass123", is_staff=True)
        self.url = reverse("analytics-overview")
        for event_type in (
            AnalyticsEventType.PAYMENT_FAILED,
            AnalyticsEventType.PAYMENT_FAILED,
            AnalyticsEventType.WAITLIST_OFFER_EXPIRED,
        ):
            AnalyticsEvent.objects.create(
                entity_type=AnalyticsEntityType.TABLE_BOOKING,
                entity_id=1,
                event_type=event_type,
            )

    def test_staff_sees_counts_per_event_type(self) -> None:
        self.client.force_authenticate(self.staff)

        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(
            response.data["events"],
            {
                "payment_failed": 2,
                "card_capture_expired": 0,
                "waitlist_offer_expired": 1,
            },
        )
        self.assertEqual(response.data["total"], 3)

    def test_inverted_window_is_rejected(self) -> None:
        self.client.force_authenticate(self.staff)

        response = self.client.get(self.url, {"start": "2026-06-10", "end": "2026-06-01"})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_non_staff_is_forbidden(self) -> None:
        guest = get_user_model().objects.create_user(username="guest", password="GuestPass123")
        self.client.force_authenticate(guest)

        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
