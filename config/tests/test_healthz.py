"""Tests for the container health check."""

from __future__ import annotations

from unittest import mock

from django.db import DatabaseError
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase


class HealthzTests(APITestCase):
    def test_reports_healthy_with_working_database(self) -> None:
        response = self.client.get(reverse("healthz"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json(), {"status": "healthy", "database": "connected"})

    def test_reports_unhealthy_when_database_fails(self) -> None:
        with mock.patch("config.views.connection") as broken:
            broken.cursor.side_effect = DatabaseError("down")
            response = self.client.get(reverse("healthz"))

        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertEqual(response.json()["status"], "unhealthy")

    def test_only_get_is_allowed(self) -> None:
        response = self.client.post(reverse("healthz"))

        self.assertEqual(response.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)
