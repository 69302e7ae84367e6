"""Authentication and permission classes for booking endpoints."""

from __future__ import annotations

import secrets

from django.conf import settings  # type: ignore
from django.contrib.auth.models import AnonymousUser  # type: ignore
from rest_framework import permissions  # type: ignore
from rest_framework.authentication import BaseAuthentication, get_authorization_header  # type: ignore
from rest_framework.exceptions import AuthenticationFailed  # type: ignore

CRON_AUTH = "cron"


class CronSecretAuthentication(BaseAuthentication):
    """
    Accepts ``Authorization: Bearer <CRON_SECRET>`` from the external scheduler.

    No header means "not this scheme"; a wrong secret, or an unset
    ``CRON_SECRET``, fails authentication outright.
    """

    keyword = "Bearer"

    def authenticate(self, request):  # type: ignore
        header = get_authorization_header(request).split()
        if not header or header[0].lower() != self.keyword.lower().encode():
            return None
        if len(header) != 2:
            raise AuthenticationFailed("Invalid authorization header.")

        expected = getattr(settings, "CRON_SECRET", "") or ""
        provided = header[1].decode("utf-8", errors="replace")
        if not expected or not secrets.compare_digest(provided, expected):
            raise AuthenticationFailed("Invalid cron secret.")
        return AnonymousUser(), CRON_AUTH

    def authenticate_header(self, request):  # type: ignore
        return self.keyword


class IsCronCaller(permissions.BasePermission):
    def has_permission(self, request, view):  # type: ignore
        return request.auth == CRON_AUTH


class HasDjangoPermission(permissions.BasePermission):
    """Grants access when the user holds ``permission`` (superusers hold all)."""

    permission = ""

    def has_permission(self, request, view):  # type: ignore
        user = request.user
        return bool(user and user.is_authenticated and user.has_perm(self.permission))


class CanManageTableBookings(HasDjangoPermission):
    permission = "bookings.change_tablebooking"


class CanViewBookingHolds(HasDjangoPermission):
    permission = "bookings.view_bookinghold"
