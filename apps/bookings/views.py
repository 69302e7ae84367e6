"""API views for the booking domain."""

from __future__ import annotations

import structlog
from django.db import DatabaseError  # type: ignore
from django.utils import timezone  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from .application.availability import AvailabilityService
from .application.reconciler import ExpiryReconciler
from .domain.capacity import VenueCapacityConfig
from .exceptions import BookingStateError
from .filters import BookingHoldFilter
from .models import BookingHold, TableBooking
from .permissions import CanManageTableBookings, CanViewBookingHolds, CronSecretAuthentication, IsCronCaller
from .serializers import (
    AvailabilityQuerySerializer,
    AvailabilityRangeQuerySerializer,
    BookingHoldSerializer,
    ConfirmPaymentSerializer,
    ModificationCheckSerializer,
    NextAvailableQuerySerializer,
    TableBookingCreateSerializer,
    TableBookingSerializer,
)
from .services import cancel_table_booking, check_modification_allowed, confirm_table_booking_payment

logger = structlog.get_logger(__name__)

NO_SLOT_MESSAGE = "No available slots found in the next {days} days."


class AvailabilityView(APIView):
    """Slots with room for a party on one date."""

    permission_classes = [permissions.AllowAny]

    def get(self, request):  # type: ignore
        query = AvailabilityQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        params = query.validated_data

        result = AvailabilityService().check_availability(
            params["date"],
            params["party_size"],
            params.get("booking_type"),
        )
        return Response(result.to_dict())


class AvailabilityRangeView(APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request):  # type: ignore
        query = AvailabilityRangeQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        params = query.validated_data

        availability = AvailabilityService().get_availability_range(
            params["start"],
            params["end"],
            params.get("booking_type"),
        )
        return Response(availability)


class NextAvailableSlotView(APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request):  # type: ignore
        query = NextAvailableQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        params = query.validated_data

        slot = AvailabilityService().get_next_available_slot(
            params["party_size"],
            params.get("booking_type"),
            params.get("preferred_time"),
        )
        if slot is None:
            horizon = VenueCapacityConfig.from_settings().next_available_horizon_days
            return Response(
                {"detail": NO_SLOT_MESSAGE.format(days=horizon)},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response(slot.to_dict())


class TableBookingViewSet(
    mixins.CreateModelMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Staff management of table bookings."""

    queryset = TableBooking.objects.select_related("customer", "event_booking").all()
    permission_classes = [CanManageTableBookings]
    filterset_fields = ["booking_date", "status", "booking_type"]

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return TableBookingCreateSerializer
        if self.action == "check_modification":
            return ModificationCheckSerializer
        if self.action == "confirm_payment":
            return ConfirmPaymentSerializer
        return TableBookingSerializer

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = serializer.save()
        read_serializer = TableBookingSerializer(booking, context=self.get_serializer_context())
        headers = self.get_success_headers(read_serializer.data)
        return Response(read_serializer.data, status=status.HTTP_201_CREATED, headers=headers)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        booking: TableBooking = self.get_object()  # type: ignore
        try:
            booking = cancel_table_booking(booking)
        except BookingStateError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        return Response({"status": booking.status, "cancellation_reason": booking.cancellation_reason})

    @action(detail=True, methods=["post"], url_path="confirm-payment")
    def confirm_payment(self, request, pk=None):  # type: ignore
        booking: TableBooking = self.get_object()  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            booking = confirm_table_booking_payment(
                booking,
                transaction_id=serializer.validated_data.get("transaction_id", ""),
            )
        except BookingStateError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        return Response({"status": booking.status, "confirmed_at": booking.confirmed_at})

    @action(detail=True, methods=["post"], url_path="check-modification")
    def check_modification(self, request, pk=None):  # type: ignore
        booking: TableBooking = self.get_object()  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        params = serializer.validated_data

        decision = check_modification_allowed(
            booking,
            params.get("new_date"),
            params.get("new_time"),
            params.get("new_party_size"),
        )
        return Response({"allowed": decision.allowed, "reason": decision.reason})


class BookingHoldViewSet(viewsets.ReadOnlyModelViewSet):
    """Read-only hold ledger for staff."""

    queryset = BookingHold.objects.all()
    serializer_class = BookingHoldSerializer
    permission_classes = [CanViewBookingHolds]
    filterset_class = BookingHoldFilter


class ExpireHoldsCronView(APIView):
    """Scheduler entry point for the expiry reconciler."""

    authentication_classes = [CronSecretAuthentication]
    permission_classes = [IsCronCaller]

    def get(self, request):  # type: ignore
        return self._reconcile()

    def post(self, request):  # type: ignore
        return self._reconcile()

    def _reconcile(self) -> Response:
        try:
            result = ExpiryReconciler().run()
        except DatabaseError as exc:
            return Response(
                {"success": False, "error": str(exc) or exc.__class__.__name__},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        return Response(result.as_payload(timezone.now()))
