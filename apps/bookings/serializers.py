"""Serializers for the booking domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.venue.models import BookingType

from .domain.capacity import VenueCapacityConfig
from .exceptions import SlotUnavailableError
from .models import BookingHold, TableBooking
from .services import create_table_booking


class AvailabilityQuerySerializer(serializers.Serializer):
    date = serializers.DateField()
    party_size = serializers.IntegerField(min_value=1)
    booking_type = serializers.ChoiceField(choices=BookingType.choices, required=False)


class AvailabilityRangeQuerySerializer(serializers.Serializer):
    start = serializers.DateField()
    end = serializers.DateField()
    booking_type = serializers.ChoiceField(choices=BookingType.choices, required=False)

    def validate(self, attrs):  # type: ignore
        if attrs["end"] < attrs["start"]:
            raise serializers.ValidationError("End date must not be before the start date.")
        horizon = VenueCapacityConfig.from_settings().next_available_horizon_days
        if (attrs["end"] - attrs["start"]).days + 1 > horizon:
            raise serializers.ValidationError(f"Date range cannot exceed {horizon} days.")
        return attrs


class NextAvailableQuerySerializer(serializers.Serializer):
    party_size = serializers.IntegerField(min_value=1)
    booking_type = serializers.ChoiceField(choices=BookingType.choices, required=False)
    preferred_time = serializers.TimeField(required=False)


class TableBookingCreateSerializer(serializers.ModelSerializer):
    """Staff-created table booking; admission is re-checked under lock."""

    party_size = serializers.IntegerField(min_value=1)
    duration_minutes = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    booking_type = serializers.ChoiceField(choices=BookingType.choices, default=BookingType.REGULAR)

    class Meta:
        model = TableBooking
        fields = [
            "customer",
            "booking_date",
            "booking_time",
            "party_size",
            "duration_minutes",
            "booking_type",
            "special_requirements",
        ]
        extra_kwargs = {
            "special_requirements": {"required": False, "allow_blank": True},
        }

    def create(self, validated_data):  # type: ignore
        try:
            return create_table_booking(**validated_data)
        except SlotUnavailableError as exc:
            raise serializers.ValidationError({"non_field_errors": [str(exc)]})


class TableBookingSerializer(serializers.ModelSerializer):
    customer_id = serializers.ReadOnlyField(source="customer.id")
    customer_name = serializers.ReadOnlyField(source="customer.full_name")
    event_booking_id = serializers.ReadOnlyField(source="event_booking.id")

    class Meta:
        model = TableBooking
        fields = [
            "id",
            "booking_reference",
            "customer_id",
            "customer_name",
            "event_booking_id",
            "booking_date",
            "booking_time",
            "party_size",
            "duration_minutes",
            "booking_type",
            "status",
            "hold_expires_at",
            "special_requirements",
            "cancellation_reason",
            "cancelled_at",
            "cancelled_by",
            "confirmed_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ModificationCheckSerializer(serializers.Serializer):
    new_date = serializers.DateField(required=False)
    new_time = serializers.TimeField(required=False)
    new_party_size = serializers.IntegerField(min_value=1, required=False)


class ConfirmPaymentSerializer(serializers.Serializer):
    transaction_id = serializers.CharField(max_length=100, required=False, allow_blank=True)


class BookingHoldSerializer(serializers.ModelSerializer):
    class Meta:
        model = BookingHold
        fields = [
            "id",
            "hold_type",
            "status",
            "event_booking",
            "table_booking",
            "waitlist_offer",
            "seats_or_covers_held",
            "expires_at",
            "expired_at",
            "released_at",
            "created_at",
        ]
        read_only_fields = fields
