import django_filters

from .models import BookingHold


class BookingHoldFilter(django_filters.FilterSet):
    expires_before = django_filters.IsoDateTimeFilter(field_name="expires_at", lookup_expr="lte")
    expires_after = django_filters.IsoDateTimeFilter(field_name="expires_at", lookup_expr="gte")

    class Meta:
        model = BookingHold
        fields = {
            'hold_type': ['exact'],
            'status': ['exact'],
            'table_booking': ['exact'],
            'event_booking': ['exact'],
        }
