"""API views for analytics.

Staff-facing summary of recorded outcome events, optionally limited to a
date window.
"""

from __future__ import annotations

from django.db import models  # type: ignore
from rest_framework import serializers  # type: ignore
from rest_framework.permissions import IsAdminUser  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from .models import AnalyticsEvent, AnalyticsEventType


class SummaryQuerySerializer(serializers.Serializer):
    start = serializers.DateField(required=False)
    end = serializers.DateField(required=False)

    def validate(self, attrs):  # type: ignore
        start, end = attrs.get("start"), attrs.get("end")
        if start and end and start > end:
            raise serializers.ValidationError("start must not be after end.")
        return attrs


class OverviewAnalyticsView(APIView):
    """Count of each outcome event type."""

    permission_classes = [IsAdminUser]

    def get(self, request, format=None):  # type: ignore
        query = SummaryQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        qs = AnalyticsEvent.objects.all()
        if query.validated_data.get("start"):
            qs = qs.filter(created_at__date__gte=query.validated_data["start"])
        if query.validated_data.get("end"):
            qs = qs.filter(created_at__date__lte=query.validated_data["end"])

        counts = {event_type: 0 for event_type in AnalyticsEventType.values}
        for row in qs.values("event_type").annotate(total=models.Count("id")):
            counts[row["event_type"]] = row["total"]

        return Response({"events": counts, "total": sum(counts.values())})
