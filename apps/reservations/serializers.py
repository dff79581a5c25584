"""Serializers for the reservation API."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.resources.models import ResourcePool

from .models import Reservation, ReservationException


class ReservationCreateSerializer(serializers.Serializer):
    """Input of a booking request; domain validation happens in the service."""

    pool = serializers.PrimaryKeyRelatedField(queryset=ResourcePool.objects.all())
    start = serializers.DateTimeField()
    end = serializers.DateTimeField()
    reason = serializers.CharField(required=False, allow_blank=True, default="")
    event_type = serializers.ChoiceField(
        choices=Reservation.EventType.choices,
        default=Reservation.EventType.OTHER,
    )
    rrule = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)
    recurrence_end = serializers.DateTimeField(required=False, allow_null=True, default=None)
    group = serializers.IntegerField(required=False, allow_null=True, default=None)


class ReservationExceptionSerializer(serializers.ModelSerializer):
    class Meta:
        model = ReservationException
        fields = ["id", "original_start", "is_cancelled", "reason", "created_at"]


class ReservationSerializer(serializers.ModelSerializer):
    """Reservation as seen by its owner and by admins."""

    pool_id = serializers.ReadOnlyField(source="resource.pool_id")
    resource_name = serializers.ReadOnlyField(source="resource.name")
    exceptions = ReservationExceptionSerializer(many=True, read_only=True)

    class Meta:
        model = Reservation
        fields = [
            "id",
            "actor_type",
            "actor_id",
            "pool_id",
            "resource",
            "resource_name",
            "event_type",
            "reason",
            "start",
            "end",
            "status",
            "denied_reason",
            "rrule",
            "recurrence_end",
            "exceptions",
            "decided_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class RejectSerializer(serializers.Serializer):
    denied_reason = serializers.CharField(allow_blank=True)


class CancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class CancelOccurrenceSerializer(serializers.Serializer):
    occurrence_start = serializers.DateTimeField()
    reason = serializers.CharField(required=False, allow_blank=True, default="")
