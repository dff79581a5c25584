"""Serializers for the resource catalog and the pool calendar."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Resource, ResourcePool


class ResourceSerializer(serializers.ModelSerializer):
    class Meta:
        model = Resource
        fields = ["id", "name", "serial_number", "is_active"]


class ResourcePoolSerializer(serializers.ModelSerializer):
    resources = ResourceSerializer(many=True, read_only=True)

    class Meta:
        model = ResourcePool
        fields = ["id", "name", "kind", "capacity", "description", "resources"]


class CalendarQuerySerializer(serializers.Serializer):
    start = serializers.DateTimeField()
    end = serializers.DateTimeField()
    group = serializers.IntegerField(required=False, allow_null=True, default=None)

    def validate(self, attrs):  # type: ignore
        if attrs["start"] >= attrs["end"]:
            raise serializers.ValidationError({"end": "Window end must be after its start."})
        return attrs


class SlotSerializer(serializers.Serializer):
    start = serializers.DateTimeField()
    end = serializers.DateTimeField()


class OccurrenceSerializer(serializers.Serializer):
    reservation_id = serializers.IntegerField()
    resource_id = serializers.IntegerField()
    start = serializers.DateTimeField()
    end = serializers.DateTimeField()
    status = serializers.CharField()
    reason = serializers.CharField()
    event_type = serializers.CharField()


class PoolCalendarSerializer(serializers.Serializer):
    pool_id = serializers.IntegerField()
    capacity = serializers.IntegerField()
    resource_ids = serializers.ListField(child=serializers.IntegerField())
    unavailable_slots = SlotSerializer(many=True)
    full_capacity_slots = SlotSerializer(many=True)
    own_occurrences = OccurrenceSerializer(many=True)
