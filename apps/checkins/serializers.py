"""Serializers for the check-in API."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import CheckIn


class CheckInCreateSerializer(serializers.Serializer):
    reservation = serializers.IntegerField(required=False, allow_null=True, default=None)


class CheckInSerializer(serializers.ModelSerializer):
    class Meta:
        model = CheckIn
        fields = [
            "id",
            "actor_type",
            "actor_id",
            "reservation",
            "check_in_time",
            "check_out_time",
            "closed_by",
        ]
        read_only_fields = fields
