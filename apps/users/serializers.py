"""Serializers for user-related API endpoints."""

from __future__ import annotations

from django.contrib.auth import get_user_model  # type: ignore
from rest_framework import serializers  # type: ignore

from .models import MemberGroup

User = get_user_model()


class MemberGroupSerializer(serializers.ModelSerializer):
    class Meta:
        model = MemberGroup
        fields = ["id", "name"]


class UserSerializer(serializers.ModelSerializer):
    """Profile of a facility user."""

    member_groups = MemberGroupSerializer(many=True, read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "username",
            "first_name",
            "last_name",
            "role",
            "member_groups",
            "created_at",
        ]
        read_only_fields = fields
