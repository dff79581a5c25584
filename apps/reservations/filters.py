"""Filters for the admin reservation listing."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Reservation


class ReservationFilter(django_filters.FilterSet):
    pool = django_filters.NumberFilter(field_name="resource__pool")
    starts_after = django_filters.IsoDateTimeFilter(field_name="start", lookup_expr="gte")
    starts_before = django_filters.IsoDateTimeFilter(field_name="start", lookup_expr="lt")

    class Meta:
        model = Reservation
        fields = ["status", "event_type", "resource", "actor_type", "actor_id"]
