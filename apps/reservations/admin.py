"""Admin registration for reservations."""

from __future__ import annotations

from django.contrib import admin

from .models import Reservation, ReservationException


class ReservationExceptionInline(admin.TabularInline):
    model = ReservationException
    extra = 0


@admin.register(Reservation)
class ReservationAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "resource",
        "actor_type",
        "actor_id",
        "event_type",
        "start",
        "end",
        "status",
        "rrule",
        "created_at",
    )
    list_filter = ("status", "event_type", "actor_type", "resource__pool")
    search_fields = ("actor_id", "reason", "resource__name")
    readonly_fields = ("created_at", "updated_at", "decided_at")
    inlines = [ReservationExceptionInline]
