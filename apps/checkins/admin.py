"""Admin registration for check-ins."""

from __future__ import annotations

from django.contrib import admin

from .models import CheckIn


@admin.register(CheckIn)
class CheckInAdmin(admin.ModelAdmin):
    list_display = ("id", "actor_type", "actor_id", "reservation", "check_in_time", "check_out_time", "closed_by")
    list_filter = ("actor_type", "closed_by", "check_in_time")
    search_fields = ("actor_id",)
    readonly_fields = ("created_at", "updated_at")
