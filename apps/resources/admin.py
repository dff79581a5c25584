"""Admin registration for the resource catalog."""

from __future__ import annotations

from django.contrib import admin

from .models import Resource, ResourcePool


class ResourceInline(admin.TabularInline):
    model = Resource
    extra = 0
    fields = ("name", "serial_number", "is_active")


@admin.register(ResourcePool)
class ResourcePoolAdmin(admin.ModelAdmin):
    list_display = ("name", "kind", "capacity", "created_at")
    list_filter = ("kind",)
    search_fields = ("name",)
    inlines = [ResourceInline]


@admin.register(Resource)
class ResourceAdmin(admin.ModelAdmin):
    list_display = ("name", "pool", "serial_number", "is_active")
    list_filter = ("pool", "is_active")
    search_fields = ("name", "serial_number")
