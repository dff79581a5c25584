"""Resource catalog models."""

from __future__ import annotations

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class ResourcePool(models.Model):
    """A named group of interchangeable units of the same kind."""

    class Kind(models.TextChoices):
        COWORKING = "COWORKING", _("Coworking")
        LAB = "LAB", _("Laboratory")
        AUDITORIUM = "AUDITORIUM", _("Auditorium")
        MEETING = "MEETING", _("Meeting room")

    name = models.CharField(max_length=120, unique=True)
    kind = models.CharField(max_length=20, choices=Kind.choices)
    capacity = models.IntegerField(
        default=-1,
        help_text=_("Number of interchangeable units, -1 when not counted."),
    )
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Resource pool")
        verbose_name_plural = _("Resource pools")
        ordering = ["name"]
        indexes = [
            models.Index(fields=["kind"], name="resource_pool_kind_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.get_kind_display()})"

    def bookable_resources(self):
        """Active units in stable id order; the booking service walks them in this order."""
        return self.resources.filter(is_active=True).order_by("id")


class Resource(models.Model):
    """One physical unit of a pool: a desk, a room."""

    pool = models.ForeignKey(
        ResourcePool,
        on_delete=models.PROTECT,
        related_name="resources",
    )
    name = models.CharField(max_length=120)
    serial_number = models.CharField(max_length=64, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Resource")
        verbose_name_plural = _("Resources")
        ordering = ["id"]
        constraints = [
            models.UniqueConstraint(fields=["pool", "name"], name="resource_unique_name_per_pool"),
        ]

    def __str__(self) -> str:
        return self.name
