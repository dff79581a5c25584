"""Check-in models."""

from __future__ import annotations

from django.db import models  # type: ignore
from django.db.models import Q  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import ActorRef


class CheckInQuerySet(models.QuerySet):
    def open(self):
        return self.filter(check_out_time__isnull=True)

    def for_actor(self, actor: ActorRef):
        return self.filter(actor_type=actor.kind, actor_id=actor.id)


class CheckIn(models.Model):
    """One visit to the facility."""

    class ActorType(models.TextChoices):
        PERSON = "PERSON", _("Person")
        GROUP = "GROUP", _("Group")

    class ClosedBy(models.TextChoices):
        ACTOR = "ACTOR", _("Actor")
        ADMIN = "ADMIN", _("Admin")

    actor_type = models.CharField(max_length=10, choices=ActorType.choices, default=ActorType.PERSON)
    actor_id = models.CharField(max_length=64)
    reservation = models.ForeignKey(
        "reservations.Reservation",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="check_ins",
    )
    check_in_time = models.DateTimeField()
    check_out_time = models.DateTimeField(null=True, blank=True)
    closed_by = models.CharField(max_length=10, choices=ClosedBy.choices, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CheckInQuerySet.as_manager()

    class Meta:
        verbose_name = _("Check-in")
        verbose_name_plural = _("Check-ins")
        ordering = ["-check_in_time"]
        constraints = [
            models.UniqueConstraint(
                fields=["actor_type", "actor_id"],
                condition=Q(check_out_time__isnull=True),
                name="checkin_single_open_per_actor",
            ),
            models.CheckConstraint(
                condition=Q(check_out_time__isnull=True) | Q(check_out_time__gte=models.F("check_in_time")),
                name="checkin_out_after_in",
            ),
        ]
        indexes = [
            models.Index(fields=["check_in_time"], name="checkin_time_idx"),
        ]

    def __str__(self) -> str:
        return f"Check-in #{self.pk} of {self.actor}"

    @property
    def actor(self) -> ActorRef:
        return ActorRef(self.actor_type, self.actor_id)

    @property
    def is_open(self) -> bool:
        return self.check_out_time is None

    def close(self, now, closed_by: str) -> None:
        self.check_out_time = now
        self.closed_by = closed_by
        self.save(update_fields=["check_out_time", "closed_by", "updated_at"])
