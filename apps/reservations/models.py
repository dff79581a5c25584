"""Reservation domain models."""

from __future__ import annotations

from datetime import datetime, timedelta

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.db.models import Prefetch, Q  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.base import EventRecorder
from shared.domain.exceptions import InvalidStateTransition
from shared.domain.value_objects import ActorRef

from .domain import events as reservation_events
from .domain.occurrences import ReservationSnapshot
from .domain.recurrence import parse_rrule

# Occurrences never span more than a business day, so a recurring series
# cannot reach further than this past its recurrence end.
MAX_OCCURRENCE_LENGTH = timedelta(days=1)


class ReservationQuerySet(models.QuerySet):
    def blocking(self):
        return self.filter(status__in=Reservation.BLOCKING_STATUSES)

    def for_actor(self, actor: ActorRef):
        return self.filter(actor_type=actor.kind, actor_id=actor.id)

    def excluding_actor(self, actor: ActorRef | None):
        if actor is None:
            return self
        return self.exclude(actor_type=actor.kind, actor_id=actor.id)

    def in_pool(self, pool):
        return self.filter(resource__pool=pool)

    def possibly_overlapping(self, window_start: datetime, window_end: datetime):
        """Coarse SQL prefilter; expansion decides the exact overlap."""
        single = Q(rrule="", start__lt=window_end, end__gt=window_start)
        recurring = (
            ~Q(rrule="")
            & Q(start__lt=window_end)
            & Q(recurrence_end__gt=window_start - MAX_OCCURRENCE_LENGTH)
        )
        return self.filter(single | recurring)

    def with_exceptions(self):
        return self.prefetch_related(
            Prefetch(
                "exceptions",
                queryset=ReservationException.objects.filter(is_cancelled=True),
                to_attr="cancelled_exceptions",
            )
        )


class Reservation(EventRecorder, models.Model):
    """Booking of one resource by a person or a group."""

    class Status(models.TextChoices):
        PENDING = "PENDING", _("Pending")
        APPROVED = "APPROVED", _("Approved")
        REJECTED = "REJECTED", _("Rejected")
        CANCELLED = "CANCELLED", _("Cancelled")

    class ActorType(models.TextChoices):
        PERSON = "PERSON", _("Person")
        GROUP = "GROUP", _("Group")

    class EventType(models.TextChoices):
        MEETING = "MEETING", _("Meeting")
        WORKSHOP = "WORKSHOP", _("Workshop")
        CONFERENCE = "CONFERENCE", _("Conference")
        TRAINING = "TRAINING", _("Training")
        STUDY = "STUDY", _("Study session")
        OTHER = "OTHER", _("Other")

    BLOCKING_STATUSES = (Status.PENDING, Status.APPROVED)

    actor_type = models.CharField(max_length=10, choices=ActorType.choices, default=ActorType.PERSON)
    actor_id = models.CharField(max_length=64)
    resource = models.ForeignKey(
        "resources.Resource",
        on_delete=models.PROTECT,
        related_name="reservations",
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="filed_reservations",
    )
    event_type = models.CharField(max_length=20, choices=EventType.choices, default=EventType.OTHER)
    reason = models.TextField(blank=True)
    start = models.DateTimeField()
    end = models.DateTimeField()
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    denied_reason = models.CharField(max_length=255, blank=True)
    rrule = models.CharField(
        max_length=255,
        blank=True,
        help_text=_("RFC-5545 recurrence rule, empty for a single occurrence."),
    )
    recurrence_end = models.DateTimeField(null=True, blank=True)
    decided_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ReservationQuerySet.as_manager()

    class Meta:
        verbose_name = _("Reservation")
        verbose_name_plural = _("Reservations")
        ordering = ["start", "id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end__gt=models.F("start")),
                name="reservation_valid_range",
            ),
            models.CheckConstraint(
                condition=models.Q(rrule="") | models.Q(recurrence_end__isnull=False),
                name="reservation_recurring_has_end",
            ),
        ]
        indexes = [
            models.Index(fields=["resource", "start"], name="reservation_resource_start_idx"),
            models.Index(fields=["actor_type", "actor_id"], name="reservation_actor_idx"),
            models.Index(fields=["status"], name="reservation_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Reservation #{self.pk} of {self.resource_id} by {self.actor}"

    @property
    def actor(self) -> ActorRef:
        return ActorRef(self.actor_type, self.actor_id)

    @property
    def is_recurring(self) -> bool:
        return bool(self.rrule)

    @property
    def is_terminal(self) -> bool:
        return self.status != self.Status.PENDING

    def cancelled_starts(self) -> frozenset:
        cancelled = getattr(self, "cancelled_exceptions", None)
        if cancelled is None:
            cancelled = self.exceptions.filter(is_cancelled=True) if self.pk else []
        return frozenset(exc.original_start for exc in cancelled)

    def snapshot(self) -> ReservationSnapshot:
        """Immutable view for expansion; the recurrence rule is parsed here."""
        return ReservationSnapshot(
            reservation_id=self.pk,
            resource_id=self.resource_id,
            actor=self.actor,
            start=self.start,
            end=self.end,
            status=self.status,
            rule=parse_rrule(self.rrule) if self.rrule else None,
            recurrence_end=self.recurrence_end,
            cancelled_starts=self.cancelled_starts(),
            reason=self.reason,
            event_type=self.event_type,
        )

    # --- State transitions ---------------------------------------------------
    def _leave_pending(self, target: str, now: datetime) -> None:
        if self.status != self.Status.PENDING:
            raise InvalidStateTransition(
                f"Reservation #{self.pk} is {self.status}, cannot move to {target}."
            )
        self.status = target
        self.decided_at = now

    def approve(self, now: datetime, auto_rejected_ids=None) -> None:
        self._leave_pending(self.Status.APPROVED, now)
        self.add_event(reservation_events.ReservationApproved(
            reservation_id=self.pk,
            auto_rejected_ids=list(auto_rejected_ids or []),
        ))

    def reject(self, reason: str, now: datetime, approved_reservation_id: int | None = None) -> None:
        self._leave_pending(self.Status.REJECTED, now)
        self.denied_reason = reason
        if approved_reservation_id is None:
            self.add_event(reservation_events.ReservationRejected(reservation_id=self.pk, reason=reason))
        else:
            self.add_event(reservation_events.ReservationAutoRejected(
                reservation_id=self.pk,
                approved_reservation_id=approved_reservation_id,
                reason=reason,
            ))

    def cancel(self, now: datetime, reason: str = "", by_system: bool = False) -> None:
        self._leave_pending(self.Status.CANCELLED, now)
        if reason:
            self.denied_reason = reason
        self.add_event(reservation_events.ReservationCancelled(
            reservation_id=self.pk,
            reason=reason,
            by_system=by_system,
        ))

    DECISION_FIELDS = ["status", "denied_reason", "decided_at", "updated_at"]


class ReservationException(models.Model):
    """Override of one occurrence of a recurring reservation."""

    reservation = models.ForeignKey(
        Reservation,
        on_delete=models.CASCADE,
        related_name="exceptions",
    )
    original_start = models.DateTimeField()
    is_cancelled = models.BooleanField(default=True)
    reason = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Reservation exception")
        verbose_name_plural = _("Reservation exceptions")
        ordering = ["original_start"]
        constraints = [
            models.UniqueConstraint(
                fields=["reservation", "original_start"],
                name="reservation_exception_unique_occurrence",
            ),
        ]

    def __str__(self) -> str:
        return f"Exception for #{self.reservation_id} at {self.original_start.isoformat()}"
