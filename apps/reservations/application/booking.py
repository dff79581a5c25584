"""
Booking Service

Validates reservation requests and binds them to the first free unit of
the requested pool. Validation order is fixed and every failure is a
distinct domain error:

    InvalidRange -> PastStart -> OutsideBusinessHours
    -> ActorSelfOverlap -> NoResourceAvailable
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import List, Optional

from django.db import IntegrityError  # type: ignore
from django.db.models import Q  # type: ignore

from shared.application.uow import DjangoUnitOfWork
from shared.domain.clock import Clock, system_clock
from shared.domain.exceptions import (
    ActorSelfOverlap,
    InvalidOccurrence,
    InvalidRange,
    InvalidRecurrenceRule,
    InvalidStateTransition,
    NoResourceAvailable,
    NotReservationOwner,
    PastStart,
    ReservationNotFound,
)
from shared.domain.value_objects import ActorRef

from ..availability import AvailabilityIndex, availability_index
from ..conf import reservation_settings
from ..domain import events
from ..domain.occurrences import Occurrence, ReservationSnapshot, any_overlap, expand
from ..domain.policies import ensure_business_hours
from ..domain.recurrence import parse_rrule
from ..models import Reservation, ReservationException

logger = logging.getLogger(__name__)


def _whole_seconds(moment: datetime) -> datetime:
    return moment.replace(microsecond=0)


@dataclass
class CreateReservation:
    """Command: file a reservation request for a pool"""
    actor: ActorRef
    pool: object
    start: datetime
    end: datetime
    reason: str = ''
    event_type: str = Reservation.EventType.OTHER
    rrule: str = ''
    recurrence_end: Optional[datetime] = None
    created_by: object = None


class BookingService:
    """Creates PENDING reservations and manages a member's own series."""

    def __init__(self, clock: Clock = system_clock, availability: AvailabilityIndex = availability_index):
        self.clock = clock
        self.availability = availability

    def create(self, command: CreateReservation) -> Reservation:
        logger.info(
            f"Creating reservation for {command.actor} in pool {command.pool.pk} "
            f"[{command.start.isoformat()} - {command.end.isoformat()}]"
        )
        command = self._normalised(command)
        requested = self._requested_occurrences(command)

        with DjangoUnitOfWork() as uow:
            # Serialise concurrent creates for the same pool
            resources = list(uow.lock(command.pool.bookable_resources()))
            span_start, span_end = requested[0].start, max(o.end for o in requested)

            own = self.availability.blocking_occurrences(
                command.pool,
                span_start,
                span_end,
                queryset=Reservation.objects.for_actor(command.actor),
            )
            if any_overlap(requested, own):
                raise ActorSelfOverlap()

            busy = self.availability.occurrences_by_resource(
                self.availability.blocking_occurrences(command.pool, span_start, span_end)
            )
            resource = next(
                (r for r in resources if not any_overlap(requested, busy.get(r.pk, []))),
                None,
            )
            if resource is None:
                logger.info(f"No free resource in pool {command.pool.pk} for {command.actor}")
                raise NoResourceAvailable()

            try:
                reservation = Reservation.objects.create(
                    actor_type=command.actor.kind,
                    actor_id=command.actor.id,
                    resource=resource,
                    created_by=command.created_by,
                    event_type=command.event_type,
                    reason=command.reason,
                    start=command.start,
                    end=command.end,
                    rrule=command.rrule or '',
                    recurrence_end=command.recurrence_end if command.rrule else None,
                )
            except IntegrityError as exc:
                logger.warning(f"Storage rejected reservation for {command.actor}: {exc}")
                raise NoResourceAvailable() from exc

            reservation.add_event(events.ReservationCreated(
                reservation_id=reservation.pk,
                resource_id=resource.pk,
                actor=str(command.actor),
                start=reservation.start,
                end=reservation.end,
                recurring=reservation.is_recurring,
            ))
            uow.collect_events(reservation)

        logger.info(f"Reservation #{reservation.pk} created on resource {resource.pk}")
        return reservation

    def _normalised(self, command: CreateReservation) -> CreateReservation:
        """Drop sub-second precision; recurrence instants are whole seconds."""
        return replace(
            command,
            start=_whole_seconds(command.start),
            end=_whole_seconds(command.end),
            recurrence_end=_whole_seconds(command.recurrence_end) if command.recurrence_end else None,
        )

    def _requested_occurrences(self, command: CreateReservation) -> List[Occurrence]:
        """Steps 1-3 of validation; returns the occurrences being requested."""
        conf = reservation_settings()

        if command.start >= command.end:
            raise InvalidRange()
        if command.rrule:
            if command.recurrence_end is None:
                raise InvalidRange("A recurring reservation needs a recurrence end.")
            if command.recurrence_end < command.start:
                raise InvalidRange("Recurrence end must not be before the first occurrence.")

        if command.start < self.clock.now():
            raise PastStart()

        draft = ReservationSnapshot(
            reservation_id=None,
            resource_id=None,
            actor=command.actor,
            start=command.start,
            end=command.end,
            status=Reservation.Status.PENDING,
            rule=parse_rrule(command.rrule) if command.rrule else None,
            recurrence_end=command.recurrence_end if command.rrule else None,
        )
        span = draft.span
        occurrences = expand(draft, span.start, span.end, conf.time_zone)
        if not occurrences:
            raise InvalidRecurrenceRule("Recurrence rule produces no occurrences before the recurrence end.")
        if occurrences[0].start != command.start:
            raise InvalidRecurrenceRule("The reservation start must be the first occurrence of its recurrence rule.")
        if len(occurrences) > conf.max_recurring_occurrences:
            raise InvalidRecurrenceRule(
                f"Recurrence produces {len(occurrences)} occurrences, "
                f"the limit is {conf.max_recurring_occurrences}."
            )

        ensure_business_hours(occurrences, conf)
        return occurrences

    def cancel_occurrence(
        self,
        actors: set,
        reservation_id: int,
        occurrence_start: datetime,
        reason: str = '',
    ) -> ReservationException:
        """Cancel one occurrence of one of the actor's recurring reservations."""
        conf = reservation_settings()
        occurrence_start = _whole_seconds(occurrence_start)

        with DjangoUnitOfWork() as uow:
            try:
                reservation = uow.lock(Reservation.objects.filter(pk=reservation_id)).get()
            except Reservation.DoesNotExist:
                raise ReservationNotFound()
            if reservation.actor not in actors:
                raise NotReservationOwner()
            if not reservation.is_recurring:
                raise InvalidOccurrence("Only recurring reservations have individual occurrences.")
            if reservation.status not in Reservation.BLOCKING_STATUSES:
                raise InvalidStateTransition(
                    f"Reservation #{reservation.pk} is {reservation.status}, its occurrences cannot change."
                )

            duration = reservation.end - reservation.start
            matches = [
                o for o in expand(
                    reservation.snapshot(),
                    occurrence_start,
                    occurrence_start + duration,
                    conf.time_zone,
                    include_cancelled=True,
                )
                if o.start == occurrence_start
            ]
            if not matches:
                raise InvalidOccurrence()

            exception, _ = ReservationException.objects.update_or_create(
                reservation=reservation,
                original_start=occurrence_start,
                defaults={'is_cancelled': True, 'reason': reason},
            )
            reservation.add_event(events.OccurrenceCancelled(
                reservation_id=reservation.pk,
                original_start=occurrence_start,
            ))
            uow.collect_events(reservation)

        logger.info(f"Occurrence {occurrence_start.isoformat()} of reservation #{reservation_id} cancelled")
        return exception

    def list_for_actors(self, actors: set, include_past: bool = False):
        """Reservations held by any of ``actors``, upcoming first."""
        actor_filter = Q(pk__in=[])
        for actor in actors:
            actor_filter |= Q(actor_type=actor.kind, actor_id=actor.id)
        qs = Reservation.objects.filter(actor_filter).select_related('resource', 'resource__pool')
        if not include_past:
            now = self.clock.now()
            qs = qs.filter(Q(end__gte=now) | Q(recurrence_end__gte=now))
        return qs.order_by('start', 'id')


booking_service = BookingService()
