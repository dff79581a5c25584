"""
Approval Workflow

Admin decisions on pending reservations. Approving a reservation rejects
every other PENDING reservation on the same resource whose occurrences
overlap it. ``preview`` runs exactly the same code through a unit of work
that discards writes, so the preview and the real cascade cannot differ.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from shared.application.uow import AbstractUnitOfWork, DjangoUnitOfWork, PreviewUnitOfWork
from shared.domain.clock import Clock, system_clock
from shared.domain.exceptions import DeniedReasonRequired, NotReservationOwner, ReservationNotFound

from apps.resources.models import Resource

from ..conf import reservation_settings
from ..domain.occurrences import any_overlap, expand
from ..models import Reservation

logger = logging.getLogger(__name__)


@dataclass
class ApprovalResult:
    reservation: Reservation
    auto_rejected_ids: List[int] = field(default_factory=list)


class ApprovalWorkflow:
    def __init__(
        self,
        clock: Clock = system_clock,
        uow_factory: Callable[[], AbstractUnitOfWork] = DjangoUnitOfWork,
    ):
        self.clock = clock
        self.uow_factory = uow_factory

    def preview(self, reservation_id: int) -> List[int]:
        """
        Ids that approving ``reservation_id`` would reject; writes nothing.

        Runs the approve path itself, so it raises what approve raises:
        ReservationNotFound for an unknown id and InvalidStateTransition
        when the target is no longer PENDING.
        """
        with PreviewUnitOfWork() as uow:
            _, conflict_ids = self._approve(reservation_id, uow)
        return conflict_ids

    def approve(self, reservation_id: int) -> ApprovalResult:
        logger.info(f"Approving reservation #{reservation_id}")
        with self.uow_factory() as uow:
            reservation, conflict_ids = self._approve(reservation_id, uow)
        if conflict_ids:
            logger.info(f"Approval of #{reservation_id} auto-rejected {conflict_ids}")
        return ApprovalResult(reservation=reservation, auto_rejected_ids=conflict_ids)

    def reject(self, reservation_id: int, denied_reason: str) -> Reservation:
        if not denied_reason or not denied_reason.strip():
            raise DeniedReasonRequired()
        with self.uow_factory() as uow:
            reservation = self._load(reservation_id, uow)
            reservation.reject(denied_reason.strip(), self.clock.now())
            uow.save(reservation, update_fields=Reservation.DECISION_FIELDS)
            uow.collect_events(reservation)
        logger.info(f"Reservation #{reservation_id} rejected")
        return reservation

    def cancel(self, reservation_id: int, actors: Optional[set] = None, reason: str = '') -> Reservation:
        """
        Cancel a pending reservation

        ``actors`` is the set of actors the caller may act for; None means
        the caller is an admin and may cancel any reservation.
        """
        with self.uow_factory() as uow:
            reservation = self._load(reservation_id, uow)
            if actors is not None and reservation.actor not in actors:
                raise NotReservationOwner()
            reservation.cancel(self.clock.now(), reason=reason)
            uow.save(reservation, update_fields=Reservation.DECISION_FIELDS)
            uow.collect_events(reservation)
        logger.info(f"Reservation #{reservation_id} cancelled")
        return reservation

    def _load(self, reservation_id: int, uow: AbstractUnitOfWork) -> Reservation:
        try:
            return uow.lock(Reservation.objects.filter(pk=reservation_id)).get()
        except Reservation.DoesNotExist:
            raise ReservationNotFound(f"Reservation #{reservation_id} does not exist.")

    def _approve(self, reservation_id: int, uow: AbstractUnitOfWork) -> Tuple[Reservation, List[int]]:
        resource_id = (
            Reservation.objects.filter(pk=reservation_id).values_list('resource_id', flat=True).first()
        )
        if resource_id is None:
            raise ReservationNotFound(f"Reservation #{reservation_id} does not exist.")

        # The resource row lock serialises approvals on one resource
        list(uow.lock(Resource.objects.filter(pk=resource_id)))
        target = uow.lock(Reservation.objects.with_exceptions().filter(pk=reservation_id)).get()

        conflicts = self._conflicts(target, uow)
        conflict_ids = [c.pk for c in conflicts]
        now = self.clock.now()
        conf = reservation_settings()

        target.approve(now, auto_rejected_ids=conflict_ids)
        uow.save(target, update_fields=Reservation.DECISION_FIELDS)
        uow.collect_events(target)

        for conflict in conflicts:
            conflict.reject(conf.auto_reject_reason, now, approved_reservation_id=target.pk)
            uow.save(conflict, update_fields=Reservation.DECISION_FIELDS)
            uow.collect_events(conflict)

        return target, conflict_ids

    def _conflicts(self, target: Reservation, uow: AbstractUnitOfWork) -> List[Reservation]:
        """PENDING reservations on the target's resource overlapping any target occurrence."""
        conf = reservation_settings()
        snapshot = target.snapshot()
        span = snapshot.span
        target_occurrences = expand(snapshot, span.start, span.end, conf.time_zone)
        if not target_occurrences:
            return []

        candidates = uow.lock(
            Reservation.objects.filter(
                resource_id=target.resource_id,
                status=Reservation.Status.PENDING,
            )
            .exclude(pk=target.pk)
            .possibly_overlapping(span.start, span.end)
            .with_exceptions()
            .order_by('id')
        )
        return [
            candidate
            for candidate in candidates
            if any_overlap(
                target_occurrences,
                expand(candidate.snapshot(), span.start, span.end, conf.time_zone),
            )
        ]


approval_workflow = ApprovalWorkflow()
