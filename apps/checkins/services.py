"""Check-in lifecycle services."""

from __future__ import annotations

import logging
from datetime import datetime, time
from typing import Optional

from django.db import IntegrityError, transaction  # type: ignore

from shared.application.uow import lock_queryset_if_possible
from shared.domain.clock import Clock, system_clock
from shared.domain.exceptions import (
    AlreadyCheckedIn,
    NoActiveCheckIn,
    OutsideReservationWindow,
    ReservationNotApproved,
)
from shared.domain.value_objects import ActorRef

from apps.reservations.conf import reservation_settings
from apps.reservations.domain.occurrences import expand
from apps.reservations.models import Reservation

from .models import CheckIn

logger = logging.getLogger(__name__)


class CheckInService:
    def __init__(self, clock: Clock = system_clock):
        self.clock = clock

    def check_in(self, actor: ActorRef, reservation_id: Optional[int] = None) -> CheckIn:
        now = self.clock.now()

        if CheckIn.objects.open().for_actor(actor).exists():
            raise AlreadyCheckedIn()

        reservation = None
        if reservation_id is not None:
            reservation = self._approved_reservation(actor, reservation_id)
            self._ensure_within_window(reservation, now)

        try:
            with transaction.atomic():
                check_in = CheckIn.objects.create(
                    actor_type=actor.kind,
                    actor_id=actor.id,
                    reservation=reservation,
                    check_in_time=now,
                )
        except IntegrityError as exc:
            # A concurrent check-in of the same actor won the race
            logger.info(f"Concurrent check-in rejected for {actor}: {exc}")
            raise AlreadyCheckedIn() from exc

        logger.info(f"{actor} checked in (check-in #{check_in.pk}, reservation {reservation_id})")
        return check_in

    @transaction.atomic
    def check_out(self, actor: ActorRef, check_in_id: int) -> CheckIn:
        check_in = lock_queryset_if_possible(
            CheckIn.objects.open().for_actor(actor).filter(pk=check_in_id)
        ).first()
        if check_in is None:
            raise NoActiveCheckIn()
        check_in.close(self.clock.now(), CheckIn.ClosedBy.ACTOR)
        logger.info(f"{actor} checked out (check-in #{check_in.pk})")
        return check_in

    @transaction.atomic
    def check_out_by_actor(self, actor: ActorRef) -> CheckIn:
        """Admin checkout: closes whatever check-in the actor has open."""
        check_in = lock_queryset_if_possible(CheckIn.objects.open().for_actor(actor)).first()
        if check_in is None:
            raise NoActiveCheckIn()
        check_in.close(self.clock.now(), CheckIn.ClosedBy.ADMIN)
        logger.info(f"Admin closed check-in #{check_in.pk} of {actor}")
        return check_in

    def current_check_in(self, actor: ActorRef) -> Optional[CheckIn]:
        return CheckIn.objects.open().for_actor(actor).select_related("reservation").first()

    def open_check_ins(self, since: Optional[datetime] = None):
        """Open check-ins started since ``since`` (default: start of today, facility time)."""
        if since is None:
            tz = reservation_settings().time_zone
            today = self.clock.now().astimezone(tz).date()
            since = datetime.combine(today, time.min, tzinfo=tz)
        return CheckIn.objects.open().filter(check_in_time__gte=since).select_related("reservation")

    def _approved_reservation(self, actor: ActorRef, reservation_id: int) -> Reservation:
        reservation = (
            Reservation.objects.with_exceptions()
            .for_actor(actor)
            .filter(pk=reservation_id, status=Reservation.Status.APPROVED)
            .first()
        )
        if reservation is None:
            raise ReservationNotApproved()
        return reservation

    def _ensure_within_window(self, reservation: Reservation, now: datetime) -> None:
        tolerance = reservation_settings().check_in_tolerance
        start = self._closest_start(reservation, now, tolerance)
        if start is None or abs(now - start) > tolerance:
            raise OutsideReservationWindow()

    def _closest_start(self, reservation: Reservation, now: datetime, tolerance) -> Optional[datetime]:
        if not reservation.is_recurring:
            return reservation.start
        conf = reservation_settings()
        duration = reservation.end - reservation.start
        # Any occurrence starting within the tolerance intersects this window
        occurrences = expand(reservation.snapshot(), now - tolerance, now + tolerance + duration, conf.time_zone)
        if not occurrences:
            return None
        return min((o.start for o in occurrences), key=lambda start: abs(now - start))


check_in_service = CheckInService()
