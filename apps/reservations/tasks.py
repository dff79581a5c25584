"""Celery tasks for the reservation domain."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from shared.application.uow import DjangoUnitOfWork
from shared.domain.clock import system_clock

from .conf import reservation_settings
from .models import Reservation

logger = logging.getLogger(__name__)


# ============================================================================
# PERIODIC TASKS (run by Celery Beat)
# ============================================================================

@shared_task(name="reservations.expire_stale_pending")
def expire_stale_pending_reservations() -> dict[str, int]:
    """
    Cancel PENDING reservations nobody reviewed before they started.

    Recurring series are only expired once their recurrence end has
    passed. Runs every 15 minutes through Celery Beat.

    Returns:
        dict: {"expired": number of cancelled reservations}
    """
    now = system_clock.now()
    conf = reservation_settings()
    expired_count = 0

    stale = Reservation.objects.filter(status=Reservation.Status.PENDING, start__lte=now)
    for reservation in stale:
        if reservation.is_recurring and reservation.recurrence_end and reservation.recurrence_end > now:
            continue
        try:
            with DjangoUnitOfWork() as uow:
                locked = uow.lock(Reservation.objects.filter(pk=reservation.pk)).get()
                if locked.status != Reservation.Status.PENDING:
                    continue
                locked.cancel(now, reason=conf.expired_reason, by_system=True)
                uow.save(locked, update_fields=Reservation.DECISION_FIELDS)
                uow.collect_events(locked)
            expired_count += 1
            logger.info(f"Reservation #{reservation.pk} expired without review")
        except Exception as e:
            logger.error(f"Error expiring reservation #{reservation.pk}: {e}", exc_info=True)

    return {"expired": expired_count}
