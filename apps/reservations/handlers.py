"""Event handlers for reservation events.

The audit trail goes to the ``apps.reservations.audit`` logger as one
structured record per domain event.
"""

from __future__ import annotations

import structlog

from shared.application.message_bus import message_bus

from .domain import events

audit_logger = structlog.get_logger("apps.reservations.audit")


def log_reservation_event(event: events.ReservationEvent) -> None:
    audit_logger.info("reservation_event", **event.to_dict())


def register() -> None:
    message_bus.subscribe(
        events.ReservationCreated,
        events.ReservationApproved,
        events.ReservationRejected,
        events.ReservationAutoRejected,
        events.ReservationCancelled,
        events.OccurrenceCancelled,
    )(log_reservation_event)
