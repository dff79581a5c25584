"""Periodic expiry of unreviewed reservations."""

from __future__ import annotations

from datetime import timedelta

from django.test import TestCase
from django.utils import timezone

from apps.reservations.conf import reservation_settings
from apps.reservations.models import Reservation
from apps.reservations.tasks import expire_stale_pending_reservations
from shared.domain.value_objects import ActorRef

from .factories import make_pool, make_reservation

ALICE = ActorRef.person(1)


class ExpireStalePendingTests(TestCase):
    def setUp(self) -> None:
        self.resource = make_pool(units=1).resources.get()
        self.now = timezone.now()

    def test_started_pending_reservations_are_cancelled(self) -> None:
        stale = make_reservation(ALICE, self.resource, self.now - timedelta(hours=2), self.now - timedelta(hours=1))
        upcoming = make_reservation(ALICE, self.resource, self.now + timedelta(days=1), self.now + timedelta(days=1, hours=1))
        approved = make_reservation(
            ALICE,
            self.resource,
            self.now - timedelta(days=1),
            self.now - timedelta(days=1) + timedelta(hours=1),
            status=Reservation.Status.APPROVED,
        )

        result = expire_stale_pending_reservations()

        self.assertEqual(result, {"expired": 1})
        stale.refresh_from_db()
        upcoming.refresh_from_db()
        approved.refresh_from_db()
        self.assertEqual(stale.status, Reservation.Status.CANCELLED)
        self.assertEqual(stale.denied_reason, reservation_settings().expired_reason)
        self.assertEqual(upcoming.status, Reservation.Status.PENDING)
        self.assertEqual(approved.status, Reservation.Status.APPROVED)

    def test_running_series_is_kept_until_its_end(self) -> None:
        series = make_reservation(
            ALICE,
            self.resource,
            self.now - timedelta(days=7),
            self.now - timedelta(days=7) + timedelta(hours=1),
            rrule="FREQ=WEEKLY",
            recurrence_end=self.now + timedelta(days=14),
        )

        self.assertEqual(expire_stale_pending_reservations(), {"expired": 0})
        series.refresh_from_db()
        self.assertEqual(series.status, Reservation.Status.PENDING)
