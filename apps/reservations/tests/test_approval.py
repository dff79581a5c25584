"""Approval cascade, preview and admin decisions."""

from __future__ import annotations

from unittest import mock

from django.test import TestCase

from apps.reservations.application.approval import ApprovalWorkflow
from apps.reservations.conf import reservation_settings
from apps.reservations.models import Reservation, ReservationException
from shared.domain.clock import FixedClock
from shared.domain.exceptions import (
    DeniedReasonRequired,
    InvalidStateTransition,
    NotReservationOwner,
    ReservationNotFound,
)
from shared.domain.value_objects import ActorRef

from .factories import local, make_pool, make_reservation

ALICE = ActorRef.person(1)
BOB = ActorRef.person(2)
CAROL = ActorRef.person(3)
DAVE = ActorRef.person(4)


class ApprovalWorkflowTests(TestCase):
    def setUp(self) -> None:
        self.clock = FixedClock(local(2030, 6, 3, 8))
        self.workflow = ApprovalWorkflow(clock=self.clock)
        self.pool = make_pool(units=2)
        self.first, self.second = list(self.pool.bookable_resources())

        self.target = make_reservation(ALICE, self.first, local(2030, 6, 3, 9), local(2030, 6, 3, 17))
        self.overlapping = make_reservation(BOB, self.first, local(2030, 6, 3, 16), local(2030, 6, 3, 18))
        self.touching = make_reservation(CAROL, self.first, local(2030, 6, 3, 17), local(2030, 6, 3, 18))
        self.other_unit = make_reservation(DAVE, self.second, local(2030, 6, 3, 10), local(2030, 6, 3, 12))

    def _status(self, reservation: Reservation) -> str:
        reservation.refresh_from_db()
        return reservation.status

    def test_approve_rejects_overlapping_pending_on_same_unit(self) -> None:
        result = self.workflow.approve(self.target.pk)

        self.assertEqual(result.auto_rejected_ids, [self.overlapping.pk])
        self.assertEqual(self._status(self.target), Reservation.Status.APPROVED)
        self.assertEqual(self.target.decided_at, self.clock.now())
        self.assertEqual(self._status(self.overlapping), Reservation.Status.REJECTED)
        self.assertEqual(self.overlapping.denied_reason, reservation_settings().auto_reject_reason)
        self.assertEqual(self._status(self.touching), Reservation.Status.PENDING)
        self.assertEqual(self._status(self.other_unit), Reservation.Status.PENDING)

    def test_preview_matches_cascade_and_writes_nothing(self) -> None:
        preview = self.workflow.preview(self.target.pk)

        self.assertEqual(preview, [self.overlapping.pk])
        self.assertEqual(
            set(Reservation.objects.values_list("status", flat=True)),
            {"PENDING"},
        )

        result = self.workflow.approve(self.target.pk)
        self.assertEqual(result.auto_rejected_ids, preview)

    def test_approved_reservations_are_not_cascaded(self) -> None:
        self.overlapping.status = Reservation.Status.APPROVED
        self.overlapping.save(update_fields=["status"])

        result = self.workflow.approve(self.target.pk)

        self.assertEqual(result.auto_rejected_ids, [])
        self.assertEqual(self._status(self.overlapping), Reservation.Status.APPROVED)

    def test_recurring_cascade_skips_cancelled_occurrences(self) -> None:
        series = make_reservation(
            ALICE,
            self.second,
            local(2030, 6, 4, 10),
            local(2030, 6, 4, 11),
            rrule="FREQ=WEEKLY;BYDAY=TU",
            recurrence_end=local(2030, 6, 18, 10),
        )
        ReservationException.objects.create(reservation=series, original_start=local(2030, 6, 11, 10))
        on_cancelled = make_reservation(BOB, self.second, local(2030, 6, 11, 10), local(2030, 6, 11, 11))
        on_last = make_reservation(CAROL, self.second, local(2030, 6, 18, 10, 30), local(2030, 6, 18, 12))
        other_day = make_reservation(DAVE, self.second, local(2030, 6, 19, 10), local(2030, 6, 19, 11))

        self.assertEqual(self.workflow.preview(series.pk), [on_last.pk])
        result = self.workflow.approve(series.pk)

        self.assertEqual(result.auto_rejected_ids, [on_last.pk])
        self.assertEqual(self._status(on_cancelled), Reservation.Status.PENDING)
        self.assertEqual(self._status(other_day), Reservation.Status.PENDING)

    def test_failure_mid_cascade_rolls_back_the_whole_approval(self) -> None:
        second_conflict = make_reservation(ActorRef.person(5), self.first, local(2030, 6, 3, 9), local(2030, 6, 3, 10))
        original_reject = Reservation.reject
        calls = []

        def reject_then_fail(reservation, *args, **kwargs):
            calls.append(reservation.pk)
            if len(calls) > 1:
                raise RuntimeError("storage failure")
            return original_reject(reservation, *args, **kwargs)

        with mock.patch.object(Reservation, "reject", reject_then_fail):
            with self.assertRaises(RuntimeError):
                self.workflow.approve(self.target.pk)

        self.assertEqual(len(calls), 2)
        for reservation in (self.target, self.overlapping, second_conflict):
            self.assertEqual(self._status(reservation), Reservation.Status.PENDING)

    def test_only_pending_reservations_can_be_approved(self) -> None:
        self.workflow.approve(self.target.pk)

        with self.assertRaises(InvalidStateTransition):
            self.workflow.approve(self.target.pk)
        with self.assertRaises(InvalidStateTransition):
            self.workflow.preview(self.target.pk)
        with self.assertRaises(InvalidStateTransition):
            self.workflow.approve(self.overlapping.pk)

    def test_unknown_reservation(self) -> None:
        with self.assertRaises(ReservationNotFound):
            self.workflow.approve(10_000)
        with self.assertRaises(ReservationNotFound):
            self.workflow.preview(10_000)

    def test_reject_requires_reason(self) -> None:
        with self.assertRaises(DeniedReasonRequired):
            self.workflow.reject(self.target.pk, "   ")

        rejected = self.workflow.reject(self.target.pk, "Room closed for maintenance")

        self.assertEqual(rejected.status, Reservation.Status.REJECTED)
        self.assertEqual(self._status(self.target), Reservation.Status.REJECTED)
        self.assertEqual(self.target.denied_reason, "Room closed for maintenance")
        with self.assertRaises(InvalidStateTransition):
            self.workflow.approve(self.target.pk)

    def test_cancel_by_owner_or_admin(self) -> None:
        with self.assertRaises(NotReservationOwner):
            self.workflow.cancel(self.target.pk, actors={BOB})

        self.workflow.cancel(self.target.pk, actors={ALICE, ActorRef.group(9)}, reason="plans changed")
        self.workflow.cancel(self.overlapping.pk)

        self.assertEqual(self._status(self.target), Reservation.Status.CANCELLED)
        self.assertEqual(self._status(self.overlapping), Reservation.Status.CANCELLED)

    def test_decided_reservations_cannot_be_cancelled(self) -> None:
        self.workflow.approve(self.target.pk)

        with self.assertRaises(InvalidStateTransition):
            self.workflow.cancel(self.target.pk, actors={ALICE})
