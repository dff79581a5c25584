"""Booking validation and resource assignment."""

from __future__ import annotations

from unittest import mock

from django.db import IntegrityError
from django.test import TestCase, override_settings

from apps.reservations.application.booking import BookingService, CreateReservation
from apps.reservations.models import Reservation, ReservationException
from shared.domain.clock import FixedClock
from shared.domain.exceptions import (
    ActorSelfOverlap,
    InvalidOccurrence,
    InvalidRange,
    InvalidRecurrenceRule,
    NoResourceAvailable,
    NotReservationOwner,
    OutsideBusinessHours,
    PastStart,
)
from shared.domain.value_objects import ActorRef

from .factories import local, make_pool, make_reservation

ALICE = ActorRef.person(1)
BOB = ActorRef.person(2)
CAROL = ActorRef.person(3)


class BookingServiceTests(TestCase):
    def setUp(self) -> None:
        # Monday 2030-06-03, 08:00 facility time
        self.clock = FixedClock(local(2030, 6, 3, 8))
        self.service = BookingService(clock=self.clock)
        self.pool = make_pool(units=2)
        self.first, self.second = list(self.pool.bookable_resources())

    def _book(self, actor, start, end, **extra) -> Reservation:
        return self.service.create(CreateReservation(actor=actor, pool=self.pool, start=start, end=end, **extra))

    def test_creates_pending_reservation_on_first_unit(self) -> None:
        reservation = self._book(ALICE, local(2030, 6, 3, 9), local(2030, 6, 3, 17), reason="thesis work")

        self.assertEqual(reservation.status, Reservation.Status.PENDING)
        self.assertEqual(reservation.resource, self.first)
        self.assertEqual(reservation.actor, ALICE)
        self.assertEqual(reservation.reason, "thesis work")

    def test_overlapping_request_of_another_actor_gets_next_unit(self) -> None:
        self._book(ALICE, local(2030, 6, 3, 9), local(2030, 6, 3, 17))

        second = self._book(BOB, local(2030, 6, 3, 16), local(2030, 6, 3, 18))

        self.assertEqual(second.resource, self.second)
        self.assertEqual(Reservation.objects.filter(status=Reservation.Status.PENDING).count(), 2)

    def test_no_resource_available_when_every_unit_is_taken(self) -> None:
        make_reservation(BOB, self.first, local(2030, 6, 3, 10), local(2030, 6, 3, 12))
        make_reservation(
            CAROL, self.second, local(2030, 6, 3, 11), local(2030, 6, 3, 13), status=Reservation.Status.APPROVED
        )

        with self.assertRaises(NoResourceAvailable):
            self._book(ALICE, local(2030, 6, 3, 11), local(2030, 6, 3, 12))
        self.assertFalse(Reservation.objects.for_actor(ALICE).exists())

    def test_decided_reservations_free_their_unit(self) -> None:
        make_reservation(BOB, self.first, local(2030, 6, 3, 10), local(2030, 6, 3, 12), status=Reservation.Status.REJECTED)
        make_reservation(CAROL, self.second, local(2030, 6, 3, 10), local(2030, 6, 3, 12), status=Reservation.Status.CANCELLED)

        reservation = self._book(ALICE, local(2030, 6, 3, 10), local(2030, 6, 3, 12))

        self.assertEqual(reservation.resource, self.first)

    def test_touching_reservations_do_not_conflict(self) -> None:
        make_reservation(BOB, self.first, local(2030, 6, 3, 10), local(2030, 6, 3, 12))
        make_reservation(CAROL, self.second, local(2030, 6, 3, 10), local(2030, 6, 3, 12))

        reservation = self._book(ALICE, local(2030, 6, 3, 12), local(2030, 6, 3, 13))

        self.assertEqual(reservation.resource, self.first)

    def test_self_overlap_with_pending_reservation(self) -> None:
        make_reservation(ALICE, self.first, local(2030, 6, 3, 10), local(2030, 6, 3, 12))

        with self.assertRaises(ActorSelfOverlap):
            self._book(ALICE, local(2030, 6, 3, 11), local(2030, 6, 3, 13))

    def test_self_overlap_with_approved_reservation(self) -> None:
        make_reservation(
            ALICE, self.second, local(2030, 6, 3, 10), local(2030, 6, 3, 12), status=Reservation.Status.APPROVED
        )

        with self.assertRaises(ActorSelfOverlap):
            self._book(ALICE, local(2030, 6, 3, 9), local(2030, 6, 3, 10, 30))

    def test_self_overlap_is_checked_per_pool(self) -> None:
        other_pool = make_pool(name="Laboratorio", units=1)
        make_reservation(ALICE, other_pool.resources.get(), local(2030, 6, 3, 10), local(2030, 6, 3, 12))

        reservation = self._book(ALICE, local(2030, 6, 3, 10), local(2030, 6, 3, 12))

        self.assertEqual(reservation.resource.pool, self.pool)

    def test_saturday_is_outside_business_hours(self) -> None:
        with self.assertRaises(OutsideBusinessHours):
            self._book(ALICE, local(2030, 6, 8, 10), local(2030, 6, 8, 12))
        self.assertFalse(Reservation.objects.exists())

    def test_business_hours_boundaries(self) -> None:
        self._book(ALICE, local(2030, 6, 4, 9), local(2030, 6, 4, 10))
        self._book(ALICE, local(2030, 6, 4, 17), local(2030, 6, 4, 18))

        with self.assertRaises(OutsideBusinessHours):
            self._book(ALICE, local(2030, 6, 4, 8, 30), local(2030, 6, 4, 9, 30))
        with self.assertRaises(OutsideBusinessHours):
            self._book(ALICE, local(2030, 6, 4, 17, 30), local(2030, 6, 4, 18, 30))

    def test_validation_order(self) -> None:
        # Reversed range in the past on a Saturday: the range is checked first
        with self.assertRaises(InvalidRange):
            self._book(ALICE, local(2030, 6, 1, 12), local(2030, 6, 1, 10))
        # Past Saturday: the past start wins over business hours
        with self.assertRaises(PastStart):
            self._book(ALICE, local(2030, 6, 1, 10), local(2030, 6, 1, 12))
        # Saturday overlapping an own reservation: business hours win over overlap
        make_reservation(ALICE, self.first, local(2030, 6, 8, 10), local(2030, 6, 8, 12))
        with self.assertRaises(OutsideBusinessHours):
            self._book(ALICE, local(2030, 6, 8, 10), local(2030, 6, 8, 12))
        # Own overlap wins over a full pool
        make_reservation(BOB, self.second, local(2030, 6, 3, 10), local(2030, 6, 3, 12))
        make_reservation(ALICE, self.first, local(2030, 6, 3, 10), local(2030, 6, 3, 12))
        with self.assertRaises(ActorSelfOverlap):
            self._book(ALICE, local(2030, 6, 3, 11), local(2030, 6, 3, 12))

    def test_recurring_reservation_needs_recurrence_end(self) -> None:
        with self.assertRaises(InvalidRange):
            self._book(ALICE, local(2030, 6, 3, 10), local(2030, 6, 3, 11), rrule="FREQ=WEEKLY")

    def test_recurring_occurrence_on_weekend_is_rejected(self) -> None:
        with self.assertRaises(OutsideBusinessHours):
            self._book(
                ALICE,
                local(2030, 6, 3, 10),
                local(2030, 6, 3, 11),
                rrule="FREQ=DAILY",
                recurrence_end=local(2030, 6, 8, 10),
            )

    def test_recurring_rule_without_occurrences_is_rejected(self) -> None:
        with self.assertRaises(InvalidRecurrenceRule):
            self._book(
                ALICE,
                local(2030, 6, 4, 10),
                local(2030, 6, 4, 11),
                rrule="FREQ=WEEKLY;BYDAY=MO",
                recurrence_end=local(2030, 6, 7, 10),
            )

    def test_start_must_be_the_first_occurrence_of_the_rule(self) -> None:
        # Tuesday start, Monday-only rule
        with self.assertRaises(InvalidRecurrenceRule):
            self._book(
                ALICE,
                local(2030, 6, 4, 10),
                local(2030, 6, 4, 11),
                rrule="FREQ=WEEKLY;BYDAY=MO",
                recurrence_end=local(2030, 6, 30),
            )

        self.assertFalse(Reservation.objects.exists())

    def test_sub_second_instants_are_stored_as_whole_seconds(self) -> None:
        start = local(2030, 6, 3, 10).replace(microsecond=500000)

        reservation = self._book(
            ALICE,
            start,
            local(2030, 6, 3, 11),
            rrule="FREQ=DAILY",
            recurrence_end=local(2030, 6, 5, 10),
        )

        reservation.refresh_from_db()
        self.assertEqual(reservation.start, local(2030, 6, 3, 10))
        exception = self.service.cancel_occurrence({ALICE}, reservation.pk, start.replace(day=4))
        self.assertEqual(exception.original_start, local(2030, 6, 4, 10))

    def test_storage_conflict_surfaces_as_no_resource_available(self) -> None:
        with mock.patch.object(Reservation.objects, "create", side_effect=IntegrityError("unit already taken")):
            with self.assertRaises(NoResourceAvailable):
                self._book(ALICE, local(2030, 6, 3, 10), local(2030, 6, 3, 11))

        self.assertFalse(Reservation.objects.exists())

    @override_settings(RESERVATIONS={"MAX_RECURRING_OCCURRENCES": 3})
    def test_recurring_series_is_capped(self) -> None:
        with self.assertRaises(InvalidRecurrenceRule):
            self._book(
                ALICE,
                local(2030, 6, 3, 10),
                local(2030, 6, 3, 11),
                rrule="FREQ=WEEKLY;BYDAY=MO",
                recurrence_end=local(2030, 7, 1, 10),
            )

    def test_recurring_request_conflicts_on_any_occurrence(self) -> None:
        make_reservation(BOB, self.first, local(2030, 6, 17, 10), local(2030, 6, 17, 11))
        make_reservation(CAROL, self.second, local(2030, 6, 17, 10, 30), local(2030, 6, 17, 12))

        with self.assertRaises(NoResourceAvailable):
            self._book(
                ALICE,
                local(2030, 6, 3, 10),
                local(2030, 6, 3, 11),
                rrule="FREQ=WEEKLY;BYDAY=MO",
                recurrence_end=local(2030, 6, 24, 10),
            )


class CancelOccurrenceTests(TestCase):
    def setUp(self) -> None:
        self.clock = FixedClock(local(2030, 6, 3, 8))
        self.service = BookingService(clock=self.clock)
        self.pool = make_pool(units=1)
        self.resource = self.pool.resources.get()
        self.series = make_reservation(
            ALICE,
            self.resource,
            local(2030, 6, 3, 10),
            local(2030, 6, 3, 11),
            rrule="FREQ=WEEKLY;BYDAY=MO",
            recurrence_end=local(2030, 6, 17, 10),
            status=Reservation.Status.APPROVED,
        )

    def test_cancelled_occurrence_frees_the_slot(self) -> None:
        exception = self.service.cancel_occurrence({ALICE}, self.series.pk, local(2030, 6, 10, 10), reason="holiday")

        self.assertTrue(exception.is_cancelled)
        self.assertEqual(ReservationException.objects.filter(reservation=self.series).count(), 1)
        reservation = self.service.create(
            CreateReservation(actor=BOB, pool=self.pool, start=local(2030, 6, 10, 10), end=local(2030, 6, 10, 11))
        )
        self.assertEqual(reservation.resource, self.resource)

    def test_instant_that_is_not_an_occurrence(self) -> None:
        with self.assertRaises(InvalidOccurrence):
            self.service.cancel_occurrence({ALICE}, self.series.pk, local(2030, 6, 11, 10))

    def test_only_the_owner_cancels_occurrences(self) -> None:
        with self.assertRaises(NotReservationOwner):
            self.service.cancel_occurrence({BOB}, self.series.pk, local(2030, 6, 10, 10))

    def test_single_reservations_have_no_occurrences_to_cancel(self) -> None:
        single = make_reservation(ALICE, self.resource, local(2030, 6, 4, 10), local(2030, 6, 4, 11))

        with self.assertRaises(InvalidOccurrence):
            self.service.cancel_occurrence({ALICE}, single.pk, local(2030, 6, 4, 10))
