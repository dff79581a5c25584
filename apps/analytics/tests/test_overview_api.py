"""Analytics overview for admins and members."""

from __future__ import annotations

from datetime import timedelta

from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.checkins.models import CheckIn
from apps.reservations.models import Reservation
from apps.reservations.tests.factories import make_admin, make_member, make_pool, make_reservation


class OverviewAPITests(APITestCase):
    def setUp(self) -> None:
        self.member = make_member("member@example.com")
        self.other = make_member("other@example.com")
        self.admin = make_admin()
        resource = make_pool(units=1).resources.get()
        start = timezone.now() + timedelta(days=2)
        make_reservation(self.member.actor_ref, resource, start, start + timedelta(hours=1))
        make_reservation(
            self.member.actor_ref,
            resource,
            start + timedelta(hours=2),
            start + timedelta(hours=3),
            status=Reservation.Status.APPROVED,
        )
        make_reservation(
            self.other.actor_ref,
            resource,
            start,
            start + timedelta(hours=1),
            status=Reservation.Status.REJECTED,
        )
        CheckIn.objects.create(
            actor_type=self.member.actor_ref.kind,
            actor_id=self.member.actor_ref.id,
            check_in_time=timezone.now(),
        )
        self.url = reverse("analytics-overview")

    def test_admin_gets_facility_numbers(self) -> None:
        self.client.force_authenticate(self.admin)

        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["scope"], "facility")
        self.assertEqual(response.data["reservations"], {"pending": 1, "upcoming_approved": 1, "rejected": 1})
        self.assertEqual(response.data["visits"]["today"], 1)
        self.assertEqual(response.data["present_now"], 1)
        self.assertEqual(response.data["reservations_by_pool_kind"], {"COWORKING": 3})

    def test_member_gets_own_numbers(self) -> None:
        self.client.force_authenticate(self.member)

        response = self.client.get(self.url)

        self.assertEqual(response.data["scope"], "member")
        self.assertEqual(response.data["reservations"]["PENDING"], 1)
        self.assertEqual(response.data["reservations"]["APPROVED"], 1)
        self.assertEqual(response.data["reservations"]["REJECTED"], 0)
        self.assertEqual(response.data["upcoming"], 2)
        self.assertEqual(response.data["visits_this_month"], 1)
