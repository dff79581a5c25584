"""API tests for authentication endpoints."""

from __future__ import annotations

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.users.models import MemberGroup, User


class AuthAPITests(APITestCase):
    def test_register_returns_tokens(self) -> None:
        payload = {
            "email": "member@example.com",
            "first_name": "Ana",
            "last_name": "Member",
            "password": "StrongPass123",
            "password_confirm": "StrongPass123",
        }

        response = self.client.post(reverse("auth:register"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertIn("tokens", response.data)
        self.assertEqual(response.data["user"]["email"], payload["email"])
        self.assertEqual(response.data["user"]["role"], User.RoleChoices.MEMBER)

    def test_register_rejects_password_mismatch(self) -> None:
        payload = {
            "email": "member@example.com",
            "password": "StrongPass123",
            "password_confirm": "OtherPass123",
        }

        response = self.client.post(reverse("auth:register"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(User.objects.filter(email=payload["email"]).exists())

    def test_login_with_email(self) -> None:
        User.objects.create_user(email="login@example.com", password="CorrectPassword1")

        response = self.client.post(
            reverse("auth:login"),
            {"email": "login@example.com", "password": "CorrectPassword1"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertIn("access", response.data["tokens"])

        wrong = self.client.post(
            reverse("auth:login"),
            {"email": "login@example.com", "password": "wrong"},
            format="json",
        )
        self.assertEqual(wrong.status_code, status.HTTP_400_BAD_REQUEST)

    def test_banned_user_cannot_login(self) -> None:
        User.objects.create_user(email="banned@example.com", password="CorrectPassword1", is_banned=True)

        response = self.client.post(
            reverse("auth:login"),
            {"email": "banned@example.com", "password": "CorrectPassword1"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_me_lists_member_groups(self) -> None:
        user = User.objects.create_user(email="team@example.com", password="CorrectPassword1")
        group = MemberGroup.objects.create(name="Robotics club")
        group.members.add(user)
        self.client.force_authenticate(user)

        response = self.client.get(reverse("user-me"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["member_groups"], [{"id": group.id, "name": "Robotics club"}])
        self.assertEqual(user.actor_ref.kind, "PERSON")
        self.assertEqual(group.actor_ref.id, str(group.id))
