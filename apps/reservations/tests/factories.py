"""Helpers that build pools, members and reservations for tests."""

from __future__ import annotations

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from django.utils import timezone

from apps.reservations.models import Reservation
from apps.resources.models import Resource, ResourcePool
from apps.users.models import User

FACILITY_TZ = ZoneInfo("America/Argentina/Buenos_Aires")


def local(year: int, month: int, day: int, hour: int = 0, minute: int = 0) -> datetime:
    """Aware datetime in the facility time zone."""
    return datetime(year, month, day, hour, minute, tzinfo=FACILITY_TZ)


def next_weekday(weekday: int, hour: int, minute: int = 0, weeks_ahead: int = 1) -> datetime:
    """The given weekday at least ``weeks_ahead`` weeks from now, facility time."""
    today = timezone.now().astimezone(FACILITY_TZ).date() + timedelta(weeks=weeks_ahead)
    day = today + timedelta(days=(weekday - today.weekday()) % 7)
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=FACILITY_TZ)


def make_pool(name: str = "Coworking", units: int = 2, kind: str = ResourcePool.Kind.COWORKING) -> ResourcePool:
    pool = ResourcePool.objects.create(name=name, kind=kind, capacity=units)
    for number in range(1, units + 1):
        Resource.objects.create(pool=pool, name=f"{name} {number:02d}")
    return pool


def make_member(email: str, **extra) -> User:
    return User.objects.create_user(email=email, password="MemberPass123", **extra)


def make_admin(email: str = "admin@example.com") -> User:
    return User.objects.create_user(
        email=email,
        password="AdminPass123",
        role=User.RoleChoices.ADMIN,
    )


def make_reservation(actor, resource, start: datetime, end: datetime, **extra) -> Reservation:
    """Store a reservation directly, bypassing booking validation."""
    return Reservation.objects.create(
        actor_type=actor.kind,
        actor_id=actor.id,
        resource=resource,
        start=start,
        end=end,
        **extra,
    )
