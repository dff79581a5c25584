"""Aggregated facility statistics."""

from __future__ import annotations

from datetime import datetime, time, timedelta

from django.db.models import Count  # type: ignore

from apps.checkins.models import CheckIn
from apps.reservations.conf import reservation_settings
from apps.reservations.models import Reservation


def _period_starts(now: datetime) -> dict[str, datetime]:
    """Start of today, of the week (Sunday) and of the month, facility time."""
    tz = reservation_settings().time_zone
    local_today = now.astimezone(tz).date()
    start_of_day = datetime.combine(local_today, time.min, tzinfo=tz)
    days_since_sunday = (local_today.weekday() + 1) % 7
    return {
        "today": start_of_day,
        "week": start_of_day - timedelta(days=days_since_sunday),
        "month": datetime.combine(local_today.replace(day=1), time.min, tzinfo=tz),
    }


def facility_overview(now: datetime) -> dict:
    periods = _period_starts(now)
    check_ins = CheckIn.objects.all()
    return {
        "visits": {name: check_ins.filter(check_in_time__gte=since).count() for name, since in periods.items()},
        "present_now": check_ins.filter(check_out_time__isnull=True, check_in_time__gte=periods["today"]).count(),
        "reservations": {
            "pending": Reservation.objects.filter(status=Reservation.Status.PENDING).count(),
            "upcoming_approved": Reservation.objects.filter(
                status=Reservation.Status.APPROVED, start__gte=now
            ).count(),
            "rejected": Reservation.objects.filter(status=Reservation.Status.REJECTED).count(),
        },
        "reservations_by_pool_kind": dict(
            Reservation.objects.values_list("resource__pool__kind")
            .annotate(total=Count("id"))
            .order_by("resource__pool__kind")
        ),
    }


def actor_overview(actors: set, now: datetime) -> dict:
    periods = _period_starts(now)
    reservations = Reservation.objects.none()
    check_ins = CheckIn.objects.none()
    for actor in actors:
        reservations = reservations | Reservation.objects.for_actor(actor)
        check_ins = check_ins | CheckIn.objects.for_actor(actor)
    by_status = dict(reservations.values_list("status").annotate(total=Count("id")).order_by("status"))
    return {
        "reservations": {status: by_status.get(status, 0) for status in Reservation.Status.values},
        "upcoming": reservations.filter(
            status__in=Reservation.BLOCKING_STATUSES, start__gte=now
        ).count(),
        "visits_this_month": check_ins.filter(check_in_time__gte=periods["month"]).count(),
    }
