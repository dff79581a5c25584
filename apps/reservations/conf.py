"""Access to the ``RESERVATIONS`` settings block."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Tuple
from zoneinfo import ZoneInfo

from django.conf import settings  # type: ignore

DEFAULTS = {
    "BUSINESS_TIME_ZONE": "America/Argentina/Buenos_Aires",
    "OPENING_HOUR": 9,
    "CLOSING_HOUR": 18,
    "BUSINESS_DAYS": (0, 1, 2, 3, 4),
    "CHECK_IN_TOLERANCE_MINUTES": 30,
    "MAX_RECURRING_OCCURRENCES": 500,
    "AUTO_REJECT_REASON": "auto-rejected: resource no longer available",
    "EXPIRED_REASON": "expired: not reviewed before start",
}


@dataclass(frozen=True)
class ReservationSettings:
    time_zone: ZoneInfo
    opening_hour: int
    closing_hour: int
    business_days: Tuple[int, ...]
    check_in_tolerance: timedelta
    max_recurring_occurrences: int
    auto_reject_reason: str
    expired_reason: str


def reservation_settings() -> ReservationSettings:
    """Read ``settings.RESERVATIONS`` on every call so overrides in tests apply."""
    values = {**DEFAULTS, **getattr(settings, "RESERVATIONS", {})}
    return ReservationSettings(
        time_zone=ZoneInfo(values["BUSINESS_TIME_ZONE"]),
        opening_hour=int(values["OPENING_HOUR"]),
        closing_hour=int(values["CLOSING_HOUR"]),
        business_days=tuple(values["BUSINESS_DAYS"]),
        check_in_tolerance=timedelta(minutes=int(values["CHECK_IN_TOLERANCE_MINUTES"])),
        max_recurring_occurrences=int(values["MAX_RECURRING_OCCURRENCES"]),
        auto_reject_reason=values["AUTO_REJECT_REASON"],
        expired_reason=values["EXPIRED_REASON"],
    )
