"""Booking policies evaluated before a reservation is stored."""

from __future__ import annotations

from datetime import datetime, time
from typing import Iterable

from shared.domain.exceptions import OutsideBusinessHours

from ..conf import ReservationSettings


def within_business_hours(start: datetime, end: datetime, conf: ReservationSettings) -> bool:
    """
    Facility hours check in the facility time zone

    The interval must sit on a single business day, start at or after the
    opening hour and end no later than the closing hour.
    """
    local_start = start.astimezone(conf.time_zone)
    local_end = end.astimezone(conf.time_zone)

    if local_start.weekday() not in conf.business_days:
        return False
    if local_start.time() < time(conf.opening_hour):
        return False

    closing = datetime.combine(local_start.date(), time(conf.closing_hour), tzinfo=conf.time_zone)
    return local_end <= closing


def ensure_business_hours(occurrences: Iterable, conf: ReservationSettings) -> None:
    for occurrence in occurrences:
        if not within_business_hours(occurrence.start, occurrence.end, conf):
            local_start = occurrence.start.astimezone(conf.time_zone)
            raise OutsideBusinessHours(
                f"Occurrence on {local_start:%A %Y-%m-%d %H:%M} is outside business hours "
                f"(Mon-Fri {conf.opening_hour:02d}:00-{conf.closing_hour:02d}:00)."
            )
