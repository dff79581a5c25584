"""
Recurrence Rules

Parses RFC-5545 ``RRULE`` text into a structured, validated rule once,
at the boundary, and generates occurrence start instants from it with
``dateutil.rrule``.

Supported parts: FREQ, INTERVAL, COUNT, UNTIL, BYDAY, BYMONTHDAY,
BYMONTH, WKST. An optional ``RRULE:`` prefix is accepted.
"""

import re
from dataclasses import dataclass
from datetime import datetime, time, timezone as dt_timezone
from functools import lru_cache
from typing import Iterator, Optional, Tuple
from zoneinfo import ZoneInfo

from dateutil import rrule as du_rrule

from shared.domain.base import ValueObject
from shared.domain.exceptions import InvalidRecurrenceRule


FREQUENCIES = {
    'DAILY': du_rrule.DAILY,
    'WEEKLY': du_rrule.WEEKLY,
    'MONTHLY': du_rrule.MONTHLY,
    'YEARLY': du_rrule.YEARLY,
}

WEEKDAYS = {
    'MO': du_rrule.MO,
    'TU': du_rrule.TU,
    'WE': du_rrule.WE,
    'TH': du_rrule.TH,
    'FR': du_rrule.FR,
    'SA': du_rrule.SA,
    'SU': du_rrule.SU,
}

SUPPORTED_PARTS = {'FREQ', 'INTERVAL', 'COUNT', 'UNTIL', 'BYDAY', 'BYMONTHDAY', 'BYMONTH', 'WKST'}

BYDAY_PATTERN = re.compile(r'^([+-]?\d{1,2})?(MO|TU|WE|TH|FR|SA|SU)$')
UNTIL_FORMATS = ('%Y%m%dT%H%M%SZ', '%Y%m%dT%H%M%S', '%Y%m%d')


@dataclass(frozen=True)
class RecurrenceRule(ValueObject):
    """
    Parsed recurrence rule

    ``until`` is aware (UTC) when the source carried a trailing ``Z`` and
    naive otherwise; naive values are read in the facility time zone at
    expansion time. ``by_weekday`` keeps (ordinal, code) pairs, ordinal
    0 meaning "every".
    """
    frequency: str
    interval: int = 1
    count: Optional[int] = None
    until: Optional[datetime] = None
    by_weekday: Tuple[Tuple[int, str], ...] = ()
    by_month_day: Tuple[int, ...] = ()
    by_month: Tuple[int, ...] = ()
    week_start: str = 'MO'

    def to_rrule(self, dtstart: datetime, tz: ZoneInfo) -> du_rrule.rrule:
        """Build a dateutil rule anchored at ``dtstart`` (aware, in ``tz``)."""
        kwargs = {
            'dtstart': dtstart,
            'interval': self.interval,
            'wkst': WEEKDAYS[self.week_start],
            'cache': False,
        }
        if self.count is not None:
            kwargs['count'] = self.count
        if self.until is not None:
            until = self.until
            if until.tzinfo is None:
                until = until.replace(tzinfo=tz)
            kwargs['until'] = until.astimezone(tz)
        if self.by_weekday:
            kwargs['byweekday'] = [
                WEEKDAYS[code](ordinal) if ordinal else WEEKDAYS[code]
                for ordinal, code in self.by_weekday
            ]
        if self.by_month_day:
            kwargs['bymonthday'] = self.by_month_day
        if self.by_month:
            kwargs['bymonth'] = self.by_month
        try:
            return du_rrule.rrule(FREQUENCIES[self.frequency], **kwargs)
        except (ValueError, TypeError) as exc:
            raise InvalidRecurrenceRule(f"Recurrence rule cannot be expanded: {exc}") from exc

    def starts_between(
        self, dtstart: datetime, tz: ZoneInfo, after: datetime, before: datetime
    ) -> Iterator[datetime]:
        """Start instants in ``[after, before]`` as aware UTC datetimes."""
        rule = self.to_rrule(dtstart.astimezone(tz), tz)
        for candidate in rule.between(after.astimezone(tz), before.astimezone(tz), inc=True):
            yield candidate.astimezone(dt_timezone.utc)


def _positive_int(name: str, value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise InvalidRecurrenceRule(f"{name} must be an integer, got {value!r}")
    if number < 1:
        raise InvalidRecurrenceRule(f"{name} must be positive, got {number}")
    return number


def _int_list(name: str, value: str, high: int, signed: bool = True) -> Tuple[int, ...]:
    items = []
    for raw in value.split(','):
        try:
            number = int(raw)
        except ValueError:
            raise InvalidRecurrenceRule(f"{name} contains a non-integer value {raw!r}")
        if number == 0 or abs(number) > high or (number < 0 and not signed):
            raise InvalidRecurrenceRule(f"{name} value {number} is out of range")
        items.append(number)
    return tuple(items)


def _parse_until(value: str) -> datetime:
    for fmt in UNTIL_FORMATS:
        try:
            parsed = datetime.strptime(value, fmt)
        except ValueError:
            continue
        if fmt.endswith('Z'):
            return parsed.replace(tzinfo=dt_timezone.utc)
        if fmt == '%Y%m%d':
            # Date-only UNTIL includes the whole day
            return datetime.combine(parsed.date(), time(23, 59, 59))
        return parsed
    raise InvalidRecurrenceRule(f"UNTIL has an unsupported format: {value!r}")


def _parse_byday(value: str) -> Tuple[Tuple[int, str], ...]:
    days = []
    for raw in value.split(','):
        match = BYDAY_PATTERN.match(raw)
        if not match:
            raise InvalidRecurrenceRule(f"BYDAY contains an invalid weekday {raw!r}")
        ordinal = int(match.group(1)) if match.group(1) else 0
        if abs(ordinal) > 53:
            raise InvalidRecurrenceRule(f"BYDAY ordinal {ordinal} is out of range")
        days.append((ordinal, match.group(2)))
    return tuple(days)


@lru_cache(maxsize=1024)
def parse_rrule(text: str) -> RecurrenceRule:
    """
    Parse ``RRULE`` text into a RecurrenceRule

    Raises InvalidRecurrenceRule for anything it cannot represent
    faithfully instead of silently dropping parts of the rule.
    """
    if not text or not text.strip():
        raise InvalidRecurrenceRule("Recurrence rule is empty")

    body = text.strip()
    if body.upper().startswith('RRULE:'):
        body = body[len('RRULE:'):]

    parts = {}
    for chunk in body.split(';'):
        if not chunk:
            continue
        if '=' not in chunk:
            raise InvalidRecurrenceRule(f"Malformed rule part {chunk!r}")
        key, value = chunk.split('=', 1)
        key = key.strip().upper()
        value = value.strip().upper()
        if key not in SUPPORTED_PARTS:
            raise InvalidRecurrenceRule(f"Unsupported rule part {key}")
        if key in parts:
            raise InvalidRecurrenceRule(f"Rule part {key} is repeated")
        if not value:
            raise InvalidRecurrenceRule(f"Rule part {key} is empty")
        parts[key] = value

    frequency = parts.get('FREQ')
    if frequency is None:
        raise InvalidRecurrenceRule("FREQ is required")
    if frequency not in FREQUENCIES:
        raise InvalidRecurrenceRule(f"Unsupported FREQ {frequency}")
    if 'COUNT' in parts and 'UNTIL' in parts:
        raise InvalidRecurrenceRule("COUNT and UNTIL cannot be combined")

    week_start = parts.get('WKST', 'MO')
    if week_start not in WEEKDAYS:
        raise InvalidRecurrenceRule(f"WKST has an invalid weekday {week_start!r}")

    return RecurrenceRule(
        frequency=frequency,
        interval=_positive_int('INTERVAL', parts['INTERVAL']) if 'INTERVAL' in parts else 1,
        count=_positive_int('COUNT', parts['COUNT']) if 'COUNT' in parts else None,
        until=_parse_until(parts['UNTIL']) if 'UNTIL' in parts else None,
        by_weekday=_parse_byday(parts['BYDAY']) if 'BYDAY' in parts else (),
        by_month_day=_int_list('BYMONTHDAY', parts['BYMONTHDAY'], 31) if 'BYMONTHDAY' in parts else (),
        by_month=_int_list('BYMONTH', parts['BYMONTH'], 12, signed=False) if 'BYMONTH' in parts else (),
        week_start=week_start,
    )
