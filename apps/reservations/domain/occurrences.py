"""
Occurrence Expansion

Projects a reservation onto the concrete time intervals it occupies.
Expansion works on an immutable ReservationSnapshot, so it can be called
repeatedly with different windows and never touches storage.
"""

from dataclasses import dataclass
from datetime import datetime, timezone as dt_timezone
from typing import FrozenSet, Iterable, List, Optional, Sequence
from zoneinfo import ZoneInfo

from shared.domain.value_objects import ActorRef, TimeRange

from .recurrence import RecurrenceRule


@dataclass(frozen=True)
class ReservationSnapshot:
    """Read-only view of a reservation used for expansion."""
    reservation_id: Optional[int]
    resource_id: Optional[int]
    actor: ActorRef
    start: datetime
    end: datetime
    status: str
    rule: Optional[RecurrenceRule] = None
    recurrence_end: Optional[datetime] = None
    cancelled_starts: FrozenSet[datetime] = frozenset()
    reason: str = ''
    event_type: str = ''

    @property
    def is_recurring(self) -> bool:
        return self.rule is not None

    @property
    def span(self) -> TimeRange:
        """Smallest range that covers every occurrence of the reservation."""
        if not self.is_recurring:
            return TimeRange(self.start, self.end)
        last_start = max(self.recurrence_end, self.start)
        return TimeRange(self.start, last_start + (self.end - self.start))


@dataclass(frozen=True)
class Occurrence:
    reservation_id: Optional[int]
    resource_id: Optional[int]
    start: datetime
    end: datetime
    status: str
    actor: ActorRef
    reason: str = ''
    event_type: str = ''

    @property
    def range(self) -> TimeRange:
        return TimeRange(self.start, self.end)

    def overlaps(self, other) -> bool:
        return self.start < other.end and self.end > other.start


def _occurrence(snapshot: ReservationSnapshot, start: datetime, end: datetime) -> Occurrence:
    return Occurrence(
        reservation_id=snapshot.reservation_id,
        resource_id=snapshot.resource_id,
        start=start,
        end=end,
        status=snapshot.status,
        actor=snapshot.actor,
        reason=snapshot.reason,
        event_type=snapshot.event_type,
    )


def expand(
    snapshot: ReservationSnapshot,
    window_start: datetime,
    window_end: datetime,
    tz: ZoneInfo,
    include_cancelled: bool = False,
) -> List[Occurrence]:
    """
    Occurrences of ``snapshot`` that intersect ``[window_start, window_end)``

    Recurring candidates are generated in ``tz`` so wall-clock times are
    kept across DST changes; candidates start no later than
    ``recurrence_end`` (inclusive) and strictly before ``window_end``.
    Occurrences whose start matches a cancelled exception are dropped
    unless ``include_cancelled`` is set.

    Raises InvalidRecurrenceRule when the rule cannot be expanded.
    """
    if window_start >= window_end:
        return []

    if not snapshot.is_recurring:
        if snapshot.start < window_end and snapshot.end > window_start:
            return [_occurrence(snapshot, snapshot.start, snapshot.end)]
        return []

    duration = snapshot.end - snapshot.start
    # A candidate can reach into the window while starting before it
    after = window_start - duration
    before = window_end
    if snapshot.recurrence_end is not None:
        before = min(before, snapshot.recurrence_end)
    if after > before:
        return []

    occurrences = []
    for start in snapshot.rule.starts_between(snapshot.start, tz, after, before):
        if start >= window_end:
            break
        end = (start.astimezone(tz) + duration).astimezone(dt_timezone.utc)
        if end <= window_start:
            continue
        if not include_cancelled and start in snapshot.cancelled_starts:
            continue
        occurrences.append(_occurrence(snapshot, start, end))
    return occurrences


def expand_all(
    snapshots: Iterable[ReservationSnapshot],
    window_start: datetime,
    window_end: datetime,
    tz: ZoneInfo,
) -> List[Occurrence]:
    occurrences: List[Occurrence] = []
    for snapshot in snapshots:
        occurrences.extend(expand(snapshot, window_start, window_end, tz))
    occurrences.sort(key=lambda o: (o.start, o.end, o.reservation_id or 0))
    return occurrences


def any_overlap(left: Sequence[Occurrence], right: Sequence) -> bool:
    """
    True when some interval of ``left`` overlaps some interval of ``right``

    Both sequences must be sorted by start; ``right`` items only need
    ``start`` and ``end`` attributes.
    """
    i = j = 0
    while i < len(left) and j < len(right):
        if left[i].start < right[j].end and right[j].start < left[i].end:
            return True
        if left[i].end <= right[j].end:
            i += 1
        else:
            j += 1
    return False
