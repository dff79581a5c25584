"""
Common Value Objects

Value objects used across the reservation and check-in domains:
- ActorRef: The person or group that owns a reservation or check-in
- TimeRange: A half-open interval between two aware datetimes
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, List

from shared.domain.base import ValueObject


PERSON = 'PERSON'
GROUP = 'GROUP'
ACTOR_KINDS = (PERSON, GROUP)


@dataclass(frozen=True)
class ActorRef(ValueObject):
    """
    Reservable actor

    A tagged reference: ``kind`` is PERSON or GROUP and ``id`` is the
    identifier of the user or group it points to, stored as text.
    """
    kind: str
    id: str

    def __post_init__(self):
        if self.kind not in ACTOR_KINDS:
            raise ValueError(f"Unsupported actor kind: {self.kind}")
        if not self.id:
            raise ValueError("Actor id is required")

    @classmethod
    def person(cls, user_id) -> 'ActorRef':
        return cls(PERSON, str(user_id))

    @classmethod
    def group(cls, group_id) -> 'ActorRef':
        return cls(GROUP, str(group_id))

    def __str__(self):
        return f"{self.kind}:{self.id}"


@dataclass(frozen=True)
class TimeRange(ValueObject):
    """
    Time range value object

    Represents [start, end): start is inclusive, end is exclusive.
    Used for occurrences, unavailable slots and reservation windows.
    """
    start: datetime
    end: datetime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start ({self.start}) must be before end ({self.end})")

    def overlaps_with(self, other: 'TimeRange') -> bool:
        """
        Check if this range overlaps with another

        Adjacent ranges (one ends exactly when the other starts) do not overlap.
        """
        if not isinstance(other, TimeRange):
            raise TypeError("Can only check overlap with another TimeRange")

        # Overlap formula: start1 < end2 AND end1 > start2
        return self.start < other.end and self.end > other.start

    def touches(self, other: 'TimeRange') -> bool:
        """True when the ranges overlap or share a boundary."""
        return self.start <= other.end and other.start <= self.end

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment < self.end

    def clip(self, window: 'TimeRange'):
        """Intersection with ``window``, or None when they do not overlap."""
        if not self.overlaps_with(window):
            return None
        return TimeRange(max(self.start, window.start), min(self.end, window.end))

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def __str__(self):
        return f"{self.start.isoformat()} - {self.end.isoformat()}"

    def __repr__(self):
        return f"TimeRange({self.start!r}, {self.end!r})"


def merge_ranges(ranges: Iterable[TimeRange]) -> List[TimeRange]:
    """
    Merge overlapping and touching ranges

    Returns a sorted list of pairwise disjoint, non-touching ranges that
    cover exactly the same instants as the input.
    """
    merged: List[TimeRange] = []
    for current in sorted(ranges, key=lambda r: (r.start, r.end)):
        if merged and merged[-1].touches(current):
            last = merged[-1]
            merged[-1] = TimeRange(last.start, max(last.end, current.end))
        else:
            merged.append(current)
    return merged
