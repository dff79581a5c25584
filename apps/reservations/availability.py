"""Availability queries over a resource pool.

All functions here are read-only projections over reservations and their
exceptions. Each call reads inside one transaction; on PostgreSQL that
transaction runs at REPEATABLE READ so every query of the call sees the
same snapshot. Other backends keep their default isolation.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from django.db import DEFAULT_DB_ALIAS, connections, transaction  # type: ignore

from shared.domain.value_objects import ActorRef, TimeRange, merge_ranges

from .conf import reservation_settings
from .domain.occurrences import Occurrence, expand_all
from .models import Reservation

logger = logging.getLogger(__name__)


def _use_snapshot(connection) -> None:
    if connection.vendor == "postgresql":
        with connection.cursor() as cursor:
            cursor.execute("SET TRANSACTION ISOLATION LEVEL REPEATABLE READ")


@contextmanager
def consistent_read(using: str = DEFAULT_DB_ALIAS):
    """Atomic block whose queries share one snapshot where the backend allows it.

    The isolation level can only be set before the first query of a
    transaction, so it is applied only when this block opens the outermost
    transaction.
    """
    connection = connections[using]
    outermost = not connection.in_atomic_block
    with transaction.atomic(using=using):
        if outermost:
            _use_snapshot(connection)
        yield


@dataclass
class PoolCalendar:
    pool_id: int
    capacity: int
    window: TimeRange
    resource_ids: List[int] = field(default_factory=list)
    unavailable_slots: List[TimeRange] = field(default_factory=list)
    full_capacity_slots: List[TimeRange] = field(default_factory=list)
    own_occurrences: List[Occurrence] = field(default_factory=list)


class AvailabilityIndex:
    """Blocking occurrences, unavailable slots and calendars for a pool."""

    def blocking_occurrences(
        self,
        pool,
        window_start: datetime,
        window_end: datetime,
        *,
        excluding_actor: Optional[ActorRef] = None,
        queryset=None,
    ) -> List[Occurrence]:
        """PENDING and APPROVED occurrences in the pool intersecting the window."""
        if window_start >= window_end:
            return []
        qs = queryset if queryset is not None else Reservation.objects.all()
        reservations = (
            qs.in_pool(pool)
            .blocking()
            .excluding_actor(excluding_actor)
            .possibly_overlapping(window_start, window_end)
            .with_exceptions()
        )
        conf = reservation_settings()
        return expand_all((r.snapshot() for r in reservations), window_start, window_end, conf.time_zone)

    def occurrences_by_resource(self, occurrences: List[Occurrence]) -> Dict[int, List[Occurrence]]:
        grouped: Dict[int, List[Occurrence]] = defaultdict(list)
        for occurrence in occurrences:
            grouped[occurrence.resource_id].append(occurrence)
        return grouped

    def unavailable_slots(
        self,
        pool,
        window_start: datetime,
        window_end: datetime,
        excluding_actor: Optional[ActorRef] = None,
    ) -> List[TimeRange]:
        """
        Merged union of blocking occurrences of every resource in the pool

        The requesting actor's own occurrences are left out; slots are
        clipped to the window and touching slots collapse into one.
        """
        if window_start >= window_end:
            return []
        window = TimeRange(window_start, window_end)
        with consistent_read():
            occurrences = self.blocking_occurrences(
                pool, window_start, window_end, excluding_actor=excluding_actor
            )
        return merge_ranges(o.range.clip(window) for o in occurrences)

    def actor_occurrences(
        self,
        actor: ActorRef,
        pool,
        window_start: datetime,
        window_end: datetime,
    ) -> List[Occurrence]:
        """The actor's own PENDING and APPROVED occurrences in the pool, by start."""
        if window_start >= window_end:
            return []
        with consistent_read():
            return self.blocking_occurrences(
                pool,
                window_start,
                window_end,
                queryset=Reservation.objects.for_actor(actor),
            )

    def full_capacity_slots(
        self,
        pool,
        window_start: datetime,
        window_end: datetime,
        excluding_actor: Optional[ActorRef] = None,
    ) -> List[TimeRange]:
        """Ranges during which every active resource of the pool is taken."""
        if window_start >= window_end:
            return []
        window = TimeRange(window_start, window_end)
        with consistent_read():
            resource_ids = list(pool.bookable_resources().values_list("id", flat=True))
            occurrences = self.blocking_occurrences(
                pool, window_start, window_end, excluding_actor=excluding_actor
            )
        if not resource_ids:
            return [window]
        return self._fully_booked(occurrences, set(resource_ids), window)

    def calendar(self, pool, actor: ActorRef, window_start: datetime, window_end: datetime) -> PoolCalendar:
        """Everything a booking calendar needs, read in one transaction."""
        window = TimeRange(window_start, window_end)
        with consistent_read():
            resource_ids = list(pool.bookable_resources().values_list("id", flat=True))
            others = self.blocking_occurrences(pool, window_start, window_end, excluding_actor=actor)
            own = self.blocking_occurrences(
                pool, window_start, window_end, queryset=Reservation.objects.for_actor(actor)
            )
        logger.debug(
            f"Calendar for pool {pool.pk}: {len(others)} blocking and {len(own)} own occurrences"
        )
        full = self._fully_booked(others, set(resource_ids), window) if resource_ids else [window]
        return PoolCalendar(
            pool_id=pool.pk,
            capacity=pool.capacity,
            window=window,
            resource_ids=resource_ids,
            unavailable_slots=merge_ranges(o.range.clip(window) for o in others),
            full_capacity_slots=full,
            own_occurrences=own,
        )

    def _fully_booked(self, occurrences: List[Occurrence], resource_ids: set, window: TimeRange) -> List[TimeRange]:
        # Per-resource busy time first, so overlapping reservations on one
        # unit are counted once.
        busy = [
            busy_range
            for resource_id, items in self.occurrences_by_resource(occurrences).items()
            if resource_id in resource_ids
            for busy_range in merge_ranges(o.range.clip(window) for o in items)
        ]
        # Ends sort before starts at the same instant
        points = sorted(
            [(r.start, 1) for r in busy] + [(r.end, -1) for r in busy],
            key=lambda p: (p[0], p[1]),
        )
        needed = len(resource_ids)
        slots: List[TimeRange] = []
        taken = 0
        opened_at = None
        for moment, delta in points:
            taken += delta
            if taken == needed and delta == 1:
                opened_at = moment
            elif opened_at is not None and taken < needed:
                if moment > opened_at:
                    slots.append(TimeRange(opened_at, moment))
                opened_at = None
        return merge_ranges(slots)


availability_index = AvailabilityIndex()
