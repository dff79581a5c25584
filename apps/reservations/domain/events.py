"""
Reservation Domain Events

Events that represent things that have happened to reservations.
These are published after successful transaction commits.
"""

from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import List, Optional

from shared.domain.base import DomainEvent


@dataclass
class ReservationEvent(DomainEvent):
    reservation_id: int = 0

    def __post_init__(self):
        self.aggregate_id = self.reservation_id

    def to_dict(self) -> dict:
        data = super().to_dict()
        for item in fields(self):
            if not item.init:
                continue
            value = getattr(self, item.name)
            data[item.name] = value.isoformat() if isinstance(value, datetime) else value
        return data


@dataclass
class ReservationCreated(ReservationEvent):
    """
    Event: A reservation request was filed (status PENDING)

    Triggers:
    - Audit log entry for the admin queue
    """
    resource_id: int = 0
    actor: str = ''
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    recurring: bool = False


@dataclass
class ReservationApproved(ReservationEvent):
    """
    Event: An admin approved a reservation (PENDING -> APPROVED)

    Carries the ids rejected by the approval cascade.
    """
    auto_rejected_ids: List[int] = field(default_factory=list)


@dataclass
class ReservationRejected(ReservationEvent):
    """Event: An admin rejected a reservation (PENDING -> REJECTED)"""
    reason: str = ''


@dataclass
class ReservationAutoRejected(ReservationEvent):
    """Event: A pending reservation lost its resource to an approval"""
    approved_reservation_id: int = 0
    reason: str = ''


@dataclass
class ReservationCancelled(ReservationEvent):
    """Event: A reservation was cancelled (PENDING -> CANCELLED)"""
    reason: str = ''
    by_system: bool = False


@dataclass
class OccurrenceCancelled(ReservationEvent):
    """Event: One occurrence of a recurring reservation was cancelled"""
    original_start: Optional[datetime] = None
