"""
Base Domain Classes

Building blocks shared by the reservation and check-in domains:
- ValueObject: Immutable objects compared by value
- EventRecorder: Mixin that lets a model collect domain events
- DomainEvent: Events that represent something that happened
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional
from uuid import UUID, uuid4

from django.utils import timezone


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects

    Value objects are immutable and have no identity.
    Two value objects are equal if all their attributes are equal.
    """
    pass


class EventRecorder:
    """
    Mixin for aggregate roots backed by Django models

    Events are kept on the instance until a unit of work collects them
    and publishes them after the surrounding transaction commits.
    """

    def _pending_events(self) -> List['DomainEvent']:
        if not hasattr(self, '_recorded_events'):
            self._recorded_events = []
        return self._recorded_events

    def add_event(self, event: 'DomainEvent'):
        """Add a domain event to be published"""
        self._pending_events().append(event)

    def clear_events(self):
        """Clear all collected events (called after publishing)"""
        self._pending_events().clear()

    @property
    def events(self) -> List['DomainEvent']:
        """Get copy of collected events"""
        return list(self._pending_events())


@dataclass
class DomainEvent:
    """
    Base class for domain events

    Domain events represent something that happened in the domain.
    They are used to communicate between bounded contexts.
    """
    event_id: UUID = field(default_factory=uuid4, init=False)
    occurred_at: datetime = field(default_factory=timezone.now, init=False)
    aggregate_id: Optional[int] = field(default=None, init=False)

    def to_dict(self) -> dict:
        """Convert event to dictionary for serialization"""
        return {
            'event_id': str(self.event_id),
            'event_type': self.__class__.__name__,
            'occurred_at': self.occurred_at.isoformat(),
            'aggregate_id': self.aggregate_id,
        }
