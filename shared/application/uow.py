"""
Unit of Work Pattern

Manages database transactions and ensures that domain events
are published only after successful transaction commit.

Two implementations share one interface so that a workflow can be run
for real (DjangoUnitOfWork) or as a dry run (PreviewUnitOfWork) through
the same code path.
"""

from abc import ABC, abstractmethod
from typing import Iterable, List, Optional
import logging

from django.db import transaction
from django.db.utils import NotSupportedError

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


def lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""
    if not transaction.get_connection().in_atomic_block:
        return queryset
    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


class AbstractUnitOfWork(ABC):
    """Abstract Unit of Work pattern"""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.commit()
        else:
            self.rollback()

    @abstractmethod
    def commit(self):
        """Commit the transaction"""

    @abstractmethod
    def rollback(self):
        """Rollback the transaction"""

    @abstractmethod
    def lock(self, queryset):
        """Return ``queryset`` with row locks applied where supported"""

    @abstractmethod
    def save(self, instance, update_fields: Optional[Iterable[str]] = None):
        """Persist changes made to a model instance"""

    @abstractmethod
    def collect_events(self, aggregate):
        """Collect events from aggregate root"""


class DjangoUnitOfWork(AbstractUnitOfWork):
    """
    Django implementation of Unit of Work

    Manages Django database transactions and ensures domain events
    are published after successful commit.

    Usage:
        with DjangoUnitOfWork() as uow:
            resource = uow.lock(Resource.objects.filter(pk=resource_id)).get()
            reservation.approve()
            uow.save(reservation, update_fields=["status"])
            uow.collect_events(reservation)
            # Transaction commits here
        # Events are published after commit
    """

    def __init__(self):
        self._events: List[DomainEvent] = []
        self._transaction = None

    def __enter__(self):
        """Start database transaction"""
        self._transaction = transaction.atomic()
        self._transaction.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Complete or rollback transaction"""
        try:
            if exc_type is None:
                self.commit()
            else:
                self.rollback()
        finally:
            if self._transaction:
                self._transaction.__exit__(exc_type, exc_val, exc_tb)

    def commit(self):
        """
        Commit changes and publish events

        Events are published using Django's transaction.on_commit()
        to ensure they're only sent after database commit succeeds.
        """
        logger.debug(f"Committing transaction with {len(self._events)} events")

        events = self._events.copy()
        self._events.clear()

        if events:
            transaction.on_commit(lambda: self._publish_events(events))

    def rollback(self):
        """Rollback changes and discard events"""
        logger.warning(f"Rolling back transaction, discarding {len(self._events)} events")
        self._events.clear()

    def lock(self, queryset):
        return lock_queryset_if_possible(queryset)

    def save(self, instance, update_fields=None):
        if update_fields is not None:
            instance.save(update_fields=list(update_fields))
        else:
            instance.save()

    def collect_events(self, aggregate):
        """
        Collect events from aggregate root

        Extracts all domain events from the aggregate and
        clears them from the aggregate.
        """
        if hasattr(aggregate, 'events'):
            new_events = aggregate.events
            if new_events:
                self._events.extend(new_events)
                aggregate.clear_events()
                logger.debug(
                    f"Collected {len(new_events)} events from "
                    f"{aggregate.__class__.__name__} (ID: {aggregate.pk})"
                )

    def _publish_events(self, events: List[DomainEvent]):
        """
        Publish collected events to message bus

        Called after successful transaction commit.
        """
        from shared.application.message_bus import message_bus

        logger.info(f"Publishing {len(events)} domain events after commit")
        message_bus.publish_events(events)


class PreviewUnitOfWork(AbstractUnitOfWork):
    """
    Dry-run Unit of Work

    Opens no transaction, takes no locks and drops every write and event,
    so a workflow run through it leaves storage untouched.
    """

    def __init__(self):
        self.discarded_writes = 0

    def commit(self):
        logger.debug(f"Preview finished, {self.discarded_writes} writes discarded")

    def rollback(self):
        pass

    def lock(self, queryset):
        return queryset

    def save(self, instance, update_fields=None):
        self.discarded_writes += 1

    def collect_events(self, aggregate):
        if hasattr(aggregate, 'clear_events'):
            aggregate.clear_events()
