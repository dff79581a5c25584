from dataclasses import dataclass

import pytest

from shared.application.message_bus import MessageBus
from shared.application.uow import PreviewUnitOfWork
from shared.domain.base import DomainEvent, EventRecorder


@dataclass
class SomethingHappened(DomainEvent):
    name: str = ""


class Aggregate(EventRecorder):
    pk = 1

    def __init__(self):
        self.saved = 0

    def save(self, **kwargs):
        self.saved += 1


def test_preview_unit_of_work_drops_writes_and_events():
    aggregate = Aggregate()
    aggregate.add_event(SomethingHappened(name="first"))

    with PreviewUnitOfWork() as uow:
        uow.save(aggregate, update_fields=["status"])
        uow.collect_events(aggregate)

    assert aggregate.saved == 0
    assert uow.discarded_writes == 1
    assert aggregate.events == []


def test_message_bus_keeps_publishing_when_a_handler_fails():
    bus = MessageBus()
    received = []

    @bus.subscribe(SomethingHappened)
    def broken(event):
        raise RuntimeError("boom")

    @bus.subscribe(SomethingHappened)
    def recorder(event):
        received.append(event.name)

    bus.publish_events([SomethingHappened(name="a"), SomethingHappened(name="b")])

    assert received == ["a", "b"]


def test_registering_a_handler_twice_is_a_no_op():
    bus = MessageBus()

    def handler(event):
        pass

    bus.register_event_handler(SomethingHappened, handler)
    bus.register_event_handler(SomethingHappened, handler)

    assert bus.handlers_for(SomethingHappened) == [handler]


@pytest.mark.django_db(transaction=True)
def test_django_unit_of_work_publishes_after_commit(monkeypatch):
    from shared.application import message_bus as bus_module
    from shared.application.uow import DjangoUnitOfWork

    bus = MessageBus()
    received = []
    bus.subscribe(SomethingHappened)(lambda event: received.append(event.name))
    monkeypatch.setattr(bus_module, "message_bus", bus)

    aggregate = Aggregate()
    aggregate.add_event(SomethingHappened(name="committed"))
    with DjangoUnitOfWork() as uow:
        uow.collect_events(aggregate)
        assert received == []

    assert received == ["committed"]


@pytest.mark.django_db(transaction=True)
def test_django_unit_of_work_discards_events_on_error(monkeypatch):
    from shared.application import message_bus as bus_module
    from shared.application.uow import DjangoUnitOfWork

    bus = MessageBus()
    received = []
    bus.subscribe(SomethingHappened)(lambda event: received.append(event.name))
    monkeypatch.setattr(bus_module, "message_bus", bus)

    aggregate = Aggregate()
    aggregate.add_event(SomethingHappened(name="lost"))
    with pytest.raises(RuntimeError):
        with DjangoUnitOfWork() as uow:
            uow.collect_events(aggregate)
            raise RuntimeError("store unavailable")

    assert received == []
