import pytest

from modules.orders.events import OrderPaid, PaymentSlipUploaded
from shared.infrastructure.bus import InMemoryEventBus

pytestmark = pytest.mark.unit


class Recorder:
    def __init__(self):
        self.events = []

    def handle(self, event):
        self.events.append(event)


class Exploding:
    def handle(self, event):
        raise RuntimeError("handler down")


class TestInMemoryEventBus:
    def test_routes_by_event_type(self):
        bus = InMemoryEventBus()
        paid, slips = Recorder(), Recorder()
        bus.subscribe(OrderPaid, paid)
        bus.subscribe(PaymentSlipUploaded, slips)

        bus.publish(OrderPaid(aggregate_id=3))

        assert [e.aggregate_id for e in paid.events] == [3]
        assert slips.events == []

    def test_failing_handler_does_not_stop_the_others(self):
        bus = InMemoryEventBus()
        recorder = Recorder()
        bus.subscribe(OrderPaid, Exploding())
        bus.subscribe(OrderPaid, recorder)

        bus.publish(OrderPaid(aggregate_id=8))

        assert len(recorder.events) == 1

    def test_subscribing_twice_registers_once(self):
        bus = InMemoryEventBus()
        recorder = Recorder()
        bus.subscribe(OrderPaid, recorder)
        bus.subscribe(OrderPaid, recorder)

        bus.publish(OrderPaid(aggregate_id=1))

        assert len(recorder.events) == 1

    def test_clear_removes_subscriptions(self):
        bus = InMemoryEventBus()
        recorder = Recorder()
        bus.subscribe(OrderPaid, recorder)
        bus.clear()

        bus.publish(OrderPaid(aggregate_id=1))

        assert recorder.events == []


class TestDomainEvent:
    def test_event_name_is_class_name(self):
        assert OrderPaid(aggregate_id=1).event_name == "OrderPaid"

    def test_events_are_immutable(self):
        event = OrderPaid(aggregate_id=1)
        with pytest.raises(AttributeError):
            event.aggregate_id = 2

    def test_each_event_gets_its_own_id(self):
        assert OrderPaid(aggregate_id=1).event_id != OrderPaid(aggregate_id=1).event_id
