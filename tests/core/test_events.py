"""Tests for event bus."""

from carforge.core.events import EventBus, EventType


def test_subscribe_publish():
    bus = EventBus()
    received = []
    bus.subscribe(EventType.INTERACTION_CHANGED, lambda **kw: received.append(kw))
    bus.publish(EventType.INTERACTION_CHANGED, param="wheel_base")
    assert len(received) == 1
    assert received[0] == {"param": "wheel_base"}


def test_unsubscribe():
    bus = EventBus()
    received = []
    handler = lambda **kw: received.append(kw)
    bus.subscribe(EventType.STATE_CHANGED, handler)
    bus.unsubscribe(EventType.STATE_CHANGED, handler)
    bus.publish(EventType.STATE_CHANGED, state=None, context={})
    assert len(received) == 0


def test_subscribe_returns_unsubscriber():
    bus = EventBus()
    received = []
    unsubscribe = bus.subscribe(EventType.GEOMETRY_UPDATED, lambda **kw: received.append(1))
    unsubscribe()
    bus.publish(EventType.GEOMETRY_UPDATED, scene=None)
    assert received == []


def test_handlers_called_in_subscription_order():
    bus = EventBus()
    order = []
    bus.subscribe(EventType.STATE_CHANGED, lambda **kw: order.append("first"))
    bus.subscribe(EventType.STATE_CHANGED, lambda **kw: order.append("second"))
    bus.publish(EventType.STATE_CHANGED, state=None, context={})
    assert order == ["first", "second"]


def test_handler_may_unsubscribe_during_publish():
    bus = EventBus()
    calls = []

    def once(**kw):
        calls.append(1)
        unsubscribe()

    unsubscribe = bus.subscribe(EventType.PROFILE_ADDED, once)
    bus.publish(EventType.PROFILE_ADDED, index=0, name="a")
    bus.publish(EventType.PROFILE_ADDED, index=1, name="b")
    assert calls == [1]


def test_different_events_independent():
    bus = EventBus()
    received = []
    bus.subscribe(EventType.PROFILE_REMOVED, lambda **kw: received.append("removed"))
    bus.publish(EventType.PROFILE_ACTIVATED, index=0, name="a")
    assert len(received) == 0


def test_clear():
    bus = EventBus()
    bus.subscribe(EventType.STATE_CHANGED, lambda **kw: None)
    bus.clear()
    # Should not raise
    bus.publish(EventType.STATE_CHANGED)
