"""Unit tests for the :mod:`scenemodel.events` module."""

import pytest

from scenemodel import EventBus, NodeChanged, SceneChanged


def test_publish_delivers_in_subscription_order() -> None:
    bus = EventBus()
    received = []
    bus.subscribe(lambda event: received.append(("first", event)))
    bus.subscribe(lambda event: received.append(("second", event)))

    bus.publish(NodeChanged(id="n1"))

    assert received == [("first", NodeChanged(id="n1")), ("second", NodeChanged(id="n1"))]


def test_disposer_is_idempotent(recorder) -> None:
    bus = EventBus()
    dispose = bus.subscribe(recorder)

    dispose()
    dispose()
    bus.publish(SceneChanged())

    assert recorder.events == []
    assert len(bus) == 0


def test_same_listener_can_subscribe_twice(recorder) -> None:
    bus = EventBus()
    dispose_first = bus.subscribe(recorder)
    bus.subscribe(recorder)

    bus.publish(SceneChanged())
    dispose_first()
    bus.publish(SceneChanged())

    assert len(recorder.events) == 3


def test_listener_disposing_itself_does_not_skip_others(recorder) -> None:
    bus = EventBus()
    disposers = []

    def one_shot(event) -> None:
        disposers[0]()

    disposers.append(bus.subscribe(one_shot))
    bus.subscribe(recorder)

    bus.publish(SceneChanged())
    bus.publish(SceneChanged())

    assert len(recorder.events) == 2
    assert len(bus) == 1


def test_listener_exceptions_propagate() -> None:
    bus = EventBus()

    def broken(event) -> None:
        raise RuntimeError("listener failed")

    bus.subscribe(broken)

    with pytest.raises(RuntimeError, match="listener failed"):
        bus.publish(SceneChanged())


def test_subscribe_rejects_non_callables() -> None:
    with pytest.raises(TypeError):
        EventBus().subscribe("not callable")  # type: ignore[arg-type]
