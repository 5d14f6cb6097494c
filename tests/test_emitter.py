"""Tests for the event emitter."""

import pytest

from buildconf.emitter import Emitter


@pytest.mark.unit
class TestEmitter:
    """Test listener and queue delivery."""

    def test_listeners_called_in_order(self) -> None:
        emitter: Emitter[int] = Emitter()
        calls: list[str] = []
        emitter.on(lambda value: calls.append(f"first:{value}"))
        emitter.on(lambda value: calls.append(f"second:{value}"))

        emitter.fire(1)

        assert calls == ["first:1", "second:1"]

    def test_dispose_twice_is_safe(self) -> None:
        emitter: Emitter[int] = Emitter()
        dispose = emitter.on(lambda value: None)

        dispose()
        dispose()

        assert emitter.listeners == []

    def test_listener_can_dispose_during_fire(self) -> None:
        emitter: Emitter[int] = Emitter()
        calls: list[int] = []
        dispose = None

        def once(value: int) -> None:
            calls.append(value)
            dispose()

        dispose = emitter.on(once)
        emitter.fire(1)
        emitter.fire(2)

        assert calls == [1]

    def test_map_projects_events(self) -> None:
        emitter: Emitter[dict] = Emitter()
        names: list[str] = []
        emitter.map(lambda event: event["name"])(names.append)

        emitter.fire({"name": "debug"})

        assert names == ["debug"]

    async def test_queue_subscribers(self) -> None:
        emitter: Emitter[int] = Emitter()
        first = emitter.subscribe()
        second = emitter.subscribe()

        emitter.fire(7)

        assert first.get_nowait() == 7
        assert second.get_nowait() == 7
