import pytest

from block_timeline.events import HOOKS, EventHub


def test_fixed_hook_names() -> None:
    assert HOOKS == ("start", "frameStart", "blockStart", "blockEnd", "frameEnd", "end", "beforeLoop")
    with pytest.raises(ValueError):
        EventHub().on("tick", lambda: None)


def test_one_listener_per_hook() -> None:
    hub = EventHub()
    calls = []
    hub.on("start", lambda: calls.append("first"))
    hub.on("start", lambda: calls.append("second"))
    hub.fire("start")
    assert calls == ["second"]

    hub.on("start", None)
    hub.fire("start")
    assert calls == ["second"]


def test_fire_without_listener_is_a_noop() -> None:
    hub = EventHub()
    for name in HOOKS:
        hub.fire(name)


def test_listener_arguments_and_failures() -> None:
    hub = EventHub()
    seen = []
    hub.on("blockStart", seen.append)
    hub.fire("blockStart", "block")
    assert seen == ["block"]

    def boom() -> None:
        raise RuntimeError("listener bug")

    hub.on("end", boom)
    hub.fire("end")  # logged, not raised
