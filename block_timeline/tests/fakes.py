"""Test doubles shared by the timeline tests."""
from __future__ import annotations

from typing import Any, Callable, List, Optional, Tuple


class FakeTimeSource:
    def __init__(self, t: float = 0.0) -> None:
        self.t = t

    def now(self) -> float:
        return self.t


class FakeDriver:
    def __init__(self) -> None:
        self.calls: List[Tuple[str, Optional[float]]] = []
        self.target: Optional[Callable[[], None]] = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self, interval: float, target: Callable[[], None]) -> None:
        self.calls.append(("start", interval))
        self.target = target
        self._running = True

    def stop(self) -> None:
        self.calls.append(("stop", None))
        self._running = False

    def reschedule(self, interval: float) -> None:
        self.calls.append(("reschedule", interval))


class RecordingHost:
    def __init__(self) -> None:
        self.messages: List[Tuple[str, Any]] = []

    def notify(self, message: str, payload: Any) -> None:
        self.messages.append((message, payload))

    def payloads(self, message: str) -> List[Any]:
        return [p for m, p in self.messages if m == message]
