from __future__ import annotations

import time
import threading
from typing import Callable, Optional, Protocol

from .utility import _logger

# -----------------------------------------------------------------------------
# Periodic tick driver
# -----------------------------------------------------------------------------
class TickDriver(Protocol):
    """Anything that can call ``target`` every ``interval`` seconds."""

    @property
    def running(self) -> bool: ...

    def start(self, interval: float, target: Callable[[], None]) -> None: ...

    def stop(self) -> None: ...

    def reschedule(self, interval: float) -> None: ...


class RecurrentDriver:
    """Calls a target at a fixed period from a daemon thread.

    Each start spawns a fresh worker with its own stop event, so a worker that
    was cancelled can never fire again after :meth:`stop` returns.  Ticks the
    worker falls behind on are dropped, not replayed in a burst.
    """
    def __init__(self, name: str = "TimelineDriver", join_timeout: float = 1.0):
        self.name = name
        self.join_timeout = join_timeout
        self.interval: Optional[float] = None
        self._target: Optional[Callable[[], None]] = None
        self._stop: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._stop is not None and not self._stop.is_set()

    def start(self, interval: float, target: Callable[[], None]) -> None:
        if interval <= 0:
            raise ValueError(f"Driver interval must be > 0, got {interval}.")
        with self._lock:
            self._start_locked(interval, target)

    def stop(self) -> None:
        with self._lock:
            self._cancel_locked()

    def reschedule(self, interval: float) -> None:
        """Restart the worker with a new period; keeps the old target."""
        if interval <= 0:
            raise ValueError(f"Driver interval must be > 0, got {interval}.")
        with self._lock:
            # a stopped driver stays stopped
            if not self.running or self._target is None:
                self.interval = interval
                return
            self._start_locked(interval, self._target)

    # internal ------------------------------------------------------------------
    def _start_locked(self, interval: float, target: Callable[[], None]) -> None:
        self._cancel_locked()
        self.interval = interval
        self._target = target
        self._stop = threading.Event()
        self._thread = threading.Thread(
            target=self._run,
            args=(interval, target, self._stop),
            name=self.name,
            daemon=True,
        )
        self._thread.start()

    def _cancel_locked(self) -> None:
        stop, thread = self._stop, self._thread
        self._stop = None
        self._thread = None
        if stop is None or thread is None:
            return
        stop.set()
        # a worker cancelling itself from inside its target exits after the call returns
        if thread is not threading.current_thread():
            thread.join(timeout=self.join_timeout)
            if thread.is_alive():
                _logger.warning("%s worker did not exit within %.1fs.", self.name, self.join_timeout)

    def _run(self, interval: float, target: Callable[[], None], stop: threading.Event) -> None:
        next_t = time.perf_counter() + interval
        while not stop.wait(max(0.0, next_t - time.perf_counter())):
            try:
                target()
            except Exception:
                _logger.exception("%s tick failed.", self.name)
            next_t += interval
            now = time.perf_counter()
            if next_t < now:
                next_t = now
