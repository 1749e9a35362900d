"""Outbound notifications to the host that embeds the timeline.

The host (an editor page, a console, a test) only ever receives messages;
nothing it does is awaited by the tick pipeline.
"""
from __future__ import annotations

import queue
import threading
from typing import Any, Callable, Optional, Protocol, Tuple

from .utility import _logger

TIMELINE_READY = "timelineReady"
TIMELINE_PLAYING = "timelinePlaying"
SET_TIMELINE_FRAME = "setTimelineFrame"
TIMELINE_FUNCTION_MISSING = "timelineFunctionMissing"
INIT_TIMELINE = "initTimeline"

Sink = Callable[[str, Any], None]


class HostLink(Protocol):
    """Protocol for fire-and-forget notification channels."""

    def notify(self, message: str, payload: Any) -> None:
        """Deliver ``message`` with ``payload``; must not block."""


class NullHostLink:
    """Drops every notification (debug-logged)."""

    def notify(self, message: str, payload: Any) -> None:
        _logger.debug("host <- %s(%r)", message, payload)


class QueuedHostLink:
    """Hands notifications to ``sink`` from a worker thread.

    :meth:`notify` only enqueues, so a slow or failing sink cannot stall the
    caller.  Sink errors are logged and the worker keeps going.
    """

    _CLOSE = object()

    def __init__(self, sink: Sink, name: str = "HostLinkThread") -> None:
        self._sink = sink
        self._q: "queue.Queue[Tuple[Any, Any]]" = queue.Queue()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)
        self._thread.start()

    def notify(self, message: str, payload: Any) -> None:
        self._q.put((message, payload))

    def close(self, timeout: Optional[float] = 1.0) -> None:
        """Deliver what is queued, then stop the worker."""
        self._q.put((self._CLOSE, None))
        self._thread.join(timeout=timeout)

    def _run(self) -> None:
        while True:
            message, payload = self._q.get()
            if message is self._CLOSE:
                break
            try:
                self._sink(message, payload)
            except Exception:
                _logger.exception("Host sink failed for '%s'.", message)


def log_sink(message: str, payload: Any) -> None:
    """Sink that writes notifications to the timeline log."""
    if message == SET_TIMELINE_FRAME:
        _logger.debug("host <- %s(%r)", message, payload)
    else:
        _logger.info("host <- %s(%r)", message, payload)
