"""
commands.py  – inbound control channel

• Maps control messages from the host onto timeline operations.
• Exposes a thread-safe queue so any source (console, socket, editor
  bridge) can post commands that the owner thread applies in order.
"""

from __future__ import annotations

import queue
from enum import Enum
from typing import Any, Mapping, Optional, Tuple

from .block_loader import BlockValidationError
from .timeline import Timeline
from .utility import _logger


class Command(str, Enum):
    JUMP_TO = "jumpTo"
    SYNC_TIMELINE = "syncTimeline"
    PLAY = "play"
    STOP = "stop"
    PAUSE = "pause"
    SET_TICK_RATE = "setTickRate"

    @classmethod
    def parse(cls, name: str) -> "Command":
        """Look up a command by wire name, including the legacy aliases."""
        name = _ALIASES.get(name, name)
        return cls(name)


_ALIASES = {
    "jumpToFrame": "jumpTo",
    "playTimeline": "play",
    "stopTimeline": "stop",
    "pauseTimeline": "pause",
}

Message = Tuple[Command, Any]


class CommandChannel:
    """Thread-safe FIFO of ``(command, payload)`` pairs."""

    def __init__(self) -> None:
        self._fifo: "queue.Queue[Message]" = queue.Queue()

    def post(self, command: Command, payload: Any = None) -> None:
        self._fifo.put((command, payload))

    def post_message(self, message: Mapping[str, Any]) -> bool:
        """Enqueue a ``{"messageType": ..., "message": ...}`` dict.

        Unknown message types are logged and dropped.
        """
        try:
            command = Command.parse(message["messageType"])
        except (KeyError, TypeError, ValueError):
            _logger.warning("Dropping unknown control message: %r", message)
            return False
        self.post(command, message.get("message"))
        return True

    def poll(self, timeout: Optional[float] = None) -> Optional[Message]:
        """Return the next message or None (non-blocking unless ``timeout``)."""
        try:
            if timeout is None:
                return self._fifo.get_nowait()
            return self._fifo.get(timeout=timeout)
        except queue.Empty:
            return None

    def drain(self, timeline: Timeline) -> int:
        """Apply every queued message to ``timeline``; returns how many ran."""
        count = 0
        while True:
            msg = self.poll()
            if msg is None:
                return count
            dispatch(timeline, *msg)
            count += 1


def dispatch(timeline: Timeline, command: Command, payload: Any = None) -> bool:
    """Apply one control command. Returns ``False`` if it was rejected."""
    if command is Command.JUMP_TO:
        try:
            target = float(payload)
        except (TypeError, ValueError):
            _logger.warning("jumpTo needs a numeric target, got %r.", payload)
            return False
        return timeline.jump_to(target)
    if command is Command.SYNC_TIMELINE:
        try:
            return timeline.sync_timeline(payload)
        except BlockValidationError as e:
            _logger.error("syncTimeline rejected: %s", e)
            return False
    if command is Command.PLAY:
        if timeline.position >= timeline.end:
            timeline.restart()
        else:
            timeline.play()
        return True
    if command is Command.STOP:
        timeline.stop()
        return True
    if command is Command.PAUSE:
        timeline.pause()
        return True
    if command is Command.SET_TICK_RATE:
        return timeline.set_tick_rate(payload)
    _logger.warning("Unknown command: %s", command)
    return False
