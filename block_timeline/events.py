"""
events.py  – lifecycle hooks

• A fixed set of named hooks fired by the timeline during a tick.
• One listener per hook; registering again replaces the previous one.
• Firing a hook without listener does nothing.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from .utility import _logger

Listener = Callable[..., Any]

START = "start"
FRAME_START = "frameStart"
BLOCK_START = "blockStart"
BLOCK_END = "blockEnd"
FRAME_END = "frameEnd"
END = "end"
BEFORE_LOOP = "beforeLoop"

HOOKS = (START, FRAME_START, BLOCK_START, BLOCK_END, FRAME_END, END, BEFORE_LOOP)


class EventHub:
    def __init__(self) -> None:
        self._listeners: Dict[str, Optional[Listener]] = dict.fromkeys(HOOKS)

    def on(self, name: str, listener: Optional[Listener]) -> None:
        """Register ``listener`` for hook ``name`` (``None`` clears it)."""
        if name not in self._listeners:
            raise ValueError(f"Unknown timeline event '{name}'; expected one of {', '.join(HOOKS)}.")
        self._listeners[name] = listener

    def listener(self, name: str) -> Optional[Listener]:
        return self._listeners.get(name)

    def fire(self, name: str, *args: Any) -> None:
        listener = self._listeners.get(name)
        if listener is None:
            return
        try:
            listener(*args)
        except Exception:  # listener faults never stop the timeline
            _logger.exception("Listener for '%s' failed.", name)
