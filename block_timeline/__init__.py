"""Block-based playback scheduler."""
from .block_loader import Block, BlockLoader, BlockValidationError
from .block_registry import BlockRegistry
from .clock import Clock, ClockMode
from .commands import Command, CommandChannel, dispatch
from .config import TimelineConfig
from .driver import RecurrentDriver
from .events import EventHub, HOOKS
from .host import HostLink, NullHostLink, QueuedHostLink
from .references import CallReference, ReferenceSyntaxError, parse_reference
from .timeline import PlaybackState, Timeline

__all__ = [
    "Block",
    "BlockLoader",
    "BlockRegistry",
    "BlockValidationError",
    "CallReference",
    "Clock",
    "ClockMode",
    "Command",
    "CommandChannel",
    "EventHub",
    "HOOKS",
    "HostLink",
    "NullHostLink",
    "PlaybackState",
    "QueuedHostLink",
    "RecurrentDriver",
    "ReferenceSyntaxError",
    "Timeline",
    "TimelineConfig",
    "dispatch",
    "parse_reference",
]
