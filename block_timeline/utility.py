"""Logging and time-source helpers shared by the timeline modules."""
import logging
import time
import sys
from typing import Protocol

# -----------------------------------------------------------------------------
# Logging helpers
# -----------------------------------------------------------------------------
LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

_logger = logging.getLogger("BlockTimeline")
_logger.setLevel(logging.INFO)
if not _logger.handlers:  # module may be reloaded by test runners
    _ch = logging.StreamHandler(sys.stdout)
    _ch.setFormatter(logging.Formatter("[%(asctime)s] %(levelname)s: %(message)s"))
    _logger.addHandler(_ch)

def set_log_level(name: str) -> None:
    _logger.setLevel(LOG_LEVELS[name])

# -----------------------------------------------------------------------------
# Utility: time source abstraction (testability)
# -----------------------------------------------------------------------------
class TimeSource(Protocol):  # structural type
    def now(self) -> float:
        """Monotonic seconds."""
        ...

class PerfCounterTimeSource:
    def now(self) -> float:
        return time.perf_counter()
