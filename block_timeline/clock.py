"""Virtual playback clock.

The clock owns the playback position.  In :attr:`ClockMode.FRAME` the position
is an integer tick counter.  In :attr:`ClockMode.TIME` the position is the
elapsed wall-clock time in milliseconds, measured from an origin timestamp that
absorbs every paused interval, while a separate integer frame counter still
counts processed ticks.
"""
from __future__ import annotations

import math
from enum import Enum
from typing import Optional

from .utility import TimeSource, PerfCounterTimeSource


class ClockMode(str, Enum):
    FRAME = "frame"
    TIME = "time"


class Clock:
    """Frame counter plus pause-aware elapsed time.

    The clock starts paused; :meth:`resume` has to be called before wall time
    counts towards the elapsed value.
    """

    def __init__(
        self,
        mode: ClockMode = ClockMode.FRAME,
        tick_rate: float = 60.0,
        source: Optional[TimeSource] = None,
    ) -> None:
        self.mode = ClockMode(mode)
        self._source = source or PerfCounterTimeSource()
        self._tick_rate = self._check_rate(tick_rate)
        self.frame = 0
        self.elapsed = 0.0
        now = self._now_ms()
        self._origin = now
        self._pause_started: Optional[float] = now

    # Accessors ------------------------------------------------------------------
    @property
    def position(self) -> float:
        """Current value in the active unit."""
        if self.mode is ClockMode.TIME:
            return self.elapsed
        return self.frame

    @property
    def running(self) -> bool:
        return self._pause_started is None

    @property
    def tick_rate(self) -> float:
        return self._tick_rate

    @tick_rate.setter
    def tick_rate(self, rate: float) -> None:
        # only the divisor changes; elapsed time already accounted stays as is
        self._tick_rate = self._check_rate(rate)

    def frame_for(self, elapsed_ms: float) -> int:
        return math.floor(elapsed_ms * self._tick_rate / 1000.0)

    def ms_for(self, frame: int) -> float:
        return frame * 1000.0 / self._tick_rate

    # Pause accounting -----------------------------------------------------------
    def pause(self) -> None:
        if self._pause_started is None:
            self._pause_started = self._now_ms()

    def resume(self) -> None:
        if self._pause_started is None:
            return
        self._origin += self._now_ms() - self._pause_started
        self._pause_started = None

    # Ticking ------------------------------------------------------------------------
    def refresh(self) -> None:
        """Re-read wall time (TIME mode only). Paused clocks keep their value."""
        if self.mode is ClockMode.TIME and self.running:
            self.elapsed = self._now_ms() - self._origin

    def advance(self, simulate: bool = False) -> None:
        """Step one tick.

        With ``simulate`` the elapsed value is synthesized from the frame
        counter instead of the wall clock, so fast-forward does not depend on
        real speed.
        """
        self.frame += 1
        if self.mode is ClockMode.TIME and simulate:
            self.elapsed = self.ms_for(self.frame)

    def reset(self) -> None:
        self.seek(0)

    def seek(self, value: float) -> None:
        """Place the clock at ``value`` and rebase the wall-clock origin on it."""
        now = self._now_ms()
        if self.mode is ClockMode.TIME:
            self.elapsed = float(value)
            self.frame = self.frame_for(self.elapsed)
        else:
            self.frame = int(value)
            self.elapsed = self.ms_for(self.frame)
        self._origin = now - self.elapsed
        if self._pause_started is not None:
            self._pause_started = now

    # internal -----------------------------------------------------------------------
    def _now_ms(self) -> float:
        return self._source.now() * 1000.0

    @staticmethod
    def _check_rate(rate: float) -> float:
        rate = float(rate)
        if not (math.isfinite(rate) and rate > 0):
            raise ValueError(f"tick rate must be finite and > 0, got {rate}.")
        return rate
