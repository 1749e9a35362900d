import math
from dataclasses import dataclass

from .clock import ClockMode
# -----------------------------------------------------------------------------
# Configuration
# -----------------------------------------------------------------------------
@dataclass
class TimelineConfig:
    """Central configuration for clock units, rates and playback defaults."""

    mode: ClockMode = ClockMode.FRAME      # unit of block bounds: frames or elapsed ms
    tick_rate: float = 60.0                # ticks per real second (driver period = 1/tick_rate)
    loop: bool = True                      # wrap to the origin after the last block
    autoplay: bool = True                  # start playing as soon as the timeline is built
    default_span: float = 100              # ticks covered by a terminal block without explicit end
    max_jump_ticks: int = 1_000_000        # fast-forward gives up after this many ticks
    driver_join_timeout: float = 1.0       # sec to wait for the periodic worker on cancel

    def validate(self) -> "TimelineConfig":
        if not (math.isfinite(self.tick_rate) and self.tick_rate > 0):
            raise ValueError(f"tick_rate must be finite and > 0, got {self.tick_rate}.")
        if self.default_span < 0:
            raise ValueError(f"default_span must be >= 0, got {self.default_span}.")
        if self.max_jump_ticks <= 0:
            raise ValueError(f"max_jump_ticks must be > 0, got {self.max_jump_ticks}.")
        return self

    @property
    def tick_interval(self) -> float:
        return 1.0 / self.tick_rate
