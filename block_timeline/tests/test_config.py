import pytest

from block_timeline.clock import ClockMode
from block_timeline.config import TimelineConfig


def test_defaults_validate() -> None:
    cfg = TimelineConfig().validate()
    assert cfg.mode is ClockMode.FRAME
    assert cfg.tick_interval == pytest.approx(1 / 60)


@pytest.mark.parametrize("rate", [0, -5, float("inf"), float("nan")])
def test_rejects_unusable_tick_rate(rate) -> None:
    with pytest.raises(ValueError):
        TimelineConfig(tick_rate=rate).validate()
