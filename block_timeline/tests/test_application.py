import json
from pathlib import Path
from unittest.mock import patch

import pytest

from block_timeline.application import Application, _parse_args, load_functions
from block_timeline.clock import ClockMode
from block_timeline.timeline import PlaybackState


def test_parse_args_builds_config() -> None:
    json_file, module, cfg = _parse_args(
        ["blocks.json", "--functions", "sketch", "--mode", "time", "--tick-rate", "30", "--no-loop", "--paused"]
    )
    assert json_file == "blocks.json"
    assert module == "sketch"
    assert cfg.mode is ClockMode.TIME
    assert cfg.tick_rate == 30
    assert not cfg.loop
    assert not cfg.autoplay


def test_parse_args_rejects_bad_rate() -> None:
    with pytest.raises(SystemExit):
        _parse_args(["--tick-rate", "0"])
    with pytest.raises(SystemExit):
        _parse_args(["--tick-rate", "inf"])
    with pytest.raises(SystemExit):
        _parse_args(["--tick-rate", "nan"])


def test_load_functions_collects_public_callables() -> None:
    functions = load_functions("math")
    assert functions["sqrt"](9) == 3
    assert all(not name.startswith("_") for name in functions)
    assert load_functions(None) == {}


def test_application_builds_timeline_from_file(tmp_path: Path) -> None:
    path = tmp_path / "blocks.json"
    path.write_text(json.dumps([{"func": "sqrt(16)", "start": 0}, {"func": "floor(2.5)", "start": 10}]))
    _json, _module, cfg = _parse_args([str(path), "--paused"])
    with patch("block_timeline.application.CLI"):
        app = Application(str(path), "math", cfg)
    try:
        tl = app.timeline
        assert [(b.title, b.start, b.end) for b in tl.blocks] == [("sqrt(16)", 0, 9), ("floor(2.5)", 10, 110)]
        assert all(b.resolved for b in tl.blocks)
        assert tl.state is PlaybackState.STOPPED
    finally:
        app.shutdown()


def test_application_exits_on_invalid_file(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{")
    _json, _module, cfg = _parse_args([str(path), "--paused"])
    with pytest.raises(SystemExit):
        Application(str(path), None, cfg)
