from pathlib import Path

from block_timeline.cli import CLI
from block_timeline.commands import Command, CommandChannel
from block_timeline.timeline import Timeline

from .fakes import FakeDriver


def _cli():
    tl = Timeline([{"func": "missing", "start": 0, "end": 5}], driver=FakeDriver())
    channel = CommandChannel()
    local = []
    cli = CLI(tl, channel, on_local=lambda word, arg: local.append((word, arg)))
    return cli, channel, local


def _drain(channel):
    msgs = []
    while True:
        msg = channel.poll()
        if msg is None:
            return msgs
        msgs.append(msg)


def test_console_words_become_commands() -> None:
    cli, channel, local = _cli()
    for line in ["play", "pause", "jump 12", "rate 24", "stop", "", "  "]:
        assert cli.handle(line)
    assert _drain(channel) == [
        (Command.PLAY, None),
        (Command.PAUSE, None),
        (Command.JUMP_TO, "12"),
        (Command.SET_TICK_RATE, "24"),
        (Command.STOP, None),
    ]
    assert local == []


def test_local_actions_and_quit() -> None:
    cli, channel, local = _cli()
    assert cli.handle("restart")
    assert cli.handle("loop off")
    assert cli.handle("status")
    assert not cli.handle("quit")
    assert local == [("restart", None), ("loop", "off"), ("status", None), ("quit", None)]
    assert _drain(channel) == []


def test_sync_reads_file(tmp_path: Path) -> None:
    cli, channel, _local = _cli()
    path = tmp_path / "blocks.json"
    path.write_text('[{"title": "a", "start": 0}]')
    cli.handle(f"sync {path}")
    cli.handle(f"sync {tmp_path / 'absent.json'}")
    assert _drain(channel) == [(Command.SYNC_TIMELINE, '[{"title": "a", "start": 0}]')]


def test_invalid_input_and_menu(capsys) -> None:
    cli, channel, _local = _cli()
    assert cli.handle("dance")
    assert cli.handle("jump")
    cli.show_menu()
    out = capsys.readouterr().out
    assert "Invalid input!" in out
    assert "0-5: missing [missing]" in out
    assert _drain(channel) == []


def test_reader_thread_stops_on_eof() -> None:
    tl = Timeline([{"func": "missing", "start": 0, "end": 5}], driver=FakeDriver())
    local = []
    lines = iter(["play"])

    def read_line(_prompt: str) -> str:
        try:
            return next(lines)
        except StopIteration:
            raise EOFError

    channel = CommandChannel()
    cli = CLI(tl, channel, on_local=lambda w, a: local.append(w), read_line=read_line)
    cli.start()
    cli._thread.join(timeout=2.0)
    assert local == ["quit"]
    assert channel.poll() == (Command.PLAY, None)
