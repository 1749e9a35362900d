import threading
from typing import Callable, Optional

from .commands import Command, CommandChannel
from .timeline import Timeline
# -----------------------------------------------------------------------------
# CLI / User interaction (separate from the tick driver)
# -----------------------------------------------------------------------------
class CLI:
    """Blocking console interface that feeds commands into a channel.

    The timeline never blocks on input; user requests are posted to a
    thread-safe :class:`CommandChannel` and applied by the owner thread.
    Console-only actions (restart, loop, status, quit) go through
    ``on_local``.
    """
    def __init__(
        self,
        timeline: Timeline,
        channel: CommandChannel,
        on_local: Callable[[str, Optional[str]], None],
        read_line: Callable[[str], str] = input,
    ):
        self._timeline = timeline
        self._channel = channel
        self._on_local = on_local
        self._read_line = read_line
        self._thread = threading.Thread(target=self._run, name="CLIThread", daemon=True)
        self._stop = threading.Event()

    def start(self) -> None:
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        # cannot reliably stop blocking input() in all terminals; user ^C ends.

    def show_menu(self) -> None:
        self._print_menu()

    def handle(self, line: str) -> bool:
        """Translate one console line. Returns ``False`` once the user quits."""
        parts = line.strip().split(None, 1)
        if not parts:
            return True
        word = parts[0].lower()
        arg = parts[1].strip() if len(parts) > 1 else None
        if word == "quit":
            self._on_local("quit", None)
            return False
        if word in ("help", "list"):
            self._print_menu()
        elif word == "play":
            self._channel.post(Command.PLAY)
        elif word == "pause":
            self._channel.post(Command.PAUSE)
        elif word == "stop":
            self._channel.post(Command.STOP)
        elif word == "jump" and arg is not None:
            self._channel.post(Command.JUMP_TO, arg)
        elif word == "rate" and arg is not None:
            self._channel.post(Command.SET_TICK_RATE, arg)
        elif word == "sync" and arg is not None:
            try:
                with open(arg, "r", encoding="utf-8") as f:
                    self._channel.post(Command.SYNC_TIMELINE, f.read())
            except OSError as e:
                print(f"Cannot read {arg}: {e}")
        elif word in ("restart", "status") or (word == "loop" and arg in ("on", "off")):
            self._on_local(word, arg)
        else:
            print("Invalid input! Type 'help' for the list of commands.")
        return True

    # internal ------------------------------------------------------------------
    def _print_menu(self) -> None:
        tl = self._timeline
        print(f"\nTimeline ({tl.mode.value} mode, end {tl.end}, {tl.tick_rate:g} ticks/s):")
        for block in tl.blocks:
            missing = "" if block.resolved else " [missing]"
            print(f"  {block.start}-{block.end}: {block.title}{missing}")
        print(
            "\nCommands:\n"
            "  play | pause | stop | restart\n"
            "  jump <pos>      : fast-forward to a position\n"
            "  rate <n>        : set ticks per second\n"
            "  loop on|off     : toggle looping\n"
            "  sync <file>     : replace blocks from a JSON file\n"
            "  status          : show position and state\n"
            "  quit            : Exit program\n"
        )

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                line = self._read_line("timeline> ")
            except EOFError:
                self._on_local("quit", None)
                break
            if not self.handle(line):
                break
