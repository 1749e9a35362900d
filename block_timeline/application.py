import importlib
import inspect
import sys
import threading
import signal
import queue
from typing import Any, Callable, Dict, List, Optional, Tuple

from .utility import _logger, LOG_LEVELS, set_log_level
from .config import TimelineConfig
from .clock import ClockMode
from .block_loader import BlockLoader, BlockValidationError
from .commands import CommandChannel, dispatch
from .host import QueuedHostLink, log_sink
from .timeline import Timeline
from .cli import CLI

# -----------------------------------------------------------------------------
# Function registry
# -----------------------------------------------------------------------------
def load_functions(module_name: Optional[str]) -> Dict[str, Callable[..., Any]]:
    """Public callables of ``module_name``, keyed by name, for block references."""
    if not module_name:
        return {}
    module = importlib.import_module(module_name)
    return {
        name: obj
        for name, obj in inspect.getmembers(module, callable)
        if not name.startswith("_")
    }

# -----------------------------------------------------------------------------
# Application Orchestration
# -----------------------------------------------------------------------------
class Application:
    def __init__(self, json_file: Optional[str], functions_module: Optional[str], cfg: TimelineConfig):
        self._cfg = cfg
        functions = load_functions(functions_module)

        # Load blocks + compose timeline stack -------------------------------------
        self._host = QueuedHostLink(log_sink)
        try:
            blocks = BlockLoader.read_file(json_file) if json_file else None
            self._timeline = Timeline(blocks, functions, cfg=cfg, host=self._host)
        except BlockValidationError as e:
            _logger.error("Failed to load blocks: %s", e)
            self._host.close()
            raise SystemExit(1) from e
        self._channel = CommandChannel()
        self._local: "queue.Queue[Tuple[str, Optional[str]]]" = queue.Queue()
        self._cli = CLI(self._timeline, self._channel, on_local=lambda w, a: self._local.put((w, a)))

        # Shutdown flag
        self._shutdown = threading.Event()

    @property
    def timeline(self) -> Timeline:
        return self._timeline

    @property
    def channel(self) -> CommandChannel:
        return self._channel

    def run(self) -> None:
        self._install_signal_handlers()
        self._cli.show_menu()
        self._cli.start()

        # Poll commands -------------------------------------------------------------
        while not self._shutdown.is_set():
            msg = self._channel.poll(timeout=0.05)
            if msg is not None:
                dispatch(self._timeline, *msg)
            if not self._handle_local():
                break

        # graceful shutdown ------------------------------------------------------
        self.shutdown()

    def shutdown(self) -> None:
        if self._shutdown.is_set():
            return
        self._shutdown.set()
        _logger.info("Shutting down application...")
        self._cli.stop()
        self._timeline.stop()
        self._host.close()
        print("Application exited cleanly.")

    # internal ------------------------------------------------------------------
    def _handle_local(self) -> bool:
        try:
            word, arg = self._local.get_nowait()
        except queue.Empty:
            return True
        if word == "quit":
            _logger.info("Quit command received.")
            return False
        if word == "restart":
            self._timeline.restart()
        elif word == "loop":
            self._timeline.set_looping(arg == "on")
        elif word == "status":
            tl = self._timeline
            print(f"{tl.state.value} at {tl.position} / {tl.end} (frame {tl.frame}, loop {'on' if tl.looping else 'off'})")
        return True

    # Signals -------------------------------------------------------------------
    def _install_signal_handlers(self) -> None:
        def _sig_handler(signum, _frame):
            _logger.info("Signal %s received; shutting down.", signum)
            self._local.put(("quit", None))
        signal.signal(signal.SIGINT, _sig_handler)
        signal.signal(signal.SIGTERM, _sig_handler)

# -----------------------------------------------------------------------------
# Entry point
# -----------------------------------------------------------------------------

def _parse_args(argv: List[str]) -> Tuple[Optional[str], Optional[str], TimelineConfig]:
    import argparse
    parser = argparse.ArgumentParser(description="Block timeline player")
    parser.add_argument("json_file", nargs="?", default=None, help="Path to block list JSON (optional)")
    parser.add_argument("--functions", default=None, help="Importable module providing block functions")
    parser.add_argument("--mode", default="frame", choices=[m.value for m in ClockMode], help="Clock unit")
    parser.add_argument("--tick-rate", type=float, default=60.0, help="Ticks per second")
    parser.add_argument("--no-loop", action="store_true", help="Stop at the end instead of looping")
    parser.add_argument("--paused", action="store_true", help="Do not start playing on launch")
    parser.add_argument("--max-jump-ticks", type=int, default=1_000_000, help="Fast-forward safety bound")
    parser.add_argument("--log", default="info", choices=list(LOG_LEVELS), help="Log level")
    args = parser.parse_args(argv)

    set_log_level(args.log)

    cfg = TimelineConfig(
        mode=ClockMode(args.mode),
        tick_rate=args.tick_rate,
        loop=not args.no_loop,
        autoplay=not args.paused,
        max_jump_ticks=args.max_jump_ticks,
    )
    try:
        cfg.validate()
    except ValueError as e:
        parser.error(str(e))
    return args.json_file, args.functions, cfg


def main(argv: Optional[List[str]] = None) -> None:
    if argv is None:
        argv = sys.argv[1:]
    json_file, functions_module, cfg = _parse_args(argv)
    app = Application(json_file, functions_module, cfg)
    app.run()


if __name__ == "__main__":  # pragma: no cover
    main()
