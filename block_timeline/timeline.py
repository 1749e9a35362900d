from __future__ import annotations

import threading
from enum import Enum
from typing import Any, Callable, Mapping, Optional, Sequence, Tuple, Union

from . import events as ev
from . import host as hostmsg
from .block_loader import Block, BlockDefinition, BlockLoader, BlockValidationError
from .block_registry import BlockRegistry
from .clock import Clock, ClockMode
from .config import TimelineConfig
from .driver import RecurrentDriver, TickDriver
from .events import EventHub, Listener
from .host import HostLink, NullHostLink
from .utility import _logger, TimeSource


class PlaybackState(str, Enum):
    STOPPED = "stopped"
    PLAYING = "playing"
    PAUSED = "paused"


# -----------------------------------------------------------------------------
# Timeline: activation engine + playback controller
# -----------------------------------------------------------------------------
class Timeline:
    """Plays a set of blocks against a virtual clock.

    Every tick invokes the callback of each block whose ``[start, end]``
    contains the clock position, in declaration order, bracketed by the
    lifecycle events of :mod:`block_timeline.events`.  Ticks come from the
    periodic ``driver`` while playing, or synchronously from :meth:`jump_to`.
    All public operations are serialized on one re-entrant lock, so block
    callbacks may call back into the timeline.
    """
    def __init__(
        self,
        blocks: Optional[Sequence[BlockDefinition]] = None,
        functions: Optional[Mapping[str, Callable[..., Any]]] = None,
        cfg: Optional[TimelineConfig] = None,
        host: Optional[HostLink] = None,
        driver: Optional[TickDriver] = None,
        time_source: Optional[TimeSource] = None,
    ):
        self._cfg = (cfg or TimelineConfig()).validate()
        self._host = host or NullHostLink()
        self._driver = driver or RecurrentDriver(join_timeout=self._cfg.driver_join_timeout)
        self._events = EventHub()
        self._clock = Clock(self._cfg.mode, self._cfg.tick_rate, time_source)
        self._loader = BlockLoader(
            functions,
            default_span=self._default_span(),
            on_missing=self._report_missing,
        )

        # Playback state ----------------------------------------------------------
        self._lock = threading.RLock()
        self._state = PlaybackState.STOPPED
        self._looping = self._cfg.loop
        self._in_tick = False
        self._resets = 0  # bumped on every reset to the origin

        # Blocks: an initial set is authoritative and never replaced by a sync
        self.has_initial_blocks = bool(blocks)
        if self.has_initial_blocks:
            initial = self._loader.load(blocks)
        else:
            initial = [self._loader.default_block()]
        self._registry = BlockRegistry(initial, immutable=self.has_initial_blocks)

        self._notify(hostmsg.INIT_TIMELINE, self._registry.summaries())
        self._notify(hostmsg.TIMELINE_READY, True)
        if self._cfg.autoplay:
            self.play()
        else:
            self._notify(hostmsg.TIMELINE_PLAYING, False)

    # Accessors ------------------------------------------------------------------
    @property
    def mode(self) -> ClockMode:
        return self._clock.mode

    @property
    def position(self) -> float:
        return self._clock.position

    @property
    def frame(self) -> int:
        return self._clock.frame

    @property
    def end(self) -> float:
        return self._registry.end

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def playing(self) -> bool:
        return self._state is PlaybackState.PLAYING

    @property
    def looping(self) -> bool:
        return self._looping

    @property
    def tick_rate(self) -> float:
        return self._clock.tick_rate

    @property
    def blocks(self) -> Tuple[Block, ...]:
        return self._registry.blocks

    # Events ---------------------------------------------------------------------
    def on(self, name: str, listener: Optional[Listener]) -> None:
        self._events.on(name, listener)

    # Playback controller -----------------------------------------------------
    def play(self) -> None:
        with self._lock:
            if self._state is PlaybackState.PLAYING:
                return
            self._state = PlaybackState.PLAYING
            self._clock.resume()
            self._driver.start(1.0 / self._clock.tick_rate, self._on_driver_tick)
            _logger.info("Timeline playing at %s (%s mode).", self.position, self.mode.value)
            self._notify(hostmsg.TIMELINE_PLAYING, True)

    def pause(self) -> None:
        with self._lock:
            if self._state is not PlaybackState.PLAYING:
                return
            self._halt(PlaybackState.PAUSED)
            _logger.info("Timeline paused at %s.", self.position)

    def stop(self) -> None:
        """Stop from any state and reset to the origin immediately."""
        with self._lock:
            self._halt(PlaybackState.STOPPED)
            self._reset_position()
            _logger.info("Timeline stopped.")

    def restart(self) -> None:
        with self._lock:
            self._reset_position()
            self.play()

    def set_looping(self, looping: bool) -> None:
        with self._lock:
            self._looping = bool(looping)

    def loop(self) -> None:
        self.set_looping(True)

    def no_loop(self) -> None:
        self.set_looping(False)

    def set_tick_rate(self, rate: float) -> bool:
        with self._lock:
            try:
                new_rate = Clock._check_rate(rate)
            except (TypeError, ValueError) as e:
                _logger.warning("Ignoring tick rate %r: %s", rate, e)
                return False
            self._clock.tick_rate = new_rate
            self._loader.default_span = self._default_span()
            if self._state is PlaybackState.PLAYING:
                self._driver.reschedule(1.0 / self._clock.tick_rate)
            _logger.info("Tick rate set to %s.", self._clock.tick_rate)
            return True

    def jump_to(self, target: float) -> bool:
        """Fast-forward to ``target`` by ticking synchronously.

        A target behind the current position replays from the origin, since
        block activation depends on the path taken.  Returns ``False`` when the
        jump was rejected or aborted by the tick bound.
        """
        with self._lock:
            if self._in_tick:
                _logger.warning("jump_to(%s) ignored: called from inside a tick.", target)
                return False
            if not len(self._registry) or not 0 <= target <= self._registry.end:
                _logger.info("jump_to(%s) rejected: outside [0, %s].", target, self._registry.end)
                return False
            if self.mode is ClockMode.FRAME and not float(target).is_integer():
                _logger.info("jump_to(%s) rejected: frame targets are whole ticks.", target)
                return False
            if target < self._clock.position:
                self._reset_position()
            else:
                # realign the tick counter with elapsed time before synthesizing it
                self._clock.seek(self._clock.position)

            was_state, was_looping = self._state, self._looping
            self._state = PlaybackState.PLAYING
            self._looping = False
            ticks = 0
            ok = True
            try:
                while self._clock.position < target:
                    if ticks >= self._cfg.max_jump_ticks:
                        _logger.warning(
                            "jump_to(%s) aborted after %d ticks at %s.", target, ticks, self.position
                        )
                        ok = False
                        break
                    self._run_tick(simulate=True)
                    ticks += 1
                    if self._state is not PlaybackState.PLAYING:
                        break
            finally:
                if self._state is PlaybackState.PLAYING:
                    self._state = was_state
                self._looping = was_looping
                # continue wall-clock time from where the jump landed
                self._clock.seek(self._clock.position)
            _logger.debug("jump_to(%s) done in %d ticks.", target, ticks)
            return ok

    def sync_timeline(self, payload: Union[str, bytes, Sequence[Mapping[str, Any]]]) -> bool:
        """Replace all blocks with the editor's definition (JSON text or list).

        Ignored when the timeline was built with its own blocks.  Raises
        :class:`BlockValidationError` for a malformed payload.
        """
        with self._lock:
            if self._registry.immutable:
                _logger.info("syncTimeline ignored: timeline has initial blocks.")
                return False
            if self._in_tick:
                _logger.warning("syncTimeline ignored: called from inside a tick.")
                return False
            blocks = self._loader.parse_sync(payload)
            self._registry.replace(blocks)
            clamped = self._registry.clamp(self._clock.position)
            if clamped != self._clock.position:
                self._clock.seek(clamped)
            _logger.info("Timeline synced: %d blocks, end %s.", len(blocks), self._registry.end)
            return True

    # Activation engine -------------------------------------------------------
    def tick(self) -> bool:
        """Process one tick if playing. Returns whether a tick ran."""
        with self._lock:
            if self._in_tick or self._state is not PlaybackState.PLAYING:
                return False
            self._run_tick(simulate=False)
            return True

    def _on_driver_tick(self) -> None:
        # overlapping deliveries are dropped instead of queued behind the lock
        if not self._lock.acquire(blocking=False):
            _logger.debug("Tick skipped; timeline busy.")
            return
        try:
            self.tick()
        finally:
            self._lock.release()

    def _run_tick(self, simulate: bool) -> None:
        if not len(self._registry):
            return
        self._in_tick = True
        resets = self._resets
        try:
            clock = self._clock
            if not simulate:
                clock.refresh()
            if clock.frame == 0:
                self._events.fire(ev.START)
            position = clock.position
            self._notify(hostmsg.SET_TIMELINE_FRAME, position)
            self._events.fire(ev.FRAME_START)

            entering, active, leaving = self._registry.transitions(position)
            for block in entering:
                self._events.fire(ev.BLOCK_START, block)
                block.active = True
            for block in active:
                self._invoke(block)
            finishing = self._resets == resets and position >= self._registry.end
            if finishing:
                # last tick of the run closes every block still open
                leaving = self._registry.active_blocks()
            for block in leaving:
                self._events.fire(ev.BLOCK_END, block)
                block.active = False

            self._events.fire(ev.FRAME_END)
            if self._resets != resets:
                # a callback or listener reset the clock; the tick is over
                return
            if finishing:
                self._finish_run()
                return
            clock.advance(simulate)
        finally:
            self._in_tick = False

    def _finish_run(self) -> None:
        self._events.fire(ev.END)
        if self._looping:
            self._reset_position()
            self._events.fire(ev.BEFORE_LOOP)
        else:
            self._halt(PlaybackState.STOPPED)
            _logger.info("Timeline reached its end at %s.", self.position)

    def _invoke(self, block: Block) -> None:
        if block.callback is None:
            return
        try:
            block.callback(*block.args)
        except Exception:
            _logger.exception("Block '%s' raised at %s.", block.title, self.position)

    # internal helpers ----------------------------------------------------------
    def _default_span(self) -> float:
        # configured in ticks; Time-mode blocks are measured in milliseconds
        if self._clock.mode is ClockMode.TIME:
            return self._clock.ms_for(self._cfg.default_span)
        return self._cfg.default_span

    def _halt(self, state: PlaybackState) -> None:
        was_playing = self._state is PlaybackState.PLAYING
        self._state = state
        self._clock.pause()
        self._driver.stop()
        if was_playing or state is PlaybackState.STOPPED:
            self._notify(hostmsg.TIMELINE_PLAYING, False)

    def _reset_position(self) -> None:
        self._clock.reset()
        self._registry.deactivate_all()
        self._resets += 1
        self._notify(hostmsg.SET_TIMELINE_FRAME, self._clock.position)

    def _report_missing(self, title: str) -> None:
        self._notify(hostmsg.TIMELINE_FUNCTION_MISSING, title)

    def _notify(self, message: str, payload: Any) -> None:
        try:
            self._host.notify(message, payload)
        except Exception:
            _logger.exception("Host notification '%s' failed.", message)


__all__ = ["Timeline", "PlaybackState", "BlockValidationError"]
