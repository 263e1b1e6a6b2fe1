"""
SequencedTypewriter: types, pauses on and deletes a list of strings.

This module drives the pure phase machine in flowtext.phases with a
SchedulerProtocol implementation and publishes TypewriterSnapshot values
to subscribers.

Timer discipline:
- At most one phase timer is outstanding per instance
- Ticks are strictly sequential; tick k+1 is scheduled when tick k ends
- set_text()/configure() cancel the pending timer before anything else
- close() releases the phase timer and the cursor blink timer

Example:
    scheduler = ManualScheduler()
    writer = SequencedTypewriter(
        ["New Chat", "Quarterly planning"],
        AnimationConfig(typing_speed=30, show_cursor=False),
        scheduler=scheduler,
        on_sequence_complete=lambda: print("done"),
    )
    writer.subscribe(lambda snap: print(repr(snap.text)))
    writer.start()
    scheduler.run_until_idle()
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Callable, Sequence

from flowtext.config import AnimationConfig
from flowtext.exceptions import EngineClosedError
from flowtext.observable import Subscribers
from flowtext.phases import Effect, Phase, SequenceState, step
from flowtext.scheduler import AsyncioScheduler, SchedulerProtocol, TimerHandle

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TypewriterSnapshot:
    """
    What a consumer renders at one instant.

    Attributes:
        text: Currently revealed text
        cursor_visible: True if the cursor should be drawn now
        phase: Phase the machine is in
        sequence_index: Index of the active target string
        completed: True once on_sequence_complete has fired for this run
        at: Scheduler clock reading (seconds) when this state was produced
    """

    text: str
    cursor_visible: bool
    phase: Phase
    sequence_index: int
    completed: bool
    at: float


def _as_targets(text: str | Sequence[str]) -> tuple[str, ...]:
    if isinstance(text, str):
        return (text,)
    return tuple(text)


class CursorBlink:
    """
    Periodic cursor visibility toggle.

    Independent of the phase machine: it keeps blinking while the
    typewriter types, pauses, deletes or sits on a finished string.
    Implemented as a chain of single-shot timers so stop() has exactly
    one handle to release.
    """

    def __init__(
        self, scheduler: SchedulerProtocol, on_toggle: Callable[[bool], None]
    ) -> None:
        self._scheduler = scheduler
        self._on_toggle = on_toggle
        self._handle: TimerHandle | None = None
        self._interval = 0.0
        self._active = False
        self.visible = True

    @property
    def running(self) -> bool:
        return self._handle is not None

    def start(self, interval: float) -> None:
        """
        (Re)start blinking with the cursor visible.

        A non-positive interval leaves the cursor steadily visible.

        Args:
            interval: Seconds between toggles
        """
        self.stop()
        self._interval = interval
        if interval <= 0:
            return
        self._active = True
        self._handle = self._scheduler.schedule(interval, self._toggle)

    def stop(self) -> None:
        """Stop blinking and release the timer handle."""
        self._active = False
        if self._handle is not None:
            self._scheduler.cancel(self._handle)
            self._handle = None
        self.visible = True

    def _toggle(self) -> None:
        self._handle = None
        if not self._active:
            return
        self.visible = not self.visible
        self._on_toggle(self.visible)
        # on_toggle may have stopped or restarted us
        if self._active and self._handle is None:
            self._handle = self._scheduler.schedule(self._interval, self._toggle)


class SequencedTypewriter:
    """
    Types a sequence of strings through typing/pausing/deleting phases.

    Completion fires exactly once per run and only when loop is False.
    Any change of text or config is a hard reset of the run.

    Args:
        text: One target string or a list of them
        config: Timing configuration (defaults to AnimationConfig())
        scheduler: Timer source (defaults to AsyncioScheduler())
        rng: Random source for jitter (defaults to a fresh random.Random)
        on_sequence_complete: Called once when a non-looping run finishes
    """

    def __init__(
        self,
        text: str | Sequence[str],
        config: AnimationConfig | None = None,
        *,
        scheduler: SchedulerProtocol | None = None,
        rng: random.Random | None = None,
        on_sequence_complete: Callable[[], None] | None = None,
    ) -> None:
        self._targets = _as_targets(text)
        self._config = config if config is not None else AnimationConfig()
        self._scheduler = scheduler if scheduler is not None else AsyncioScheduler()
        self._rng = rng if rng is not None else random.Random()
        self._on_sequence_complete = on_sequence_complete

        self._state = SequenceState()
        self._timer: TimerHandle | None = None
        self._generation = 0
        self._completed = False
        self._started = False
        self._closed = False
        self._changed_at = 0.0

        self._subscribers: Subscribers[TypewriterSnapshot] = Subscribers()
        self._cursor = CursorBlink(self._scheduler, self._on_cursor_toggle)

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    @property
    def targets(self) -> tuple[str, ...]:
        return self._targets

    @property
    def config(self) -> AnimationConfig:
        return self._config

    @property
    def state(self) -> SequenceState:
        return self._state

    @property
    def is_scheduled(self) -> bool:
        """True while a phase timer is outstanding."""
        return self._timer is not None

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def snapshot(self) -> TypewriterSnapshot:
        return TypewriterSnapshot(
            text=self._state.current_text,
            cursor_visible=self._config.show_cursor and self._cursor.visible,
            phase=self._state.phase,
            sequence_index=self._state.sequence_index,
            completed=self._completed,
            at=self._changed_at,
        )

    def subscribe(
        self, callback: Callable[[TypewriterSnapshot], None]
    ) -> Callable[[], None]:
        """
        Receive a snapshot on every text change, cursor toggle and reset.

        Returns:
            Function that removes the subscription
        """
        return self._subscribers.subscribe(callback)

    def unsubscribe(self, callback: Callable[[TypewriterSnapshot], None]) -> None:
        self._subscribers.unsubscribe(callback)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """
        Start (or restart) the run and the cursor blink.

        Raises:
            EngineClosedError: If close() was already called
        """
        self._check_open()
        self._restart_cursor()
        self._reset()

    def set_text(self, text: str | Sequence[str]) -> None:
        """
        Replace the target strings and restart the run from the beginning.

        Raises:
            EngineClosedError: If close() was already called
        """
        self._check_open()
        self._targets = _as_targets(text)
        if not self._started:
            self.start()
            return
        self._reset()

    def configure(self, config: AnimationConfig) -> None:
        """
        Replace the whole timing configuration. This is a hard reset.

        Raises:
            EngineClosedError: If close() was already called
        """
        self._check_open()
        self._config = config
        self._restart_cursor()
        self._reset()

    def close(self) -> None:
        """Cancel every outstanding timer. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._generation += 1
        cancelled = self._cancel_timer()
        self._cursor.stop()
        self._subscribers.clear()
        logger.debug("Typewriter closed (cancelled %d phase timer)", cancelled)

    def __enter__(self) -> SequencedTypewriter:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _check_open(self) -> None:
        if self._closed:
            raise EngineClosedError(type(self).__name__)

    def _cancel_timer(self) -> int:
        if self._timer is None:
            return 0
        self._scheduler.cancel(self._timer)
        self._timer = None
        return 1

    def _restart_cursor(self) -> None:
        if self._config.show_cursor:
            self._cursor.start(self._config.cursor_blink_duration)
        else:
            self._cursor.stop()

    def _reset(self) -> None:
        # Cancel first: a new timer must never coexist with the old one
        cancelled = self._cancel_timer()
        self._generation += 1
        generation = self._generation
        self._state = SequenceState()
        self._completed = False
        self._started = True
        logger.debug(
            "Typewriter reset: %d target(s), loop=%s, cancelled %d timer",
            len(self._targets),
            self._config.loop,
            cancelled,
        )
        self._publish()
        # A subscriber reset or closed us; the newer run owns the timer
        if generation != self._generation:
            return

        if not any(self._targets):
            if self._config.loop:
                logger.debug("Nothing to type and loop is on; idling")
                return
            self._state = SequenceState(phase=Phase.DONE)
            self._complete()
            return

        self._tick()

    def _tick(self) -> None:
        self._timer = None
        generation = self._generation
        transition = step(self._state, self._targets, self._config, self._rng)
        self._state = transition.state

        for effect in transition.effects:
            if effect == Effect.TEXT_CHANGED:
                self._publish()
            elif effect == Effect.SEQUENCE_COMPLETE:
                self._complete()
            # A callback reset or closed us; that run owns the timer now
            if generation != self._generation:
                return

        if transition.delay is not None:
            self._timer = self._scheduler.schedule(
                transition.delay / 1000.0, self._tick
            )

    def _complete(self) -> None:
        if self._completed:
            return
        self._completed = True
        logger.debug(
            "Typewriter sequence complete (%d target(s))", len(self._targets)
        )
        generation = self._generation
        self._publish()
        # A subscriber already started the next run
        if generation != self._generation:
            return
        if self._on_sequence_complete is not None:
            self._on_sequence_complete()

    def _on_cursor_toggle(self, visible: bool) -> None:
        self._subscribers.notify(self.snapshot)

    def _publish(self) -> None:
        self._changed_at = self._scheduler.now()
        self._subscribers.notify(self.snapshot)
