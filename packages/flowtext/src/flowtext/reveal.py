"""
StaggeredTokenReveal: reveals a block of text token by token, once.

The schedule comes from flowtext.tokens.build_timeline(). This engine walks
it with a single chained timer: one timer per token start, then one for
the last token's settle time, after which on_complete fires.

There is no deletion and no looping. Calling reveal() again discards the
current timeline (cancelling its pending timer) and starts a fresh one.
"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from typing import Callable

from flowtext.config import RevealConfig
from flowtext.exceptions import EngineClosedError
from flowtext.observable import Subscribers
from flowtext.scheduler import AsyncioScheduler, SchedulerProtocol, TimerHandle
from flowtext.tokens import TokenTimeline, build_timeline

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RevealSnapshot:
    """
    Reveal progress at one instant.

    Attributes:
        tokens: Full token stream of the current timeline
        revealed: Number of tokens whose transition has started
        completed: True once the last token has settled
        at: Scheduler clock reading (seconds) when this state was produced
    """

    tokens: tuple[str, ...]
    revealed: int
    completed: bool
    at: float

    @property
    def text(self) -> str:
        return "".join(self.tokens[: self.revealed])


class StaggeredTokenReveal:
    """
    Fire-once staggered reveal of word tokens.

    Example:
        reveal = StaggeredTokenReveal(
            RevealConfig(tokens_per_second=30),
            scheduler=scheduler,
            on_complete=lambda: print("settled"),
        )
        timeline = reveal.reveal("Checking the latest sources")
        for cue in timeline.cues:
            print(cue.text, cue.start)
    """

    def __init__(
        self,
        config: RevealConfig | None = None,
        *,
        scheduler: SchedulerProtocol | None = None,
        on_complete: Callable[[], None] | None = None,
    ) -> None:
        self._config = config if config is not None else RevealConfig()
        self._scheduler = scheduler if scheduler is not None else AsyncioScheduler()
        self._on_complete = on_complete

        self._timeline: TokenTimeline | None = None
        self._timer: TimerHandle | None = None
        self._generation = 0
        self._revealed = 0
        self._completed = False
        self._closed = False
        self._started_at = 0.0
        self._changed_at = 0.0
        self._subscribers: Subscribers[RevealSnapshot] = Subscribers()

    @property
    def config(self) -> RevealConfig:
        return self._config

    @property
    def timeline(self) -> TokenTimeline | None:
        """Timeline of the current (or last) reveal, None before the first."""
        return self._timeline

    @property
    def started_at(self) -> float:
        return self._started_at

    @property
    def is_scheduled(self) -> bool:
        return self._timer is not None

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def snapshot(self) -> RevealSnapshot:
        tokens = self._timeline.tokens if self._timeline is not None else ()
        return RevealSnapshot(
            tokens=tokens,
            revealed=self._revealed,
            completed=self._completed,
            at=self._changed_at,
        )

    def subscribe(
        self, callback: Callable[[RevealSnapshot], None]
    ) -> Callable[[], None]:
        return self._subscribers.subscribe(callback)

    def unsubscribe(self, callback: Callable[[RevealSnapshot], None]) -> None:
        self._subscribers.unsubscribe(callback)

    def reveal(self, text: str) -> TokenTimeline:
        """
        Start revealing a block of text.

        Any reveal already in flight is abandoned without firing its
        on_complete. Empty or blank text completes immediately.

        Args:
            text: Block of text to reveal

        Returns:
            The timeline built for this text, for consumers that animate
            cues themselves. If a subscriber starts another reveal while
            this one is being published, the returned timeline is already
            superseded and self.timeline is the newer one.

        Raises:
            EngineClosedError: If close() was already called
        """
        if self._closed:
            raise EngineClosedError(type(self).__name__)

        cancelled = self._cancel_timer()
        self._generation += 1
        generation = self._generation
        timeline = build_timeline(
            text,
            tokens_per_second=self._config.tokens_per_second,
            transition_duration=self._config.transition_duration,
        )
        self._timeline = timeline
        self._revealed = 0
        self._completed = False
        self._started_at = self._scheduler.now()
        logger.debug(
            "Reveal started: %d token(s), interval=%.4fs, cancelled %d timer",
            len(timeline.cues),
            timeline.stagger_interval,
            cancelled,
        )
        self._publish()
        # A subscriber started another reveal or closed us
        if generation != self._generation:
            return timeline

        if not timeline.cues:
            self._complete()
        else:
            self._start_token(0)
        return timeline

    def close(self) -> None:
        """Cancel the pending timer. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._generation += 1
        cancelled = self._cancel_timer()
        self._subscribers.clear()
        logger.debug("Reveal closed (cancelled %d timer)", cancelled)

    def __enter__(self) -> StaggeredTokenReveal:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _cancel_timer(self) -> int:
        if self._timer is None:
            return 0
        self._scheduler.cancel(self._timer)
        self._timer = None
        return 1

    def _start_token(self, index: int) -> None:
        self._timer = None
        generation = self._generation
        cues = self._timeline.cues
        self._revealed = index + 1
        self._publish()
        if generation != self._generation:
            return

        cue = cues[index]
        if index + 1 < len(cues):
            delay = cues[index + 1].start - cue.start
            callback = functools.partial(self._start_token, index + 1)
        else:
            delay = cue.duration
            callback = self._finish
        self._timer = self._scheduler.schedule(delay, callback)

    def _finish(self) -> None:
        self._timer = None
        self._complete()

    def _complete(self) -> None:
        if self._completed:
            return
        self._completed = True
        logger.debug("Reveal complete (%d token(s))", self._revealed)
        generation = self._generation
        self._publish()
        if generation != self._generation:
            return
        if self._on_complete is not None:
            self._on_complete()

    def _publish(self) -> None:
        self._changed_at = self._scheduler.now()
        self._subscribers.notify(self.snapshot)
