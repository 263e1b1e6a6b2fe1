"""
StreamingTypewriter: catches the display up with text that is still arriving.

Unlike SequencedTypewriter, the target is not known up front. A producer
keeps calling set_target() with the text received so far and the engine
reveals it in frame-sized chunks, never more often than once per
frame_interval. The further the display lags behind, the bigger each chunk:

    backlog > 2000 -> 500 chars per frame
    backlog > 1000 -> 250
    backlog >  500 -> 100
    backlog >  200 -> 40
    backlog >  100 -> 15
    backlog >   50 -> 8
    backlog >   20 -> 4
    otherwise      -> 3

Snapping:
- streaming=False shows the whole target at once and stops the frame timer
  (finished generations, history loads)
- A target shorter than what is displayed is shown at once (regeneration)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from flowtext.config import StreamConfig
from flowtext.exceptions import EngineClosedError
from flowtext.observable import Subscribers
from flowtext.scheduler import AsyncioScheduler, SchedulerProtocol, TimerHandle

logger = logging.getLogger(__name__)

BASE_CHUNK = 3

# (backlog above which the chunk applies, chunk), largest first
CATCH_UP_STEPS = (
    (2000, 500),
    (1000, 250),
    (500, 100),
    (200, 40),
    (100, 15),
    (50, 8),
    (20, 4),
)


def chunk_size(backlog: int) -> int:
    """Characters to reveal in one frame for a given backlog."""
    for threshold, chunk in CATCH_UP_STEPS:
        if backlog > threshold:
            return chunk
    return BASE_CHUNK


@dataclass(frozen=True)
class StreamingSnapshot:
    """
    Streaming display state at one instant.

    Attributes:
        text: Displayed prefix of the target
        target_length: Length of the full target received so far
        streaming: False once the producer has finished
        at: Scheduler clock reading (seconds) when this state was produced
    """

    text: str
    target_length: int
    streaming: bool
    at: float

    @property
    def backlog(self) -> int:
        return self.target_length - len(self.text)

    @property
    def caught_up(self) -> bool:
        return self.backlog == 0


class StreamingTypewriter:
    """
    Adaptive catch-up reveal for streamed text.

    Example:
        writer = StreamingTypewriter(scheduler=scheduler)
        writer.subscribe(lambda snap: print(snap.text))
        for chunk in response:
            received += chunk
            writer.set_target(received)
        writer.set_target(received, streaming=False)
    """

    def __init__(
        self,
        config: StreamConfig | None = None,
        *,
        scheduler: SchedulerProtocol | None = None,
    ) -> None:
        self._config = config if config is not None else StreamConfig()
        self._scheduler = scheduler if scheduler is not None else AsyncioScheduler()

        self._target = ""
        self._length = 0
        self._streaming = False
        self._timer: TimerHandle | None = None
        self._last_frame: float | None = None
        self._generation = 0
        self._closed = False
        self._changed_at = 0.0
        self._subscribers: Subscribers[StreamingSnapshot] = Subscribers()

    @property
    def config(self) -> StreamConfig:
        return self._config

    @property
    def is_scheduled(self) -> bool:
        return self._timer is not None

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def snapshot(self) -> StreamingSnapshot:
        return StreamingSnapshot(
            text=self._target[: self._length],
            target_length=len(self._target),
            streaming=self._streaming,
            at=self._changed_at,
        )

    def subscribe(
        self, callback: Callable[[StreamingSnapshot], None]
    ) -> Callable[[], None]:
        return self._subscribers.subscribe(callback)

    def unsubscribe(self, callback: Callable[[StreamingSnapshot], None]) -> None:
        self._subscribers.unsubscribe(callback)

    def set_target(self, text: str, streaming: bool = True) -> None:
        """
        Update the text received so far.

        Args:
            text: Full target text, usually a growing prefix of the final text
            streaming: False once the producer is done; snaps to the full text

        Raises:
            EngineClosedError: If close() was already called
        """
        if self._closed:
            raise EngineClosedError(type(self).__name__)

        before = self._target[: self._length]
        self._target = text
        self._streaming = streaming

        if not streaming:
            self._length = len(text)
            cancelled = self._cancel_timer()
            logger.debug(
                "Stream finished: snapped to %d chars, cancelled %d timer",
                len(text),
                cancelled,
            )
        elif len(text) < self._length:
            logger.debug("Target shrank from %d to %d chars", self._length, len(text))
            self._length = len(text)

        generation = self._generation
        if self._target[: self._length] != before:
            self._publish()
            if generation != self._generation:
                return

        if streaming and self._timer is None and self._length < len(text):
            self._timer = self._scheduler.schedule(
                self._next_frame_delay(), self._frame
            )

    def close(self) -> None:
        """Cancel the frame timer. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._generation += 1
        cancelled = self._cancel_timer()
        self._subscribers.clear()
        logger.debug("Streaming typewriter closed (cancelled %d timer)", cancelled)

    def __enter__(self) -> StreamingTypewriter:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _cancel_timer(self) -> int:
        if self._timer is None:
            return 0
        self._scheduler.cancel(self._timer)
        self._timer = None
        self._generation += 1
        return 1

    def _next_frame_delay(self) -> float:
        if self._last_frame is None:
            return 0.0
        due = self._last_frame + self._config.frame_interval
        return max(0.0, due - self._scheduler.now())

    def _frame(self) -> None:
        self._timer = None
        backlog = len(self._target) - self._length
        if backlog <= 0:
            return

        self._length = min(len(self._target), self._length + chunk_size(backlog))
        self._last_frame = self._scheduler.now()
        generation = self._generation
        self._publish()
        if generation != self._generation or self._timer is not None:
            return

        if self._length < len(self._target):
            self._timer = self._scheduler.schedule(
                self._config.frame_interval, self._frame
            )

    def _publish(self) -> None:
        self._changed_at = self._scheduler.now()
        self._subscribers.notify(self.snapshot)
