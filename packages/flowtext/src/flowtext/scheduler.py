"""
Scheduler abstraction for single-shot delayed callbacks.

This module provides:
- TimerHandle / SchedulerProtocol: the schedule-after / cancel-by-handle contract
- AsyncioScheduler: Production scheduler on top of loop.call_later()
- ManualScheduler: Deterministic virtual clock for tests and offline rendering

Both engines only ever talk to SchedulerProtocol, so a test can swap the
event loop for ManualScheduler and step time explicitly.

All delays and clock readings are seconds.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
from dataclasses import dataclass, field
from typing import Callable, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class TimerHandle(Protocol):
    """Opaque single-shot timer handle."""

    def cancel(self) -> None:
        ...


@runtime_checkable
class SchedulerProtocol(Protocol):
    """
    Protocol for single-shot delay scheduling.

    Implementations must:
    - Invoke callback once, no earlier than delay seconds after schedule()
    - Never invoke a callback whose handle was cancelled
    - Treat negative delays as zero
    """

    def now(self) -> float:
        """Current clock reading in seconds."""
        ...

    def schedule(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Run callback once after delay seconds."""
        ...

    def cancel(self, handle: TimerHandle) -> None:
        """Cancel a scheduled callback. Cancelling twice is harmless."""
        ...


class AsyncioScheduler:
    """
    Scheduler backed by the asyncio event loop.

    Uses the loop given at construction, or the running loop at the time
    of each call. Must be used from the loop's thread.

    Example:
        async def main():
            writer = SequencedTypewriter("Hello", scheduler=AsyncioScheduler())
            writer.start()
            await asyncio.sleep(1)
            writer.close()
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is not None:
            return self._loop
        return asyncio.get_running_loop()

    def now(self) -> float:
        return self._get_loop().time()

    def schedule(
        self, delay: float, callback: Callable[[], None]
    ) -> asyncio.TimerHandle:
        return self._get_loop().call_later(max(0.0, delay), callback)

    def cancel(self, handle: TimerHandle) -> None:
        handle.cancel()


@dataclass(eq=False)
class ManualTimer:
    """
    Timer handle issued by ManualScheduler.

    Attributes:
        when: Virtual time at which the callback is due
        callback: Function to invoke
        cancelled: True once cancel() was called
        fired: True once the callback ran
    """

    when: float
    callback: Callable[[], None]
    cancelled: bool = False
    fired: bool = False

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.fired)


@dataclass
class ManualScheduler:
    """
    Deterministic virtual-time scheduler.

    Time only moves when advance() or run_until_idle() is called. Callbacks
    fire in due-time order; ties fire in scheduling order. Callbacks that
    schedule new timers during advance() are picked up in the same call if
    they fall due before the target time.

    Example:
        scheduler = ManualScheduler()
        writer = SequencedTypewriter(
            "Hi", AnimationConfig(show_cursor=False), scheduler=scheduler
        )
        writer.start()
        scheduler.run_until_idle()
        assert writer.snapshot.text == "Hi"
    """

    time: float = 0.0
    cancelled_count: int = 0
    _queue: list[tuple[float, int, ManualTimer]] = field(
        default_factory=list, init=False, repr=False
    )
    _counter: itertools.count = field(
        default_factory=itertools.count, init=False, repr=False
    )

    def now(self) -> float:
        return self.time

    def schedule(self, delay: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(when=self.time + max(0.0, delay), callback=callback)
        heapq.heappush(self._queue, (timer.when, next(self._counter), timer))
        return timer

    def cancel(self, handle: TimerHandle) -> None:
        if isinstance(handle, ManualTimer) and handle.active:
            self.cancelled_count += 1
        handle.cancel()

    @property
    def pending(self) -> list[ManualTimer]:
        """Outstanding timers in due order."""
        return [t for _, _, t in sorted(self._queue) if t.active]

    def _pop_due(self, until: float | None) -> ManualTimer | None:
        while self._queue:
            when, _, timer = self._queue[0]
            if not timer.active:
                heapq.heappop(self._queue)
                continue
            if until is not None and when > until:
                return None
            heapq.heappop(self._queue)
            return timer
        return None

    def _fire(self, timer: ManualTimer) -> None:
        self.time = max(self.time, timer.when)
        timer.fired = True
        timer.callback()

    def advance(self, seconds: float) -> int:
        """
        Move the clock forward, firing every callback that falls due.

        Args:
            seconds: Amount of virtual time to advance

        Returns:
            Number of callbacks fired
        """
        target = self.time + max(0.0, seconds)
        fired = 0
        while (timer := self._pop_due(target)) is not None:
            self._fire(timer)
            fired += 1
        self.time = target
        return fired

    def run_until_idle(self, limit: int = 100_000) -> int:
        """
        Fire callbacks until nothing is pending.

        Args:
            limit: Maximum callbacks to fire before giving up

        Returns:
            Number of callbacks fired

        Raises:
            RuntimeError: If more than limit callbacks fire (a run that
                never settles, e.g. a looping typewriter)
        """
        fired = 0
        while (timer := self._pop_due(None)) is not None:
            if fired >= limit:
                # Put it back so pending still reflects reality
                heapq.heappush(self._queue, (timer.when, next(self._counter), timer))
                raise RuntimeError(
                    f"Scheduler still busy after {limit} callbacks "
                    f"(virtual time {self.time:.3f}s)"
                )
            self._fire(timer)
            fired += 1
        logger.debug("Scheduler idle after %d callbacks at t=%.3fs", fired, self.time)
        return fired
