"""Subscriber registry shared by both engines."""

from __future__ import annotations

import logging
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Subscribers(Generic[T]):
    """
    Ordered set of snapshot callbacks.

    A callback that raises is logged and skipped; it never breaks the
    engine's timer chain or starves the remaining subscribers.

    Example:
        subs: Subscribers[str] = Subscribers()
        unsubscribe = subs.subscribe(print)
        subs.notify("hello")
        unsubscribe()
    """

    def __init__(self) -> None:
        self._callbacks: list[Callable[[T], None]] = []

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """
        Register a callback.

        Args:
            callback: Called with every published value

        Returns:
            Zero-argument function that removes the callback
        """
        if callback not in self._callbacks:
            self._callbacks.append(callback)
        return lambda: self.unsubscribe(callback)

    def unsubscribe(self, callback: Callable[[T], None]) -> None:
        """Remove a callback. Unknown callbacks are ignored."""
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def notify(self, value: T) -> None:
        # Copy so callbacks may unsubscribe while being notified
        for callback in list(self._callbacks):
            try:
                callback(value)
            except Exception:
                logger.exception("Subscriber %r failed", callback)

    def clear(self) -> None:
        self._callbacks.clear()

    def __len__(self) -> int:
        return len(self._callbacks)
