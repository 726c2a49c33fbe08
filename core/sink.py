"""
Holder for the latest prediction set, with subscriber notification on a
caller-chosen delivery context.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable

from core.models import PredictionSet

logger = logging.getLogger(__name__)

Subscriber = Callable[[PredictionSet], None]
# Runs a zero-argument callable on some delivery context (e.g. the GUI thread).
Dispatcher = Callable[[Callable[[], None]], None]


def direct_dispatch(fn: Callable[[], None]) -> None:
    fn()


class PredictionSink:
    """Last-write-wins store of the newest PredictionSet. No history is kept."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._current: PredictionSet | None = None
        self._subscribers: list[tuple[Subscriber, Dispatcher]] = []

    def current(self) -> PredictionSet | None:
        with self._lock:
            return self._current

    def publish(self, predictions: PredictionSet) -> None:
        with self._lock:
            self._current = tuple(predictions)
            value = self._current
            subscribers = list(self._subscribers)
        for callback, dispatch in subscribers:
            try:
                dispatch(lambda cb=callback: cb(value))
            except Exception:
                logger.exception("Prediction subscriber %r failed", callback)

    def subscribe(
        self, callback: Subscriber, dispatcher: Dispatcher | None = None
    ) -> Callable[[], None]:
        """
        Register `callback` for every new PredictionSet. `dispatcher` decides
        where it runs; by default it is called on the publishing thread.
        Returns a function that removes the subscription.
        """
        entry = (callback, dispatcher or direct_dispatch)
        with self._lock:
            self._subscribers.append(entry)

        def unsubscribe() -> None:
            with self._lock:
                if entry in self._subscribers:
                    self._subscribers.remove(entry)

        return unsubscribe

    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)
