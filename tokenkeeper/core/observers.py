"""Observer registry for session status notifications."""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)

Observer = Callable[[], None]


class ObserverHandle:
    """Subscription token. Calling it (or ``unsubscribe``) is idempotent."""

    def __init__(self, registry: ObserverRegistry, key: int) -> None:
        self._registry = registry
        self._key = key

    @property
    def active(self) -> bool:
        return self._registry._has(self._key)

    def unsubscribe(self) -> None:
        self._registry._remove(self._key)

    def __call__(self) -> None:
        self.unsubscribe()


class ObserverRegistry:
    """Ordered set of zero-argument callbacks.

    ``notify_all`` walks a snapshot, so callbacks may subscribe or unsubscribe
    (themselves or others) during delivery without affecting the current round.
    A callback that raises is logged and skipped.
    """

    def __init__(self) -> None:
        self._callbacks: dict[int, Observer] = {}
        self._keys = itertools.count()

    def __len__(self) -> int:
        return len(self._callbacks)

    def subscribe(self, callback: Observer) -> ObserverHandle:
        if not callable(callback):
            raise TypeError("observer must be callable")
        key = next(self._keys)
        self._callbacks[key] = callback
        return ObserverHandle(self, key)

    def notify_all(self) -> int:
        """Invoke every subscriber in subscription order.

        Returns the number of callbacks that raised.
        """
        failures = 0
        for callback in list(self._callbacks.values()):
            try:
                callback()
            except Exception:
                failures += 1
                logger.exception("Session observer %r raised", callback)
        return failures

    def clear(self) -> None:
        self._callbacks.clear()

    def _has(self, key: int) -> bool:
        return key in self._callbacks

    def _remove(self, key: int) -> None:
        self._callbacks.pop(key, None)
