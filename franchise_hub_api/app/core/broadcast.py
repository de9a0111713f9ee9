"""
Subject-style publishers used to broadcast collection snapshots.

A ``BehaviorSubject`` remembers the last value it published.  New
subscribers receive that value immediately, then every subsequent one.
The store owns one subject per entity collection.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Generic, TypeVar


logger = logging.getLogger(__name__)

T = TypeVar("T")


class BehaviorSubject(Generic[T]):
    """Holds a current value and pushes every new value to subscribers."""

    def __init__(self, initial: T, name: str = "") -> None:
        self.name = name
        self._value = initial
        self._subscribers: Dict[int, Callable[[T], None]] = {}
        self._next_token = 0

    @property
    def value(self) -> T:
        return self._value

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """Register ``callback`` and call it with the current value.

        Returns a function that removes the subscription.  Calling it more
        than once is harmless.
        """
        token = self._next_token
        self._next_token += 1
        self._subscribers[token] = callback
        self._deliver(token, callback, self._value)

        def unsubscribe() -> None:
            self._subscribers.pop(token, None)

        return unsubscribe

    def next(self, value: T) -> None:
        """Store ``value`` and deliver it to every subscriber in order."""
        self._value = value
        # Copy: a callback may unsubscribe itself while we iterate.
        for token, callback in list(self._subscribers.items()):
            self._deliver(token, callback, value)

    def _deliver(self, token: int, callback: Callable[[T], None], value: T) -> None:
        try:
            callback(value)
        except Exception:
            logger.exception(
                "Subscriber %s of subject '%s' raised while handling an update",
                token,
                self.name,
            )
