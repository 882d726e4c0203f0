"""Observable value slots.

A `Cell` holds one value and tells its subscribers when the value changes.
Cells are created up front by their owner and then only ever mutated, so
anything bound to a cell can rely on its identity for the lifetime of the
owner.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Generic, TypeVar

T = TypeVar("T")
"""Type variable for the value held by a cell."""

Listener = Callable[[T], None]


class Subscription:
    """Handle returned by `subscribe`; cancelling it stops notifications.

    Cancelling twice is harmless.
    """

    def __init__(self, cancel: Callable[[], None]) -> None:
        self._cancel = cancel
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        if self._active:
            self._active = False
            self._cancel()


class Listeners(Generic[T]):
    """An ordered set of callbacks, notified in subscription order."""

    def __init__(self) -> None:
        self._next_id = 0
        self._callbacks: Dict[int, Listener[T]] = {}

    def __len__(self) -> int:
        return len(self._callbacks)

    def add(self, callback: Listener[T]) -> Subscription:
        key = self._next_id
        self._next_id += 1
        self._callbacks[key] = callback
        return Subscription(lambda: self._callbacks.pop(key, None))

    def notify(self, value: T) -> None:
        # Copy so callbacks may unsubscribe while being notified
        for callback in list(self._callbacks.values()):
            callback(value)


class Cell(Generic[T]):
    """A mutable slot whose writes are observable.

    Writing a value equal to the current one does nothing: no assignment,
    no notification.
    """

    def __init__(self, value: T) -> None:
        self._value = value
        self._listeners: Listeners[T] = Listeners()

    def get(self) -> T:
        return self._value

    def set(self, value: T) -> bool:
        """Replace the value, notifying subscribers if it changed.

        Args:
            value: The new value.

        Returns:
            True if the value changed, False if it was equal to the old one.
        """
        if value == self._value:
            return False
        self._value = value
        self._listeners.notify(value)
        return True

    def subscribe(self, callback: Listener[T]) -> Subscription:
        """Register a callback invoked with each new value."""
        logging.debug("subscribing to cell %x", id(self))
        return self._listeners.add(callback)

    @property
    def subscriber_count(self) -> int:
        return len(self._listeners)

    def __repr__(self) -> str:
        return f"Cell({self._value!r})"
