"""Observable value with an explicit unsubscribe contract.

subscribe() hands back a callable that detaches the subscriber; calling it
more than once is harmless.
"""
from typing import Callable, Generic, TypeVar

T = TypeVar("T")


class Observable(Generic[T]):
    """Holds a value and notifies subscribers when it changes."""

    def __init__(self, value: T):
        self._value = value
        self._subscribers: list[Callable[[T, T], None]] = []

    @property
    def value(self) -> T:
        return self._value

    def set(self, value: T) -> bool:
        """Update the value.

        Returns:
            True if the value changed and subscribers were notified
        """
        old = self._value
        if value == old:
            return False
        self._value = value
        for callback in list(self._subscribers):
            callback(old, value)
        return True

    def subscribe(self, callback: Callable[[T, T], None]) -> Callable[[], None]:
        """Call callback(old, new) on every change.

        Returns:
            Unsubscribe function
        """
        # One wrapper per subscription, so unsubscribe removes exactly this one
        def listener(old: T, new: T) -> None:
            callback(old, new)

        self._subscribers.append(listener)

        def unsubscribe() -> None:
            if listener in self._subscribers:
                self._subscribers.remove(listener)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)
