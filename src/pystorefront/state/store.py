"""Minimal reactive store with identity-based change detection."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Generic, TypeVar

_logger = logging.getLogger(__name__)

S = TypeVar("S")

Listener = Callable[[S, S], None]
Unsubscribe = Callable[[], None]


class Store(Generic[S]):
    """Holds one immutable state value and notifies subscribers on replacement.

    ``set_state`` is synchronous; listeners run before it returns, in
    subscription order. A listener that raises is logged and skipped so one
    faulty consumer cannot break the others.
    """

    def __init__(self, initial: S) -> None:
        self._state = initial
        self._listeners: list[Listener[S]] = []

    @property
    def state(self) -> S:
        return self._state

    def get_state(self) -> S:
        return self._state

    def set_state(self, new_state: S) -> None:
        """Replace the state; no-op when *new_state* is the current object."""
        previous = self._state
        if new_state is previous:
            return
        self._state = new_state
        for listener in list(self._listeners):
            try:
                listener(new_state, previous)
            except Exception:
                _logger.exception("Store listener failed")

    def update(self, fn: Callable[[S], S]) -> None:
        """Replace the state with ``fn(current)``."""
        self.set_state(fn(self._state))

    def subscribe(self, listener: Listener[S]) -> Unsubscribe:
        """Call ``listener(new, old)`` on every change. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def select(
        self,
        selector: Callable[[S], Any],
        listener: Callable[[Any], None],
    ) -> Unsubscribe:
        """Subscribe to one slice; *listener* fires only when that slice object changes."""

        def _on_change(new: S, old: S) -> None:
            new_slice = selector(new)
            if new_slice is not selector(old):
                listener(new_slice)

        return self.subscribe(_on_change)
