"""Temporary replacement of attributes or items, undone after a test."""

from __future__ import annotations

from collections.abc import MutableMapping
from typing import Any

from cfixture.outcome import TestFailure

MAX_POINTERS = 5


class PointerStore:
    """Remembers replaced values and restores them in reverse order."""

    def __init__(self, capacity: int = MAX_POINTERS) -> None:
        if capacity < 0:
            raise ValueError("capacity must not be negative")
        self.capacity = capacity
        self._saved: list[tuple[Any, Any, Any]] = []

    def reset(self) -> None:
        """Forget every saved value without restoring any."""
        self._saved.clear()

    def set(self, target: Any, attribute: Any, value: Any) -> None:
        """Replace ``target``'s attribute (or item, for mappings) with ``value``."""
        if len(self._saved) >= self.capacity:
            raise TestFailure("Too many pointers set")
        if isinstance(target, MutableMapping):
            old = target[attribute]
            target[attribute] = value
        else:
            old = getattr(target, attribute)
            setattr(target, attribute, value)
        self._saved.append((target, attribute, old))

    def undo_all(self) -> None:
        """Restore every replaced value, newest first."""
        while self._saved:
            target, attribute, old = self._saved.pop()
            if isinstance(target, MutableMapping):
                target[attribute] = old
            else:
                setattr(target, attribute, old)

    def __len__(self) -> int:
        return len(self._saved)