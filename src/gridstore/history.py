"""Debounced, bounded, linear version history.

A burst of accepted changes arms one snapshot task; each change re-arms it.
When the task finally fires, the value live at that moment is cloned and
appended after the cursor, dropping any redo branch. The oldest entry is
evicted once the cap is exceeded.

The task may fire on a timer thread, so entries and cursor are guarded by
a lock.
"""

from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

from gridstore.scheduling import Scheduler, TaskHandle
from gridstore.structural import UNSET, deep_clone

T = TypeVar("T")

DEFAULT_DEBOUNCE_SECONDS = 0.2
DEFAULT_MAX_ENTRIES = 100

logger = logging.getLogger("gridstore.history")


@dataclass(frozen=True)
class HistoryOptions:
    debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS
    max_entries: int = DEFAULT_MAX_ENTRIES

    def __post_init__(self) -> None:
        if self.debounce_seconds < 0:
            raise ValueError("debounce_seconds must be >= 0")
        if self.max_entries < 1:
            raise ValueError("max_entries must be >= 1")


class History(Generic[T]):
    """Snapshot sequence plus cursor for one store."""

    def __init__(
        self,
        initial: T,
        current: Callable[[], T],
        scheduler: Scheduler,
        options: HistoryOptions | None = None,
    ) -> None:
        self._options = options or HistoryOptions()
        self._current = current
        self._scheduler = scheduler
        self._lock = threading.RLock()
        self._entries: list[T] = [deep_clone(initial)]
        self._cursor = 0
        self._pending: TaskHandle | None = None
        self._pending_token: int | None = None
        self._tokens = itertools.count(1)

    @property
    def options(self) -> HistoryOptions:
        return self._options

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def __len__(self) -> int:
        return len(self._entries)

    def entries(self) -> list[T]:
        """Deep clones of every entry, oldest first."""
        with self._lock:
            return [deep_clone(entry) for entry in self._entries]

    def schedule(self) -> None:
        """Arm (or re-arm) the snapshot task."""
        with self._lock:
            self._cancel_pending()
            token = next(self._tokens)
            self._pending_token = token
            self._pending = self._scheduler.call_later(
                self._options.debounce_seconds, lambda: self._fire(token)
            )

    def flush(self) -> bool:
        """Commit a pending snapshot now. Returns True if one was pending."""
        with self._lock:
            if self._pending is None:
                return False
            self._cancel_pending()
            self._commit()
            return True

    def cancel(self) -> None:
        with self._lock:
            self._cancel_pending()

    def undo(self) -> Any:
        """Step back. Returns a clone of the new current entry, or UNSET at the bottom."""
        with self._lock:
            if self._cursor <= 0:
                return UNSET
            self._cursor -= 1
            return deep_clone(self._entries[self._cursor])

    def redo(self) -> Any:
        with self._lock:
            if self._cursor >= len(self._entries) - 1:
                return UNSET
            self._cursor += 1
            return deep_clone(self._entries[self._cursor])

    def move_to(self, index: int) -> Any:
        """Jump the cursor. Out-of-range indexes return UNSET and change nothing."""
        with self._lock:
            if not 0 <= index < len(self._entries):
                return UNSET
            self._cursor = index
            return deep_clone(self._entries[index])

    def reset(self, value: T) -> None:
        with self._lock:
            self._cancel_pending()
            self._entries = [deep_clone(value)]
            self._cursor = 0

    def _fire(self, token: int) -> None:
        with self._lock:
            # A task cancelled after its timer already started still runs.
            if token != self._pending_token:
                return
            self._pending = None
            self._pending_token = None
            self._commit()

    def _commit(self) -> None:
        snapshot = deep_clone(self._current())
        del self._entries[self._cursor + 1 :]
        self._entries.append(snapshot)
        self._cursor = len(self._entries) - 1
        if len(self._entries) > self._options.max_entries:
            self._entries.pop(0)
            self._cursor -= 1
        logger.debug("history entry %d of %d recorded", self._cursor, len(self._entries))

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
        self._pending = None
        self._pending_token = None
