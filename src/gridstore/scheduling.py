"""Cancellable deferred tasks for the history debounce.

A Scheduler hands out handles with cancel(). The store owns its handle and
cancels it on every new change, on reset and on dispose.

- ThreadingScheduler: daemon threading.Timer per task (default).
- AsyncioScheduler: loop.call_later, for stores living on an event loop.
- ManualScheduler: virtual clock driven by advance(), for tests and hosts
  with their own frame loop.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
import threading
from typing import Callable, Protocol

TaskCallback = Callable[[], None]


class TaskHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay_seconds: float, callback: TaskCallback) -> TaskHandle: ...


class ThreadingScheduler:
    """Runs each callback on a daemon timer thread."""

    def call_later(self, delay_seconds: float, callback: TaskCallback) -> threading.Timer:
        timer = threading.Timer(delay_seconds, callback)
        timer.daemon = True
        timer.start()
        return timer


class AsyncioScheduler:
    """Schedules on an asyncio loop. Must be used from the loop's thread."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_later(self, delay_seconds: float, callback: TaskCallback) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay_seconds, callback)


class _ManualTask:
    __slots__ = ("due", "callback", "cancelled")

    def __init__(self, due: float, callback: TaskCallback) -> None:
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Virtual clock. Nothing fires until advance() moves time past a due point."""

    def __init__(self) -> None:
        self._now = 0.0
        self._order = itertools.count()
        self._queue: list[tuple[float, int, _ManualTask]] = []

    @property
    def now(self) -> float:
        return self._now

    @property
    def pending_count(self) -> int:
        return sum(1 for _, _, task in self._queue if not task.cancelled)

    def call_later(self, delay_seconds: float, callback: TaskCallback) -> _ManualTask:
        if delay_seconds < 0:
            raise ValueError("delay_seconds must be >= 0")
        task = _ManualTask(self._now + delay_seconds, callback)
        heapq.heappush(self._queue, (task.due, next(self._order), task))
        return task

    def advance(self, seconds: float) -> int:
        """Move the clock forward, running due tasks in order. Returns how many ran."""
        if seconds < 0:
            raise ValueError("seconds must be >= 0")
        target = self._now + seconds
        ran = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, task = heapq.heappop(self._queue)
            if task.cancelled:
                continue
            self._now = due
            task.callback()
            ran += 1
        self._now = target
        return ran
