"""Store — one versioned, observable value.

A Store owns a single value of any shape (record, sequence or scalar).
set() resolves an update request into a candidate value; a candidate that
is structurally equal to the current value is dropped. Accepted changes are
mirrored to persistence, arm the history snapshot task and notify every
subscriber once, in registration order.

The live value is copy-on-write: every accepted value is a fresh structure
that nobody else holds, and it is never mutated in place afterwards.
Callers get it by reference from get() and must not mutate it.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Callable, Generic, Iterator, TypeVar

from gridstore.errors import ReducerNotConfiguredError, StoreError
from gridstore.history import History, HistoryOptions
from gridstore.persistence import Persistence, PersistenceSpec, Storage
from gridstore.scheduling import Scheduler, ThreadingScheduler
from gridstore.selection import Selection
from gridstore.structural import UNSET, deep_clone, deep_equal, deep_merge, is_plain_object
from gridstore.updates import Action, Dispatch, Merge, Mutate, Replace, UpdateRequest, coerce_update

T = TypeVar("T")
S = TypeVar("S")

Subscriber = Callable[[], None]
Reducer = Callable[[Any, Action], None]
Unsubscribe = Callable[[], None]

logger = logging.getLogger("gridstore.store")


class Store(Generic[T]):
    """Observable value with optional history and persistence.

    Usage:
        store = Store({"count": 5}, history=True)
        store.subscribe(lambda: print(store.get()))

        store.set(Mutate(lambda draft: draft.update(count=draft["count"] + 1)))
        # prints {'count': 6}

        store.flush_history()
        store.undo()
        # prints {'count': 5}
    """

    def __init__(
        self,
        initial: T,
        *,
        reducer: Reducer | None = None,
        persistence: PersistenceSpec | None = None,
        storage: Storage | None = None,
        history: bool | HistoryOptions = False,
        scheduler: Scheduler | None = None,
        notify_scheduler: Callable[[Callable[[], None]], Any] | None = None,
        strict_actions: bool = True,
    ) -> None:
        if persistence is not None and storage is None:
            raise ValueError("persistence requires a storage")

        self._initial: T = deep_clone(initial)
        self._reducer = reducer
        self._strict_actions = strict_actions
        self._notify_scheduler = notify_scheduler
        self._subscribers: dict[Subscriber, None] = {}
        self._batch_depth = 0
        self._batch_dirty = False
        self._notify_scheduled = False
        self._disposed = False

        self._persistence = Persistence(persistence, storage) if persistence is not None else None
        if self._persistence is not None:
            self._value: T = self._persistence.hydrate(self._initial)
        else:
            self._value = deep_clone(self._initial)

        self._history: History[T] | None = None
        if history:
            options = history if isinstance(history, HistoryOptions) else HistoryOptions()
            self._history = History(
                self._value,
                current=self.get,
                scheduler=scheduler or ThreadingScheduler(),
                options=options,
            )

    # --- Reads ---

    def get(self) -> T:
        """The live value. Treat it as read-only."""
        return self._value

    @property
    def initial_value(self) -> T:
        """A clone of the constructor value, before hydration."""
        return deep_clone(self._initial)

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    # --- Writes ---

    def set(self, update: UpdateRequest | Any) -> bool:
        """Apply an update. Returns True if the value actually changed."""
        if self._disposed:
            logger.debug("set() on a disposed store ignored")
            return False
        request = coerce_update(update, self._value)
        return self._accept(self._resolve(request))

    def _resolve(self, request: UpdateRequest) -> T:
        current = self._value

        if isinstance(request, Mutate):
            if not is_plain_object(current) and not isinstance(current, (list, tuple)):
                return request.fn(current)  # type: ignore[return-value]
            draft = deep_clone(current)
            result = request.fn(draft)
            # Detach: the caller may keep the draft around after we return.
            return deep_clone(draft if result is None else result)

        if isinstance(request, Dispatch):
            if self._reducer is not None:
                draft = deep_clone(current)
                self._reducer(draft, request.action)
                return deep_clone(draft)
            if self._strict_actions:
                raise ReducerNotConfiguredError(
                    f"action {request.action.kind!r} dispatched to a store without a reducer"
                )
            return self._resolve(coerce_update(request.action.as_data(), current))

        if isinstance(request, Merge):
            if is_plain_object(current):
                return deep_merge(current, request.partial)
            return deep_clone(request.partial)

        if isinstance(request, Replace):
            return deep_clone(request.value)

        raise TypeError(f"unsupported update request: {request!r}")

    def _accept(self, next_value: T) -> bool:
        if deep_equal(self._value, next_value):
            return False
        self._value = next_value
        self._persist()
        if self._history is not None:
            self._history.schedule()
        self._notify()
        return True

    def _replace_from_history(self, value: Any) -> bool:
        if value is UNSET:
            return False
        self._value = value
        self._persist()
        self._notify()
        return True

    def _persist(self) -> None:
        if self._persistence is not None:
            self._persistence.save(self._value)

    # --- History ---

    def _require_history(self) -> History[T]:
        if self._history is None:
            raise StoreError("store was created without history")
        return self._history

    @property
    def history_enabled(self) -> bool:
        return self._history is not None

    @property
    def current_version(self) -> int:
        return self._require_history().cursor

    def get_history(self) -> list[T]:
        """Clones of every recorded version, oldest first."""
        return self._require_history().entries()

    def flush_history(self) -> bool:
        """Record a pending snapshot now instead of waiting out the debounce."""
        return self._require_history().flush()

    def undo(self) -> bool:
        history = self._require_history()
        if self._disposed:
            return False
        history.flush()
        return self._replace_from_history(history.undo())

    def redo(self) -> bool:
        history = self._require_history()
        if self._disposed:
            return False
        history.flush()
        return self._replace_from_history(history.redo())

    def rollback_to(self, index: int) -> bool:
        """Jump to a recorded version. Out-of-range indexes are a no-op."""
        history = self._require_history()
        if self._disposed:
            return False
        history.flush()
        return self._replace_from_history(history.move_to(index))

    def reset_store(self) -> None:
        """Back to the initial value, with history collapsed to that single entry."""
        history = self._require_history()
        if self._disposed:
            return
        self._value = deep_clone(self._initial)
        history.reset(self._value)
        self._persist()
        self._notify()

    # --- Subscriptions ---

    def subscribe(self, callback: Subscriber) -> Unsubscribe:
        """Register callback. Returns a function that removes it (idempotent)."""
        self._subscribers[callback] = None

        def _unsubscribe() -> None:
            self._subscribers.pop(callback, None)

        return _unsubscribe

    def select(self, selector: Callable[[T], S] | None = None) -> Selection[T, S]:
        """A memoized view of this store for one consumer."""
        return Selection(self, selector)

    def _notify(self) -> None:
        if self._batch_depth > 0:
            self._batch_dirty = True
            return
        if self._notify_scheduler is None:
            self._run_subscribers()
        elif not self._notify_scheduled:
            self._notify_scheduled = True
            self._notify_scheduler(self._run_scheduled)

    def _run_scheduled(self) -> None:
        self._notify_scheduled = False
        if not self._disposed:
            self._run_subscribers()

    def _run_subscribers(self) -> None:
        for callback in list(self._subscribers):
            # Unsubscribed by an earlier callback in this same round.
            if callback in self._subscribers:
                callback()

    @contextmanager
    def batch(self) -> Iterator[Store[T]]:
        """Notify subscribers once for every change made inside the block.

        Usage:
            with store.batch():
                store.set(Merge({"a": 1}))
                store.set(Merge({"b": 2}))
                # subscribers fire here, once
        """
        self._batch_depth += 1
        try:
            yield self
        finally:
            self._batch_depth -= 1
            if self._batch_depth == 0 and self._batch_dirty:
                self._batch_dirty = False
                self._notify()

    # --- Lifecycle ---

    def dispose(self) -> None:
        """Cancel the pending snapshot and drop every subscriber."""
        if self._disposed:
            return
        self._disposed = True
        if self._history is not None:
            self._history.cancel()
        self._subscribers.clear()

    def __enter__(self) -> Store[T]:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.dispose()

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else "active"
        return f"Store({self._value!r}, {state})"
