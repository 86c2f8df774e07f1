"""Context-scoped stores.

A ContextStore is a factory: every provide() block gets its own Store,
visible to code running inside the block through contextvars. Accessors
used outside any block raise UnboundedUsageError.

Usage:
    preferences = ContextStore({"column_visibility": {}})

    with preferences.provide():
        dispatch = preferences.use_dispatch()
        dispatch(Merge({"column_visibility": {"id": False}}))
        preferences.use_store(lambda s: s["column_visibility"]).get_snapshot()
"""

from __future__ import annotations

import contextvars
import itertools
from contextlib import contextmanager
from typing import Any, Callable, Generic, Iterator, TypeVar

from gridstore.errors import UnboundedUsageError
from gridstore.selection import Selection
from gridstore.store import Store

T = TypeVar("T")
S = TypeVar("S")

_ids = itertools.count(1)


class ContextStore(Generic[T]):
    """Creates one Store per provide() scope, all from the same initial value and options."""

    def __init__(self, initial: T, **store_options: Any) -> None:
        self._initial = initial
        self._options = store_options
        self._current: contextvars.ContextVar[Store[T] | None] = contextvars.ContextVar(
            f"gridstore_context_{next(_ids)}", default=None
        )

    def create(self) -> Store[T]:
        return Store(self._initial, **self._options)

    @contextmanager
    def provide(self) -> Iterator[Store[T]]:
        """Make a fresh store current for the block; dispose it on exit."""
        store = self.create()
        token = self._current.set(store)
        try:
            yield store
        finally:
            self._current.reset(token)
            store.dispose()

    def current(self) -> Store[T]:
        store = self._current.get()
        if store is None:
            raise UnboundedUsageError("Store not found")
        return store

    def use_store(self, selector: Callable[[T], S] | None = None) -> Selection[T, S]:
        return self.current().select(selector)

    def use_dispatch(self) -> Callable[[Any], bool]:
        return self.current().set
