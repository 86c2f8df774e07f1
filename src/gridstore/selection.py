"""Selection — the pull/subscribe contract a rendering layer consumes.

Each Selection is one consumer's view of a store: a selector plus the last
value it produced. get_snapshot() hands back the previous result object
whenever the new one is structurally equal, so consumers that compare by
identity only re-render on real changes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Generic, TypeVar

from gridstore.structural import deep_clone, deep_equal

if TYPE_CHECKING:
    from gridstore.store import Store

T = TypeVar("T")
S = TypeVar("S")


def _identity(value):
    return value


class Selection(Generic[T, S]):
    """Memoized selector over a Store."""

    __slots__ = ("_store", "_selector", "_last")

    def __init__(self, store: Store[T], selector: Callable[[T], S] | None = None) -> None:
        self._store = store
        self._selector: Callable[[T], S] = selector or _identity
        self._last: S = self._selector(store.get())

    @property
    def store(self) -> Store[T]:
        return self._store

    def get_snapshot(self) -> S:
        """Selector applied to the live value, reusing the last result when equal."""
        selected = self._selector(self._store.get())
        if not deep_equal(self._last, selected):
            self._last = selected
        return self._last

    def get_server_snapshot(self) -> S:
        """Selector applied to the original initial value. No memo, no side effects."""
        return self._selector(deep_clone(self._store.initial_value))

    def subscribe(self, callback: Callable[[], None]) -> Callable[[], None]:
        return self._store.subscribe(callback)

    def __repr__(self) -> str:
        return f"Selection({getattr(self._selector, '__name__', self._selector)!r}, last={self._last!r})"
