"""Update requests — the four shapes a Store.set() call can take.

Callers build the variant explicitly:

    store.set(Replace({"count": 0}))
    store.set(Merge({"column_visibility": {"id": False}}))
    store.set(Mutate(lambda draft: draft.update(count=draft["count"] + 1)))
    store.set(Dispatch(Action("increment", 2)))

coerce_update() maps a raw argument onto one of them, once, at the edge.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar, Union

from gridstore.structural import is_plain_object

T = TypeVar("T")


@dataclass(frozen=True)
class Action:
    """A reducer message: what happened, and its data."""

    kind: str
    payload: Any = None

    def as_data(self) -> dict[str, Any]:
        return {"kind": self.kind, "payload": self.payload}


@dataclass(frozen=True)
class Replace(Generic[T]):
    value: T


@dataclass(frozen=True)
class Merge:
    partial: Any


@dataclass(frozen=True)
class Mutate(Generic[T]):
    """fn(draft) mutates the draft in place, or returns a replacement."""

    fn: Callable[[T], T | None]


@dataclass(frozen=True)
class Dispatch:
    action: Action


UpdateRequest = Union[Replace, Merge, Mutate, Dispatch]

_VARIANTS = (Replace, Merge, Mutate, Dispatch)


def coerce_update(update: Any, current: Any) -> UpdateRequest:
    """Wrap a raw set() argument in its variant.

    Explicit variants pass through untouched. Callables mutate, Action
    instances dispatch, mappings merge into a record store; anything else
    replaces.
    """
    if isinstance(update, _VARIANTS):
        return update
    if isinstance(update, Action):
        return Dispatch(update)
    if callable(update):
        return Mutate(update)
    if is_plain_object(update) and is_plain_object(current):
        return Merge(update)
    return Replace(update)
