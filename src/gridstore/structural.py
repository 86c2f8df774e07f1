"""Structural helpers over nested mapping / sequence / scalar data.

Records are Mappings, sequences are lists and tuples, everything else is a
scalar. Callables and other non-data values are treated as immutable and
pass through clone and merge by reference.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from typing import Any, TypeVar

T = TypeVar("T")

logger = logging.getLogger("gridstore.structural")


class _Unset:
    """Marker for an absent key in a partial update. Falsy, singleton."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNSET"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self


UNSET: Any = _Unset()


def is_plain_object(value: object) -> bool:
    """True for record-shaped containers (not sequences, None or scalars)."""
    return isinstance(value, Mapping)


def _is_sequence(value: object) -> bool:
    return isinstance(value, (list, tuple))


def _clone_manual(source: T) -> T:
    if isinstance(source, Mapping):
        return {key: _clone_manual(value) for key, value in source.items()}  # type: ignore[return-value]
    if isinstance(source, list):
        return [_clone_manual(item) for item in source]  # type: ignore[return-value]
    if isinstance(source, tuple):
        return tuple(_clone_manual(item) for item in source)  # type: ignore[return-value]
    return source


def deep_clone(source: T) -> T:
    """Return a copy of source sharing no mutable substructure with it.

    copy.deepcopy does the work when it can. Values it refuses (locks,
    generators, open files nested in the data) send us down a manual walk
    that rebuilds the containers and passes the leaves through.
    """
    try:
        return copy.deepcopy(source)
    except (TypeError, copy.Error, RecursionError) as exc:
        logger.debug("deepcopy refused %s, cloning manually: %s", type(source).__name__, exc)
        return _clone_manual(source)


def deep_equal(source: object, destination: object) -> bool:
    """Structural equality. Key order is irrelevant, sequence order is not."""
    if source is destination:
        return True

    if is_plain_object(source) and is_plain_object(destination):
        if len(source) != len(destination):  # type: ignore[arg-type]
            return False
        for key, value in source.items():  # type: ignore[union-attr]
            if key not in destination:  # type: ignore[operator]
                return False
            if not deep_equal(value, destination[key]):  # type: ignore[index]
                return False
        return True

    if _is_sequence(source) and _is_sequence(destination):
        if len(source) != len(destination):  # type: ignore[arg-type]
            return False
        return all(deep_equal(a, b) for a, b in zip(source, destination))  # type: ignore[call-overload]

    if is_plain_object(source) or is_plain_object(destination):
        return False
    if _is_sequence(source) or _is_sequence(destination):
        return False

    # True == 1 in Python; a flag flipping to a count is still a change.
    if isinstance(source, bool) != isinstance(destination, bool):
        return False
    try:
        return bool(source == destination)
    except (TypeError, ValueError):
        return False


def deep_merge(target: T, partial: Any) -> T:
    """Return a new value: target with every key of partial laid over it.

    Mappings present on both sides merge recursively; any other value in
    partial replaces the target's. Keys whose value is UNSET are skipped,
    so a merge never deletes a key.
    """
    if partial is None or partial is UNSET:
        return target
    if not is_plain_object(target) or not is_plain_object(partial):
        return deep_clone(partial)

    result = deep_clone(dict(target))  # type: ignore[call-overload]
    for key, value in partial.items():
        if value is UNSET:
            continue
        existing = result.get(key, UNSET)
        if is_plain_object(existing) and is_plain_object(value):
            result[key] = deep_merge(existing, value)
        else:
            result[key] = deep_clone(value)
    return result  # type: ignore[return-value]
