"""Grid preference state — what the table layer keeps in a Store.

Rows come from an external query cache through a PageFetcher; the store
only holds UI preferences such as which columns are visible, and persists
them between sessions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Protocol, Sequence, TypedDict

from gridstore.persistence import PersistenceSpec, Storage
from gridstore.store import Store
from gridstore.updates import Merge

GRID_PERSIST_KEY = "VDwqVtPbjI8v/jWe+XIbWA=="
GRID_PERSIST_FIELDS = ("column_visibility",)


class GridState(TypedDict):
    column_visibility: dict[str, bool]


def initial_grid_state() -> GridState:
    return {"column_visibility": {}}


def create_grid_store(
    storage: Storage, key: str = GRID_PERSIST_KEY, **options: Any
) -> Store[GridState]:
    """A Store over GridState that persists only column visibility."""
    return Store(
        initial_grid_state(),
        persistence=PersistenceSpec(key, GRID_PERSIST_FIELDS),
        storage=storage,
        **options,
    )


def set_column_visible(store: Store[GridState], column_id: str, visible: bool) -> bool:
    return store.set(Merge({"column_visibility": {column_id: visible}}))


def visible_columns(column_ids: Iterable[str], state: GridState) -> list[str]:
    """Column ids in their original order, minus hidden ones. Unknown ids are visible."""
    visibility = state.get("column_visibility", {})
    return [column_id for column_id in column_ids if visibility.get(column_id, True)]


# --- Query-cache collaborator (interface only) ---


@dataclass(frozen=True)
class SortSpec:
    column_id: str
    descending: bool = False


@dataclass(frozen=True)
class Page:
    rows: Sequence[Any] = field(default_factory=tuple)
    total_count: int = 0


class PageFetcher(Protocol):
    def __call__(self, offset: int, page_size: int, sort: Sequence[SortSpec]) -> Page: ...
