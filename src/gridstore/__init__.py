"""gridstore: versioned observable state for data-grid UIs."""

from importlib.metadata import version as _version

__version__ = _version("gridstore")

from gridstore.errors import (
    StoreError,
    UnboundedUsageError,
    ReducerNotConfiguredError,
    HydrationError,
    PersistWriteError,
)
from gridstore.structural import UNSET, deep_clone, deep_equal, deep_merge, is_plain_object
from gridstore.updates import Action, Replace, Merge, Mutate, Dispatch, UpdateRequest
from gridstore.scheduling import ThreadingScheduler, AsyncioScheduler, ManualScheduler
from gridstore.history import HistoryOptions
from gridstore.persistence import PersistenceSpec, MemoryStorage, FileStorage
from gridstore.selection import Selection
from gridstore.store import Store
from gridstore.context import ContextStore
from gridstore.keyboard import KeyChord, KeyEvent, KeyboardEnvironment, register_shortcuts
# textual NOT auto-imported — opt-in only

__all__ = [
    "StoreError",
    "UnboundedUsageError",
    "ReducerNotConfiguredError",
    "HydrationError",
    "PersistWriteError",
    "UNSET",
    "deep_clone",
    "deep_equal",
    "deep_merge",
    "is_plain_object",
    "Action",
    "Replace",
    "Merge",
    "Mutate",
    "Dispatch",
    "UpdateRequest",
    "ThreadingScheduler",
    "AsyncioScheduler",
    "ManualScheduler",
    "HistoryOptions",
    "PersistenceSpec",
    "MemoryStorage",
    "FileStorage",
    "Selection",
    "Store",
    "ContextStore",
    "KeyChord",
    "KeyEvent",
    "KeyboardEnvironment",
    "register_shortcuts",
]
