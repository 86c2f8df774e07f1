"""Exception hierarchy.

Misuse errors (no current store, action without reducer) are raised to the
caller. Data errors (HydrationError, PersistWriteError) are raised inside the
persistence layer and contained there: they are logged, never surfaced.
"""


class StoreError(Exception):
    """Base class for all gridstore errors."""


class UnboundedUsageError(StoreError, RuntimeError):
    """A store accessor was used outside any ContextStore.provide() block."""


class ReducerNotConfiguredError(StoreError, TypeError):
    """A Dispatch update reached a store that has no reducer."""


class HydrationError(StoreError):
    """Persisted content could not be read back into the store."""


class PersistWriteError(StoreError):
    """The durable layer rejected a write."""
