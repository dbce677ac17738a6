"""Store layer package for the in-memory desired state."""

from .state_store import ApplicationStateStore
from .watch_cursors import WatchCursorRegistry

__all__ = ["ApplicationStateStore", "WatchCursorRegistry"]
