"""Per-kind resource version cursors used to resume watches."""

from __future__ import annotations

import threading

from jhipster_operator.domain import ResourceKind


class WatchCursorRegistry:
    """Thread-safe map from resource kind to the last observed resource version."""

    def __init__(self):
        self._lock = threading.Lock()
        self._cursors: dict[ResourceKind, str | None] = {}

    def cursor_get(self, kind: ResourceKind) -> str | None:
        with self._lock:
            return self._cursors.get(kind)

    def cursor_advance(self, kind: ResourceKind, resource_version: str | None) -> None:
        """Record the version of the most recent list or event for a kind.

        Empty versions are ignored so a malformed event never rewinds the cursor.
        """

        if not resource_version:
            return
        with self._lock:
            self._cursors[kind] = resource_version

    def cursor_reset(self, kind: ResourceKind) -> None:
        with self._lock:
            self._cursors.pop(kind, None)

    def cursor_snapshot(self) -> dict[ResourceKind, str | None]:
        with self._lock:
            return dict(self._cursors)
