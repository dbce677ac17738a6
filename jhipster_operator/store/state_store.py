"""In-memory desired-state index fed by bootstrap loading and watches.

Every read and write goes through one re-entrant lock. Multi-step updates use
`store_transaction()` so no other mutation interleaves with them.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import replace
from typing import Iterator

from jhipster_operator.domain import (
    SUBORDINATE_KINDS,
    ApplicationRecord,
    ApplicationStatus,
    ResourceKind,
    SubordinateRecord,
)


class ApplicationStateStore:
    """Application records plus label-linked subordinate records per kind."""

    def __init__(self):
        self._lock = threading.RLock()
        self._applications: dict[str, ApplicationRecord] = {}
        self._subordinates: dict[ResourceKind, dict[str, SubordinateRecord]] = {
            kind: {} for kind in SUBORDINATE_KINDS
        }
        self._application_urls: dict[str, str] = {}
        self._change_sequence = 0
        self._subordinate_changes: dict[tuple[ResourceKind, str], int] = {}

    @contextmanager
    def store_transaction(self) -> Iterator["ApplicationStateStore"]:
        """Hold the store lock for a multi-step update.

        Yields:
            ApplicationStateStore: This store, locked for the duration of the block.
        """

        with self._lock:
            yield self

    def store_put_application(self, record: ApplicationRecord) -> None:
        """Insert or replace an application keyed by name."""

        with self._lock:
            self._applications[record.name] = record

    def store_remove_application(self, name: str) -> bool:
        """Remove an application and its cached URL.

        Subordinate associations are left in place until their own removal.

        Returns:
            bool: True when an application was removed.
        """

        with self._lock:
            self._application_urls.pop(name, None)
            return self._applications.pop(name, None) is not None

    def store_get_application(self, name: str) -> ApplicationRecord | None:
        with self._lock:
            return self._applications.get(name)

    def store_list_applications(self) -> list[ApplicationRecord]:
        """Return a name-ordered snapshot of all application records."""

        with self._lock:
            return [self._applications[name] for name in sorted(self._applications)]

    def store_list_application_names(self) -> list[str]:
        with self._lock:
            return sorted(self._applications)

    def store_update_application_status(self, name: str, status: ApplicationStatus, url: str) -> ApplicationRecord | None:
        """Set status and URL on a tracked application.

        Args:
            name: Application name.
            status: Reconciled status.
            url: Public URL or the not-available sentinel.

        Returns:
            ApplicationRecord | None: Updated record, None when the application is no longer tracked.
        """

        with self._lock:
            current_record = self._applications.get(name)
            if current_record is None:
                return None
            updated_record = replace(current_record, status=status, url=url)
            self._applications[name] = updated_record
            if status is ApplicationStatus.HEALTHY:
                self._application_urls[name] = url
            else:
                self._application_urls.pop(name, None)
            return updated_record

    def store_application_urls(self) -> dict[str, str]:
        """Return URLs of applications last reconciled as healthy."""

        with self._lock:
            return dict(self._application_urls)

    def store_attach_subordinate(self, record: SubordinateRecord) -> bool:
        """Associate a subordinate with the application named by its label.

        A subordinate name maps to one record per kind, so re-attaching moves the
        association instead of duplicating it.

        Returns:
            bool: False when the record carries no application label.
        """

        self._store_require_subordinate_kind(record.kind)
        if not record.app_name:
            return False
        with self._lock:
            self._subordinates[record.kind][record.name] = record
            self._store_mark_subordinate_change(record.kind, record.name)
        return True

    def store_detach_subordinate(self, record: SubordinateRecord) -> bool:
        """Remove a subordinate association.

        Returns:
            bool: True when an association was removed.
        """

        self._store_require_subordinate_kind(record.kind)
        with self._lock:
            self._store_mark_subordinate_change(record.kind, record.name)
            return self._subordinates[record.kind].pop(record.name, None) is not None

    def store_change_marker(self) -> int:
        """Return the current subordinate change position for `store_attach_if_unchanged`."""

        with self._lock:
            return self._change_sequence

    def store_attach_if_unchanged(self, record: SubordinateRecord, since_marker: int) -> bool:
        """Attach a listed subordinate unless a watch event changed that name after `since_marker`.

        A DELETED or ADDED seen after the listing started is newer than the
        listed record, so the listed record is dropped.

        Args:
            record: Subordinate taken from a listing.
            since_marker: Value of `store_change_marker()` taken before the listing.

        Returns:
            bool: True when the record was attached.
        """

        self._store_require_subordinate_kind(record.kind)
        if not record.app_name:
            return False
        with self._lock:
            if self._subordinate_changes.get((record.kind, record.name), -1) > since_marker:
                return False
            self._subordinates[record.kind][record.name] = record
            return True

    def store_list_subordinates(self, kind: ResourceKind, app_name: str) -> list[SubordinateRecord]:
        """Return subordinates of one kind associated with an application, ordered by name."""

        self._store_require_subordinate_kind(kind)
        with self._lock:
            return sorted(
                (record for record in self._subordinates[kind].values() if record.app_name == app_name),
                key=lambda record: record.name,
            )

    def store_has_subordinate(self, kind: ResourceKind, app_name: str, name: str) -> bool:
        self._store_require_subordinate_kind(kind)
        with self._lock:
            record = self._subordinates[kind].get(name)
            return record is not None and record.app_name == app_name

    def store_replace_applications(self, records: list[ApplicationRecord]) -> None:
        """Replace the whole application set with a fresh listing.

        Cached URLs of applications absent from the listing are dropped.
        """

        with self._lock:
            self._applications = {record.name: record for record in records}
            self._application_urls = {
                name: url for name, url in self._application_urls.items() if name in self._applications
            }

    def store_replace_subordinates(self, kind: ResourceKind, records: list[SubordinateRecord]) -> int:
        """Replace all associations of one kind with a fresh listing.

        Unlabeled records are skipped.

        Returns:
            int: Number of records associated.
        """

        self._store_require_subordinate_kind(kind)
        labeled_records = {record.name: record for record in records if record.kind is kind and record.app_name}
        with self._lock:
            self._subordinates[kind] = labeled_records
        return len(labeled_records)

    def _store_mark_subordinate_change(self, kind: ResourceKind, name: str) -> None:
        self._change_sequence += 1
        self._subordinate_changes[(kind, name)] = self._change_sequence

    @staticmethod
    def _store_require_subordinate_kind(kind: ResourceKind) -> None:
        if kind not in SUBORDINATE_KINDS:
            raise ValueError(f"{kind.value} is not a subordinate kind")
