"""Initial full listing of all four kinds to seed the state store."""

from __future__ import annotations

import logging

from jhipster_operator.adapters import ClusterAdapterError, ClusterAdapterPort
from jhipster_operator.domain import (
    ApplicationRecord,
    ResourceKind,
    ResourceList,
    SubordinateRecord,
)
from jhipster_operator.store import ApplicationStateStore, WatchCursorRegistry

logger = logging.getLogger(__name__)


class BootstrapLoader:
    """Seeds the state store and captures one watch cursor per kind."""

    def __init__(
        self,
        cluster_adapter: ClusterAdapterPort,
        state_store: ApplicationStateStore,
        cursor_registry: WatchCursorRegistry,
    ):
        if cluster_adapter is None:
            raise ValueError("cluster_adapter must not be None")
        if state_store is None:
            raise ValueError("state_store must not be None")
        if cursor_registry is None:
            raise ValueError("cursor_registry must not be None")

        self._cluster_adapter = cluster_adapter
        self._state_store = state_store
        self._cursor_registry = cursor_registry

    def job_load_existing(self) -> bool:
        """List every kind and replace the tracked state with the result.

        All four lists are fetched before the store is touched, so a failing
        list call leaves the previous state in place.

        Returns:
            bool: True once all four listings were applied, False when a list call failed.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        try:
            listings = {kind: self._cluster_adapter.adapter_list(kind) for kind in ResourceKind}
        except (ClusterAdapterError, ConnectionError, TimeoutError):
            logger.exception("> Loading existing resources failed")
            return False

        with self._state_store.store_transaction():
            for kind in ResourceKind:
                self._job_apply_listing(kind=kind, listing=listings[kind])
        return True

    def job_reload_kind(self, kind: ResourceKind) -> None:
        """Re-list one kind, replace its tracked state and reset its cursor.

        Used when a watch cursor expired and the stream cannot resume.

        Raises:
            ClusterAdapterError: Raised when the list call fails.
        """

        listing = self._cluster_adapter.adapter_list(kind)
        with self._state_store.store_transaction():
            self._job_apply_listing(kind=kind, listing=listing)

    def _job_apply_listing(self, kind: ResourceKind, listing: ResourceList) -> None:
        cursor = job_listing_cursor(listing)
        self._cursor_registry.cursor_reset(kind)
        self._cursor_registry.cursor_advance(kind, cursor)
        logger.info(">> %s Resource Version: %s", kind.value, cursor)

        records = [record for record in listing.items if self._job_has_spec(record)]
        if kind is ResourceKind.APPLICATION:
            applications: list[ApplicationRecord] = records
            self._state_store.store_replace_applications(applications)
            for application in applications:
                logger.info("> App %s found.", application.name)
            return

        subordinates: list[SubordinateRecord] = records
        for subordinate in subordinates:
            if not subordinate.app_name:
                logger.warning("%s %s has no app label and is not associated", kind.value, subordinate.name)
        self._state_store.store_replace_subordinates(kind, subordinates)

    @staticmethod
    def _job_has_spec(record: ApplicationRecord | SubordinateRecord) -> bool:
        if record.spec_present:
            return True
        kind_label = record.kind.value if isinstance(record, SubordinateRecord) else ResourceKind.APPLICATION.value
        logger.warning("No Spec for %s resource %s", kind_label, record.name)
        return False


def job_listing_cursor(listing: ResourceList) -> str | None:
    """Return the watch cursor for a listing.

    The collection-level version is authoritative; the first item's version is
    only used when the list call did not report one.
    """

    if listing.resource_version:
        return listing.resource_version
    if listing.items:
        return listing.items[0].resource_version
    return None
