"""Tests for the in-memory application state store and watch cursors."""

import pytest

from jhipster_operator.domain import (
    ApplicationRecord,
    ApplicationStatus,
    ResourceKind,
    SubordinateRecord,
)
from jhipster_operator.store import ApplicationStateStore, WatchCursorRegistry


def _microservice(name: str, app_name: str | None) -> SubordinateRecord:
    return SubordinateRecord(kind=ResourceKind.MICROSERVICE, name=name, app_name=app_name, port="8081")


def test_store_attach_requires_app_label() -> None:
    """Ensure unlabeled subordinates are not associated.

    Returns:
        None: Assertions validate attach results.

    Raises:
        AssertionError: Raised when an unlabeled record is stored.
    """

    store = ApplicationStateStore()

    assert store.store_attach_subordinate(_microservice("orphan", None)) is False
    assert store.store_attach_subordinate(_microservice("catalog", "store")) is True
    assert [record.name for record in store.store_list_subordinates(ResourceKind.MICROSERVICE, "store")] == ["catalog"]


def test_store_has_subordinate_matches_application() -> None:
    """Ensure presence checks are scoped to the owning application."""

    store = ApplicationStateStore()
    store.store_attach_subordinate(_microservice("catalog", "store"))

    assert store.store_has_subordinate(ResourceKind.MICROSERVICE, "store", "catalog") is True
    assert store.store_has_subordinate(ResourceKind.MICROSERVICE, "shop", "catalog") is False
    assert store.store_has_subordinate(ResourceKind.GATEWAY, "store", "catalog") is False


def test_store_reattach_moves_association() -> None:
    """Ensure a relabeled subordinate is associated with one application only."""

    store = ApplicationStateStore()
    store.store_attach_subordinate(_microservice("catalog", "store"))
    store.store_attach_subordinate(_microservice("catalog", "shop"))

    assert store.store_list_subordinates(ResourceKind.MICROSERVICE, "store") == []
    assert store.store_has_subordinate(ResourceKind.MICROSERVICE, "shop", "catalog") is True


def test_store_update_status_tracks_urls_for_healthy_only() -> None:
    """Ensure the URL cache follows HEALTHY transitions.

    Returns:
        None: Assertions validate status and URL cache updates.

    Raises:
        AssertionError: Raised when the URL cache is inconsistent.
    """

    store = ApplicationStateStore()
    store.store_put_application(ApplicationRecord(name="store", version="1.0"))

    healthy = store.store_update_application_status("store", ApplicationStatus.HEALTHY, "http://ip/apps/store/1.0/")
    assert healthy is not None
    assert healthy.status is ApplicationStatus.HEALTHY
    assert store.store_application_urls() == {"store": "http://ip/apps/store/1.0/"}

    store.store_update_application_status("store", ApplicationStatus.UNHEALTHY, "N/A")
    assert store.store_application_urls() == {}
    assert store.store_get_application("store").url == "N/A"


def test_store_update_status_skips_removed_application() -> None:
    """Ensure status updates do not resurrect removed applications."""

    store = ApplicationStateStore()
    store.store_put_application(ApplicationRecord(name="store", version="1.0"))
    assert store.store_remove_application("store") is True

    assert store.store_update_application_status("store", ApplicationStatus.HEALTHY, "http://x/") is None
    assert store.store_get_application("store") is None
    assert store.store_remove_application("store") is False


def test_store_remove_application_keeps_subordinates() -> None:
    """Ensure subordinate associations outlive their application until removed themselves."""

    store = ApplicationStateStore()
    store.store_put_application(ApplicationRecord(name="store", version="1.0"))
    store.store_attach_subordinate(_microservice("catalog", "store"))

    store.store_remove_application("store")

    assert store.store_has_subordinate(ResourceKind.MICROSERVICE, "store", "catalog") is True
    assert store.store_detach_subordinate(_microservice("catalog", "store")) is True
    assert store.store_detach_subordinate(_microservice("catalog", "store")) is False


def test_store_replace_listings() -> None:
    """Ensure bulk replacement drops stale entries and skips unlabeled records.

    Returns:
        None: Assertions validate replaced state.

    Raises:
        AssertionError: Raised when stale entries survive.
    """

    store = ApplicationStateStore()
    store.store_put_application(ApplicationRecord(name="old", version="1.0"))
    store.store_update_application_status("old", ApplicationStatus.HEALTHY, "http://x/apps/old/1.0/")
    store.store_attach_subordinate(_microservice("stale", "old"))

    store.store_replace_applications([ApplicationRecord(name="store", version="1.0")])
    associated = store.store_replace_subordinates(
        ResourceKind.MICROSERVICE,
        [_microservice("catalog", "store"), _microservice("orphan", None)],
    )

    assert store.store_list_application_names() == ["store"]
    assert store.store_application_urls() == {}
    assert associated == 1
    assert store.store_has_subordinate(ResourceKind.MICROSERVICE, "old", "stale") is False

def test_store_attach_if_unchanged_skips_names_changed_after_marker() -> None:
    """Ensure a listed subordinate loses to a watch event on the same name after the marker.

    Returns:
        None: Assertions validate guarded attachment.

    Raises:
        AssertionError: Raised when a stale listed record is attached.
    """

    store = ApplicationStateStore()
    marker = store.store_change_marker()
    store.store_detach_subordinate(_microservice("catalog", "store"))

    assert store.store_attach_if_unchanged(_microservice("catalog", "store"), since_marker=marker) is False
    assert store.store_attach_if_unchanged(_microservice("billing", "store"), since_marker=marker) is True
    assert [record.name for record in store.store_list_subordinates(ResourceKind.MICROSERVICE, "store")] == ["billing"]

    later_marker = store.store_change_marker()

    assert store.store_attach_if_unchanged(_microservice("catalog", "store"), since_marker=later_marker) is True



def test_store_rejects_application_as_subordinate_kind() -> None:
    """Ensure subordinate operations refuse the Application kind."""

    store = ApplicationStateStore()

    with pytest.raises(ValueError):
        store.store_list_subordinates(ResourceKind.APPLICATION, "store")


def test_watch_cursor_registry_ignores_empty_versions() -> None:
    """Ensure cursors only move forward on real versions and reset cleanly."""

    cursors = WatchCursorRegistry()
    cursors.cursor_advance(ResourceKind.APPLICATION, "10")
    cursors.cursor_advance(ResourceKind.APPLICATION, None)
    cursors.cursor_advance(ResourceKind.APPLICATION, "")

    assert cursors.cursor_get(ResourceKind.APPLICATION) == "10"

    cursors.cursor_reset(ResourceKind.APPLICATION)

    assert cursors.cursor_get(ResourceKind.APPLICATION) is None
    assert cursors.cursor_snapshot() == {}
