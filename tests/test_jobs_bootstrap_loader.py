"""Tests for the initial listing loader."""

from jhipster_operator.adapters import ClusterAdapterError
from jhipster_operator.domain import ApplicationRecord, ResourceKind, ResourceList
from jhipster_operator.jobs import BootstrapLoader, job_listing_cursor
from jhipster_operator.store import ApplicationStateStore, WatchCursorRegistry
from tests.fakes import FakeClusterAdapter, build_application_resource, build_subordinate_resource, register_all_kinds


def _build_loader() -> tuple[FakeClusterAdapter, ApplicationStateStore, WatchCursorRegistry, BootstrapLoader]:
    adapter = FakeClusterAdapter()
    register_all_kinds(adapter)
    store = ApplicationStateStore()
    cursors = WatchCursorRegistry()
    loader = BootstrapLoader(cluster_adapter=adapter, state_store=store, cursor_registry=cursors)
    return adapter, store, cursors, loader


def test_load_existing_seeds_store_and_cursors() -> None:
    """Ensure all four kinds are listed into the store with one cursor per kind.

    Returns:
        None: Assertions validate store and cursor state.

    Raises:
        AssertionError: Raised when loading is incomplete.
    """

    adapter, store, cursors, loader = _build_loader()
    adapter.seed(ResourceKind.APPLICATION, build_application_resource("store", modules=[("catalog", "microservice")]))
    adapter.seed(ResourceKind.MICROSERVICE, build_subordinate_resource(ResourceKind.MICROSERVICE, "catalog", "store"))
    adapter.seed(ResourceKind.GATEWAY, build_subordinate_resource(ResourceKind.GATEWAY, "web", "store", port="8080"))
    adapter.seed(ResourceKind.REGISTRY, build_subordinate_resource(ResourceKind.REGISTRY, "orphan", None))
    adapter.collection_versions[ResourceKind.APPLICATION] = "500"
    adapter.collection_versions[ResourceKind.MICROSERVICE] = "501"

    assert loader.job_load_existing() is True

    assert store.store_list_application_names() == ["store"]
    assert store.store_has_subordinate(ResourceKind.MICROSERVICE, "store", "catalog") is True
    assert store.store_has_subordinate(ResourceKind.GATEWAY, "store", "web") is True
    assert store.store_list_subordinates(ResourceKind.REGISTRY, "store") == []
    assert cursors.cursor_get(ResourceKind.APPLICATION) == "500"
    assert cursors.cursor_get(ResourceKind.MICROSERVICE) == "501"
    assert cursors.cursor_get(ResourceKind.GATEWAY) == "1"
    assert cursors.cursor_get(ResourceKind.REGISTRY) == "1"


def test_load_existing_skips_resources_without_spec() -> None:
    """Ensure spec-less resources are warned about and not tracked."""

    adapter, store, _, loader = _build_loader()
    adapter.seed(ResourceKind.APPLICATION, build_application_resource("ghost", with_spec=False))
    adapter.seed(
        ResourceKind.MICROSERVICE,
        build_subordinate_resource(ResourceKind.MICROSERVICE, "x", "ghost", with_spec=False),
    )

    assert loader.job_load_existing() is True
    assert store.store_list_application_names() == []
    assert store.store_list_subordinates(ResourceKind.MICROSERVICE, "ghost") == []


def test_load_existing_keeps_previous_state_when_a_list_fails() -> None:
    """Ensure a failing list call leaves the store untouched.

    Returns:
        None: Assertions validate unchanged state.

    Raises:
        AssertionError: Raised when partial listings are applied.
    """

    adapter, store, cursors, loader = _build_loader()
    store.store_put_application(ApplicationRecord(name="existing", version="1.0"))
    adapter.fail("list", ResourceKind.GATEWAY, ClusterAdapterError("forbidden", status_code=403))

    assert loader.job_load_existing() is False
    assert store.store_list_application_names() == ["existing"]
    assert cursors.cursor_snapshot() == {}


def test_reload_kind_replaces_one_kind() -> None:
    """Ensure a single-kind reload replaces that kind's associations and cursor."""

    adapter, store, cursors, loader = _build_loader()
    adapter.seed(ResourceKind.MICROSERVICE, build_subordinate_resource(ResourceKind.MICROSERVICE, "catalog", "store"))
    loader.job_load_existing()

    del adapter.resources[ResourceKind.MICROSERVICE]["catalog"]
    adapter.seed(
        ResourceKind.MICROSERVICE,
        build_subordinate_resource(ResourceKind.MICROSERVICE, "billing", "store", resource_version="77"),
    )
    loader.job_reload_kind(ResourceKind.MICROSERVICE)

    assert [record.name for record in store.store_list_subordinates(ResourceKind.MICROSERVICE, "store")] == ["billing"]
    assert cursors.cursor_get(ResourceKind.MICROSERVICE) == "77"


def test_listing_cursor_prefers_collection_version() -> None:
    """Ensure the collection version wins over item versions and empty listings have no cursor."""

    adapter, _, _, _ = _build_loader()
    adapter.seed(ResourceKind.APPLICATION, build_application_resource("store", resource_version="3"))
    items = adapter.adapter_list(ResourceKind.APPLICATION).items

    assert job_listing_cursor(ResourceList(items=items, resource_version="9")) == "9"
    assert job_listing_cursor(ResourceList(items=items, resource_version=None)) == "3"
    assert job_listing_cursor(ResourceList()) is None
