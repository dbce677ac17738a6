"""Tests for application create and delete write sequences."""

from __future__ import annotations

from typing import Any

import pytest

from jhipster_operator.adapters import ClusterAdapterError, ClusterConflictError
from jhipster_operator.domain import (
    ApplicationDefinition,
    ApplicationRecord,
    ModuleDescriptor,
    ModuleKind,
    ResourceKind,
)
from jhipster_operator.jobs import ApplicationLifecycleService, ApplicationNotFoundError, ControllerConfig
from jhipster_operator.store import ApplicationStateStore
from tests.fakes import TEST_API_VERSION, FakeClusterAdapter, build_application_resource, register_all_kinds

_STORE_DEFINITION = ApplicationDefinition(
    name="store",
    version="1.0",
    modules=(
        ModuleDescriptor(name="catalog", kind=ModuleKind.MICROSERVICE),
        ModuleDescriptor(name="web", kind=ModuleKind.GATEWAY),
    ),
    content="application { config { baseName store } }",
)


class _UidlessClusterAdapter(FakeClusterAdapter):
    """Adapter double whose stored resources never receive a uid."""

    def _store(self, kind: ResourceKind, body: dict[str, Any]) -> dict[str, Any]:
        stored = super()._store(kind, body)
        stored["metadata"].pop("uid", None)
        return stored


def _build_service(
    adapter: FakeClusterAdapter | None = None,
) -> tuple[FakeClusterAdapter, ApplicationStateStore, ApplicationLifecycleService]:
    adapter = adapter or FakeClusterAdapter()
    register_all_kinds(adapter)
    store = ApplicationStateStore()
    service = ApplicationLifecycleService(cluster_adapter=adapter, state_store=store, config=ControllerConfig())
    return adapter, store, service


def test_create_application_writes_application_registry_and_modules() -> None:
    """Ensure creation writes the Application, Registry and one resource per module in order.

    Returns:
        None: Assertions validate every created body.

    Raises:
        AssertionError: Raised when the write sequence is wrong.
    """

    adapter, _, service = _build_service()

    stored = service.job_create_application(_STORE_DEFINITION)

    assert stored.name == "store"
    assert stored.uid == "uid-store"
    created = [(call[1], call[2]) for call in adapter.calls_for("create")]
    assert created == [
        (ResourceKind.APPLICATION, "store"),
        (ResourceKind.REGISTRY, "jhipster-registry"),
        (ResourceKind.MICROSERVICE, "catalog"),
        (ResourceKind.GATEWAY, "web"),
    ]

    bodies = {call[2]: call[3] for call in adapter.calls_for("create")}
    assert bodies["store"]["metadata"]["finalizers"] == ["foregroundDeletion"]
    assert bodies["store"]["metadata"]["annotations"] == {"jdl": "application { config { baseName store } }"}
    assert bodies["store"]["spec"]["url"] == "N/A"
    assert bodies["jhipster-registry"]["spec"]["servicePort"] == "8761"
    assert bodies["catalog"]["spec"]["servicePort"] == "8081"
    assert bodies["web"]["spec"]["servicePort"] == "8080"
    for subordinate_name in ("jhipster-registry", "catalog", "web"):
        metadata = bodies[subordinate_name]["metadata"]
        assert metadata["labels"] == {"app": "store"}
        assert metadata["ownerReferences"][0]["uid"] == "uid-store"
        assert metadata["ownerReferences"][0]["apiVersion"] == TEST_API_VERSION


def test_create_application_keeps_declared_ports() -> None:
    """Ensure a declared module port wins over the kind default."""

    adapter, _, service = _build_service()
    definition = ApplicationDefinition(
        name="shop",
        version="2.0",
        modules=(ModuleDescriptor(name="orders", kind=ModuleKind.MICROSERVICE, port="9090"),),
        content="{}",
    )

    service.job_create_application(definition)

    assert adapter.resources[ResourceKind.MICROSERVICE]["orders"]["spec"]["servicePort"] == "9090"


def test_create_application_stops_when_application_exists() -> None:
    """Ensure an existing Application aborts creation before any subordinate write."""

    adapter, _, service = _build_service()
    adapter.seed(ResourceKind.APPLICATION, build_application_resource("store"))

    with pytest.raises(ClusterConflictError):
        service.job_create_application(_STORE_DEFINITION)

    assert len(adapter.calls_for("create")) == 1
    assert adapter.resources[ResourceKind.REGISTRY] == {}


def test_create_application_requires_stored_uid() -> None:
    """Ensure subordinates are not written without an owner uid."""

    adapter, _, service = _build_service(adapter=_UidlessClusterAdapter())

    with pytest.raises(ClusterAdapterError):
        service.job_create_application(_STORE_DEFINITION)

    assert adapter.resources[ResourceKind.REGISTRY] == {}


def test_create_application_rejects_unsupported_module_kind() -> None:
    """Ensure a classifier returning a non-module kind is refused."""

    adapter = FakeClusterAdapter()
    register_all_kinds(adapter)
    service = ApplicationLifecycleService(
        cluster_adapter=adapter,
        state_store=ApplicationStateStore(),
        config=ControllerConfig(),
        module_kind_classifier=lambda module: ResourceKind.REGISTRY,
    )

    with pytest.raises(ValueError):
        service.job_create_application(_STORE_DEFINITION)


def test_delete_unknown_application_makes_no_cluster_call() -> None:
    """Ensure deleting an untracked name fails without touching the cluster.

    Returns:
        None: Assertions validate raised error and call log.

    Raises:
        AssertionError: Raised when the cluster is called.
    """

    adapter, _, service = _build_service()

    with pytest.raises(ApplicationNotFoundError):
        service.job_delete_application("unknown")

    assert adapter.calls_for("delete") == []


def test_delete_tracked_application_issues_single_delete() -> None:
    """Ensure a tracked application is deleted once and removed from the store."""

    adapter, store, service = _build_service()
    adapter.seed(ResourceKind.APPLICATION, build_application_resource("store"))
    store.store_put_application(ApplicationRecord(name="store", version="1.0"))

    service.job_delete_application("store")

    assert adapter.calls_for("delete") == [("delete", ResourceKind.APPLICATION, "store")]
    assert store.store_get_application("store") is None
    assert adapter.resources[ResourceKind.APPLICATION] == {}


def test_delete_application_gone_from_cluster_reports_not_found() -> None:
    """Ensure a tracked application missing in the cluster is dropped and reported."""

    _, store, service = _build_service()
    store.store_put_application(ApplicationRecord(name="store", version="1.0"))

    with pytest.raises(ApplicationNotFoundError):
        service.job_delete_application("store")

    assert store.store_get_application("store") is None
