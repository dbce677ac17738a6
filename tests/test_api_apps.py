"""Tests for application lifecycle HTTP endpoints."""

from fastapi.testclient import TestClient

from jhipster_operator.adapters import ClusterAdapterError, ClusterConflictError
from jhipster_operator.api import create_api_application
from jhipster_operator.config import OperatorSettings
from jhipster_operator.domain import DescriptorTranslationError
from jhipster_operator.jobs import ApplicationNotFoundError, ControllerNotInitializedError
from tests.controller_stub import ControllerStub


def _build_client(controller: ControllerStub) -> TestClient:
    return TestClient(create_api_application(settings=OperatorSettings(_env_file=None), controller=controller))


def test_list_and_detail_return_tracked_applications() -> None:
    """Ensure list returns names and detail includes associated subordinates.

    Returns:
        None: Assertions validate response payloads.

    Raises:
        AssertionError: Raised when payloads are wrong.
    """

    client = _build_client(ControllerStub())

    assert client.get("/apps/").json() == ["store"]

    detail = client.get("/apps/store")
    assert detail.status_code == 200
    payload = detail.json()
    assert payload["status"] == "HEALTHY"
    assert payload["url"] == "http://10.0.0.1/apps/store/1.0/"
    assert payload["modules"][1] == {"name": "web", "kind": "gateway", "port": "8080"}
    assert payload["subordinates"] == {
        "MicroService": ["catalog"],
        "Gateway": [],
        "Registry": ["jhipster-registry"],
    }


def test_detail_unknown_application_returns_404() -> None:
    """Ensure unknown names are reported as not found."""

    response = _build_client(ControllerStub()).get("/apps/unknown")

    assert response.status_code == 404
    assert response.json()["status"] == "error"


def test_create_application_returns_201_and_forwards_descriptor() -> None:
    """Ensure create forwards the structured descriptor with module defaults."""

    controller = ControllerStub()
    response = _build_client(controller).post(
        "/apps/",
        json={"name": "shop", "version": "2.0", "modules": [{"name": "orders"}, {"name": "edge", "type": "gateway"}]},
    )

    assert response.status_code == 201
    assert response.json()["name"] == "shop"
    forwarded = controller.created_payloads[0]
    assert forwarded["modules"] == [
        {"name": "orders", "type": "microservice", "port": None},
        {"name": "edge", "type": "gateway", "port": None},
    ]
    assert forwarded["content"] is None


def test_create_application_accepts_numeric_module_port() -> None:
    """Ensure a JSON number port is accepted and forwarded as text."""

    controller = ControllerStub()
    response = _build_client(controller).post(
        "/apps/",
        json={"name": "shop", "version": "2.0", "modules": [{"name": "orders", "port": 8081}]},
    )

    assert response.status_code == 201
    assert controller.created_payloads[0]["modules"] == [{"name": "orders", "type": "microservice", "port": "8081"}]


def test_create_application_maps_errors_to_status_codes() -> None:
    """Ensure translation, readiness, conflict and cluster errors map to distinct statuses.

    Returns:
        None: Assertions validate mapped status codes.

    Raises:
        AssertionError: Raised when an error maps to the wrong status.
    """

    controller = ControllerStub()
    client = _build_client(controller)
    request_body = {"name": "store", "version": "1.0", "modules": []}
    expected_statuses = [
        (DescriptorTranslationError("duplicate module name=catalog"), 400),
        (ControllerNotInitializedError("operator is switched off"), 503),
        (ClusterConflictError("Application store already exists", status_code=409), 409),
        (ClusterAdapterError("forbidden", status_code=403), 502),
    ]

    for error, expected_status in expected_statuses:
        controller.create_error = error
        response = client.post("/apps/", json=request_body)
        assert response.status_code == expected_status
        assert response.json() == {"status": "error", "message": str(error)}


def test_create_application_rejects_missing_fields() -> None:
    """Ensure request validation rejects descriptors without a version."""

    controller = ControllerStub()

    response = _build_client(controller).post("/apps/", json={"name": "store"})

    assert response.status_code == 422
    assert controller.created_payloads == []


def test_delete_application_success_and_not_found() -> None:
    """Ensure delete returns 200 for tracked names and 404 for unknown ones."""

    controller = ControllerStub()
    client = _build_client(controller)

    deleted = client.delete("/apps/store")
    assert deleted.status_code == 200
    assert deleted.json() == {"status": "deleted", "name": "store"}

    controller.delete_error = ApplicationNotFoundError("application unknown is not tracked")
    missing = client.delete("/apps/unknown")
    assert missing.status_code == 404
    assert controller.deleted_names == ["store", "unknown"]


def test_reconcile_endpoint_reports_statuses_and_readiness() -> None:
    """Ensure manual reconcile returns per-application status and 503 when not ready."""

    controller = ControllerStub()
    client = _build_client(controller)

    response = client.post("/apps/reconcile")
    assert response.status_code == 200
    assert response.json() == {"statuses": {"store": "HEALTHY"}, "failed": ["broken"]}

    controller.reconcile_error = ControllerNotInitializedError("operator is not initialized, run bootstrap first")
    assert client.post("/apps/reconcile").status_code == 503
