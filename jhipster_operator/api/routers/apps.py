"""Application lifecycle and reconcile trigger endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, field_validator

from jhipster_operator.adapters import ClusterAdapterError, ClusterConflictError
from jhipster_operator.domain import ApplicationRecord, DescriptorTranslationError
from jhipster_operator.jobs import (
    ApplicationNotFoundError,
    ControllerNotInitializedError,
    OperatorControllerPort,
)


class ModuleRequest(BaseModel):
    """One module of a create request."""

    name: str
    type: str = "microservice"
    port: str | int | None = None

    @field_validator("port")
    @classmethod
    def _normalize_port(cls, value: str | int | None) -> str | None:
        if value is None:
            return None
        return str(value).strip()


class NewApplicationRequest(BaseModel):
    """Structured application descriptor accepted by `POST /apps/`."""

    name: str
    version: str
    modules: list[ModuleRequest] = Field(default_factory=list)
    content: str | None = None


def api_serialize_application(record: ApplicationRecord) -> dict[str, Any]:
    """Serialize an application record for JSON responses."""

    return {
        "name": record.name,
        "version": record.version,
        "status": record.status.value,
        "url": record.url,
        "registry": record.registry,
        "gateway": record.gateway,
        "modules": [
            {"name": module.name, "kind": module.kind.value, "port": module.port} for module in record.modules
        ],
    }


def api_create_apps_router(controller: OperatorControllerPort) -> APIRouter:
    """Create router exposing application list/detail/create/delete and reconcile.

    Args:
        controller: Controller entry points.

    Returns:
        APIRouter: Router mounted under `/apps`.

    Raises:
        ValueError: Raised when controller is invalid.
    """

    if controller is None:
        raise ValueError("controller must not be None")

    router = APIRouter(prefix="/apps", tags=["apps"])

    @router.get("/")
    def api_apps_list() -> list[str]:
        """Return tracked application names."""

        return controller.controller_list_application_names()

    @router.get("/{app_name}")
    def api_apps_detail(app_name: str) -> JSONResponse:
        """Return one tracked application with its associated subordinates.

        Returns:
            JSONResponse: Application payload, or 404 when not tracked.
        """

        record = controller.controller_get_application(app_name)
        if record is None:
            return _api_error_response(status.HTTP_404_NOT_FOUND, f"application {app_name} is not tracked")

        payload = api_serialize_application(record)
        payload["subordinates"] = {
            kind.value: [subordinate.name for subordinate in subordinates]
            for kind, subordinates in controller.controller_application_subordinates(app_name).items()
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    @router.post("/")
    def api_apps_create(request: NewApplicationRequest) -> JSONResponse:
        """Create an application from a structured descriptor.

        Returns:
            JSONResponse: 201 with the stored application, or a mapped error status.
        """

        try:
            record = controller.controller_create_application_from_payload(request.model_dump())
        except DescriptorTranslationError as error:
            return _api_error_response(status.HTTP_400_BAD_REQUEST, str(error))
        except ControllerNotInitializedError as error:
            return _api_error_response(status.HTTP_503_SERVICE_UNAVAILABLE, str(error))
        except ClusterConflictError as error:
            return _api_error_response(status.HTTP_409_CONFLICT, str(error))
        except ClusterAdapterError as error:
            return _api_error_response(status.HTTP_502_BAD_GATEWAY, str(error))
        return JSONResponse(content=api_serialize_application(record), status_code=status.HTTP_201_CREATED)

    @router.delete("/{app_name}")
    def api_apps_delete(app_name: str) -> JSONResponse:
        """Delete a tracked application.

        Returns:
            JSONResponse: 200 on success, 404 when not tracked.
        """

        try:
            controller.controller_delete_application(app_name)
        except ApplicationNotFoundError as error:
            return _api_error_response(status.HTTP_404_NOT_FOUND, str(error))
        except ControllerNotInitializedError as error:
            return _api_error_response(status.HTTP_503_SERVICE_UNAVAILABLE, str(error))
        except ClusterAdapterError as error:
            return _api_error_response(status.HTTP_502_BAD_GATEWAY, str(error))
        return JSONResponse(content={"status": "deleted", "name": app_name}, status_code=status.HTTP_200_OK)

    @router.post("/reconcile")
    def api_apps_reconcile() -> JSONResponse:
        """Run one reconcile pass and report per-application status."""

        try:
            result = controller.controller_reconcile()
        except ControllerNotInitializedError as error:
            return _api_error_response(status.HTTP_503_SERVICE_UNAVAILABLE, str(error))
        payload = {
            "statuses": {name: app_status.value for name, app_status in result.statuses.items()},
            "failed": list(result.failed),
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    return router


def _api_error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(content={"status": "error", "message": message}, status_code=status_code)
