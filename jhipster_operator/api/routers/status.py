"""Health and operator switch endpoints."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse, PlainTextResponse

from jhipster_operator.jobs import OperatorControllerPort


def api_create_status_router(controller: OperatorControllerPort) -> APIRouter:
    """Create router exposing `/health` and the `/status` on/off switch.

    Args:
        controller: Controller entry points.

    Returns:
        APIRouter: Router with health and switch endpoints.

    Raises:
        ValueError: Raised when controller is invalid.
    """

    if controller is None:
        raise ValueError("controller must not be None")

    router = APIRouter(tags=["status"])

    @router.get("/health")
    def api_health_status() -> JSONResponse:
        """Return operator health; 503 unless initialized and enabled.

        Returns:
            JSONResponse: Health payload with per-kind watch registration and cursors plus healthy URLs.
        """

        health = controller.controller_health()
        payload = {
            "status": health.status,
            "detail": health.detail,
            "enabled": controller.controller_is_enabled(),
            "initialized": controller.controller_is_initialized(),
            "watches": health.watches,
            "cursors": health.cursors,
            "urls": health.urls,
        }
        status_code = status.HTTP_200_OK if health.status == "ok" else status.HTTP_503_SERVICE_UNAVAILABLE
        return JSONResponse(content=payload, status_code=status_code)

    @router.get("/status")
    def api_operator_status() -> PlainTextResponse:
        """Return whether the operator switch is on, as `true` or `false`."""

        return PlainTextResponse(content=str(controller.controller_is_enabled()).lower())

    @router.delete("/status")
    def api_operator_toggle() -> JSONResponse:
        """Flip the operator switch; turning it on re-runs bootstrap.

        Returns:
            JSONResponse: New switch and initialization state.
        """

        enabled = controller.controller_set_enabled(not controller.controller_is_enabled())
        payload = {"enabled": enabled, "initialized": controller.controller_is_initialized()}
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    return router
