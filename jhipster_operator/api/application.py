"""FastAPI application factory for the operator HTTP surface."""

from fastapi import FastAPI

from jhipster_operator.config import OperatorSettings
from jhipster_operator.jobs import OperatorControllerPort

from .routers import api_create_apps_router, api_create_status_router


def create_api_application(settings: OperatorSettings, controller: OperatorControllerPort) -> FastAPI:
    """Create the FastAPI application instance for the operator.

    Args:
        settings: Validated operator settings used for runtime metadata.
        controller: Controller entry points used by every route.

    Returns:
        FastAPI: Framework application instance.

    Raises:
        ValueError: Raised when controller is invalid.
    """
    application = FastAPI(title="JHipster K8s Operator")

    @application.get("/", tags=["foundation"])
    def foundation_index() -> dict[str, str]:
        """Return service identification for bootstrap verification."""

        return {
            "service": "jhipster-operator",
            "namespace": settings.namespace,
            "environment": settings.environment_name,
        }

    application.include_router(api_create_status_router(controller=controller))
    application.include_router(api_create_apps_router(controller=controller))

    return application
