"""Typed interfaces for controller-layer responsibilities."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol

from jhipster_operator.domain import (
    ApplicationDefinition,
    ApplicationRecord,
    ApplicationStatus,
    HealthStatus,
    ResourceKind,
    SubordinateRecord,
)


class ControllerNotInitializedError(RuntimeError):
    """Raised when an entry point is called before bootstrap completed or while the operator is off."""


class ApplicationNotFoundError(LookupError):
    """Raised when a lifecycle operation names an application that is not tracked."""


@dataclass(frozen=True)
class ControllerConfig:
    """Custom resource coordinates shared by the controller components.

    Attributes:
        crd_group: API group of the custom resource definitions.
        crd_version: Served API version.
        watch_timeout_seconds: Server-side timeout for one watch stream.
    """

    crd_group: str = "alpha.k8s.jhipster.tech"
    crd_version: str = "v1"
    watch_timeout_seconds: int | None = 300

    def config_api_version(self) -> str:
        """Return `<group>/<version>` for all four kinds."""

        return f"{self.crd_group}/{self.crd_version}"

    def config_crd_name(self, kind: ResourceKind) -> str:
        """Return the expected definition name `<plural>.<group>` for a kind."""

        return f"{kind.plural}.{self.crd_group}"


@dataclass(frozen=True)
class ReconcileResult:
    """Outcome of one reconcile pass.

    Attributes:
        statuses: Reconciled status per application name.
        failed: Application names whose status could not be persisted.
    """

    statuses: dict[str, ApplicationStatus] = field(default_factory=dict)
    failed: tuple[str, ...] = ()


class OperatorControllerPort(Protocol):
    """Port definition for the inbound controller entry points."""

    def controller_bootstrap(self) -> bool:
        """Discover types, load existing resources and start watches.

        Returns:
            bool: True when the controller is initialized.
        """

    def controller_reconcile(self) -> ReconcileResult:
        """Run one reconcile pass over all tracked applications.

        Raises:
            ControllerNotInitializedError: Raised when bootstrap has not completed.
        """

    def controller_create_application(self, definition: ApplicationDefinition) -> ApplicationRecord:
        """Create an application with its registry and modules.

        Raises:
            ControllerNotInitializedError: Raised when bootstrap has not completed.
            ClusterAdapterError: Raised when a cluster write fails.
        """

    def controller_create_application_from_payload(self, payload: Mapping[str, Any]) -> ApplicationRecord:
        """Translate a descriptor payload and create the application.

        Raises:
            DescriptorTranslationError: Raised when the payload is malformed.
        """

    def controller_delete_application(self, name: str) -> None:
        """Delete a tracked application.

        Raises:
            ApplicationNotFoundError: Raised when no application with that name is tracked.
        """

    def controller_list_application_names(self) -> list[str]:
        """Return tracked application names."""

    def controller_get_application(self, name: str) -> ApplicationRecord | None:
        """Return one tracked application record."""

    def controller_application_subordinates(self, name: str) -> dict[ResourceKind, list[SubordinateRecord]]:
        """Return subordinates associated with an application per kind."""

    def controller_is_enabled(self) -> bool:
        """Return whether the operator switch is on."""

    def controller_set_enabled(self, enabled: bool) -> bool:
        """Turn the operator on (re-running bootstrap) or off (stopping watches)."""

    def controller_is_initialized(self) -> bool:
        """Return whether bootstrap completed."""

    def controller_health(self) -> HealthStatus:
        """Return operator health summary."""
