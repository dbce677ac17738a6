"""Typed domain models shared across operator layers.

Records are immutable; the state store replaces them instead of mutating in
place so snapshots handed to the reconciler never change underneath it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Final

URL_NOT_AVAILABLE: Final[str] = "N/A"
APP_LABEL_KEY: Final[str] = "app"
DEFINITION_ANNOTATION_KEY: Final[str] = "jdl"
CASCADING_FINALIZER: Final[str] = "foregroundDeletion"
DEFAULT_REGISTRY_NAME: Final[str] = "jhipster-registry"
DEFAULT_REGISTRY_PORT: Final[str] = "8761"
DEFAULT_GATEWAY_NAME: Final[str] = "gateway"
DEFAULT_GATEWAY_PORT: Final[str] = "8080"
DEFAULT_MICROSERVICE_PORT: Final[str] = "8081"
DEFAULT_SERVICE_VERSION: Final[str] = "1.0"


class ResourceKind(str, Enum):
    """Custom resource kinds managed by the operator."""

    APPLICATION = "Application"
    MICROSERVICE = "MicroService"
    GATEWAY = "Gateway"
    REGISTRY = "Registry"

    @property
    def plural(self) -> str:
        return _KIND_PLURALS[self]


_KIND_PLURALS: Final[dict[ResourceKind, str]] = {
    ResourceKind.APPLICATION: "applications",
    ResourceKind.MICROSERVICE: "microservices",
    ResourceKind.GATEWAY: "gateways",
    ResourceKind.REGISTRY: "registries",
}

SUBORDINATE_KINDS: Final[tuple[ResourceKind, ...]] = (
    ResourceKind.MICROSERVICE,
    ResourceKind.GATEWAY,
    ResourceKind.REGISTRY,
)


class ApplicationStatus(str, Enum):
    """Reconciled application health state."""

    UNKNOWN = "UNKNOWN"
    HEALTHY = "HEALTHY"
    UNHEALTHY = "UNHEALTHY"


class WatchAction(str, Enum):
    """Change actions delivered by a watch stream."""

    ADDED = "ADDED"
    MODIFIED = "MODIFIED"
    DELETED = "DELETED"


class ModuleKind(str, Enum):
    """Module kinds declared in an application descriptor."""

    GATEWAY = "gateway"
    MICROSERVICE = "microservice"


@dataclass(frozen=True)
class ModuleDescriptor:
    """One module declared by an application.

    Attributes:
        name: Module name, also the name of its subordinate resource.
        kind: Gateway or microservice.
        port: Declared service port, possibly blank.
    """

    name: str
    kind: ModuleKind
    port: str = ""


@dataclass(frozen=True)
class ApplicationRecord:
    """Desired-state record for one Application resource.

    Attributes:
        name: Unique application name.
        version: Application version used in the public URL.
        modules: Declared modules.
        selector: Optional label selector carried in the spec.
        registry: Registry name.
        gateway: Gateway name.
        status: Last reconciled health state.
        url: Public URL when healthy, otherwise `N/A`.
        resource_version: Opaque platform version token.
        uid: Platform-assigned identity.
        definition: Opaque raw descriptor carried as metadata.
        finalizers: Finalizers kept when the record is written back.
        spec_present: False when the resource was observed without a spec body.
    """

    name: str
    version: str = ""
    modules: tuple[ModuleDescriptor, ...] = ()
    selector: str | None = None
    registry: str = DEFAULT_REGISTRY_NAME
    gateway: str = DEFAULT_GATEWAY_NAME
    status: ApplicationStatus = ApplicationStatus.UNKNOWN
    url: str = URL_NOT_AVAILABLE
    resource_version: str | None = None
    uid: str | None = None
    definition: str | None = None
    finalizers: tuple[str, ...] = ()
    spec_present: bool = True

    def application_microservice_names(self) -> tuple[str, ...]:
        """Return names of declared microservice modules in declaration order."""

        return tuple(module.name for module in self.modules if module.kind is ModuleKind.MICROSERVICE)


@dataclass(frozen=True)
class SubordinateRecord:
    """MicroService, Gateway or Registry instance linked to an application by label.

    Attributes:
        kind: Subordinate resource kind.
        name: Resource name.
        app_name: Value of the `app` label, None when unlabeled.
        port: Declared service port.
        version: Declared service version.
        resource_version: Opaque platform version token.
        spec_present: False when the resource was observed without a spec body.
    """

    kind: ResourceKind
    name: str
    app_name: str | None = None
    port: str = ""
    version: str = DEFAULT_SERVICE_VERSION
    resource_version: str | None = None
    spec_present: bool = True


@dataclass(frozen=True)
class TypeDescriptor:
    """Discovery state of one required custom resource definition.

    Attributes:
        kind: Resource kind.
        crd_name: Expected definition name, `<plural>.<group>`.
        found: Whether the definition exists in the cluster.
    """

    kind: ResourceKind
    crd_name: str
    found: bool = False


@dataclass(frozen=True)
class OwnerReference:
    """Owner link written on every subordinate resource."""

    api_version: str
    kind: str
    name: str
    uid: str
    controller: bool = True
    block_owner_deletion: bool = True


@dataclass(frozen=True)
class ResourceList:
    """Result of one list call.

    Attributes:
        items: Decoded records.
        resource_version: Collection-level resource version reported by the list call.
    """

    items: tuple = ()
    resource_version: str | None = None


@dataclass(frozen=True)
class WatchEvent:
    """One decoded change event."""

    action: WatchAction
    record: ApplicationRecord | SubordinateRecord
    resource_version: str | None = None


@dataclass(frozen=True)
class HealthStatus:
    """Health response contract used by health-check surfaces.

    Attributes:
        status: Overall status text for operator health.
        detail: Additional message suitable for operational diagnostics.
        watches: Registration state per watched kind.
        cursors: Watch resume resource version per kind.
        urls: Public URL per application last reconciled as healthy.
    """

    status: str
    detail: str
    watches: dict[str, bool] = field(default_factory=dict)
    cursors: dict[str, str | None] = field(default_factory=dict)
    urls: dict[str, str] = field(default_factory=dict)
