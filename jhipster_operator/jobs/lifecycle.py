"""Create and delete applications as sequences of typed resource writes."""

from __future__ import annotations

import logging

from jhipster_operator.adapters import (
    ClusterAdapterError,
    ClusterAdapterPort,
    ClusterResourceNotFoundError,
)
from jhipster_operator.domain import (
    CASCADING_FINALIZER,
    DEFAULT_GATEWAY_PORT,
    DEFAULT_MICROSERVICE_PORT,
    DEFAULT_REGISTRY_NAME,
    DEFAULT_REGISTRY_PORT,
    ApplicationDefinition,
    ApplicationRecord,
    ModuleKindClassifier,
    OwnerReference,
    ResourceKind,
    domain_classify_module_kind,
    domain_encode_application,
    domain_encode_subordinate,
)
from jhipster_operator.store import ApplicationStateStore

from .interfaces import ApplicationNotFoundError, ControllerConfig

logger = logging.getLogger(__name__)

_DEFAULT_MODULE_PORTS = {
    ResourceKind.GATEWAY: DEFAULT_GATEWAY_PORT,
    ResourceKind.MICROSERVICE: DEFAULT_MICROSERVICE_PORT,
}


class ApplicationLifecycleService:
    """Writes applications, registries, gateways and microservices to the cluster.

    No write sequence is transactional: a failure part way leaves the already
    created resources in place and the cluster error propagates.
    """

    def __init__(
        self,
        cluster_adapter: ClusterAdapterPort,
        state_store: ApplicationStateStore,
        config: ControllerConfig,
        module_kind_classifier: ModuleKindClassifier = domain_classify_module_kind,
    ):
        if cluster_adapter is None:
            raise ValueError("cluster_adapter must not be None")
        if state_store is None:
            raise ValueError("state_store must not be None")

        self._cluster_adapter = cluster_adapter
        self._state_store = state_store
        self._config = config
        self._module_kind_classifier = module_kind_classifier

    def job_create_application(self, definition: ApplicationDefinition) -> ApplicationRecord:
        """Create the Application, its Registry and one resource per module.

        Args:
            definition: Translated application definition.

        Returns:
            ApplicationRecord: Application as stored by the cluster.

        Raises:
            ClusterAdapterError: Raised when any cluster write fails or the stored
                Application carries no uid.
            ValueError: Raised when the classifier returns a non-module kind.
        """

        api_version = self._config.config_api_version()
        namespace = self._cluster_adapter.adapter_namespace()

        stored_application = self._cluster_adapter.adapter_create(
            kind=ResourceKind.APPLICATION,
            body=domain_encode_application(
                ApplicationRecord(
                    name=definition.name,
                    version=definition.version,
                    modules=definition.modules,
                    definition=definition.content,
                    finalizers=(CASCADING_FINALIZER,),
                ),
                api_version=api_version,
                namespace=namespace,
            ),
        )
        if not stored_application.uid:
            raise ClusterAdapterError(f"Application {stored_application.name} was stored without a uid")

        owner_reference = OwnerReference(
            api_version=api_version,
            kind=ResourceKind.APPLICATION.value,
            name=stored_application.name,
            uid=stored_application.uid,
        )

        self._cluster_adapter.adapter_create(
            kind=ResourceKind.REGISTRY,
            body=domain_encode_subordinate(
                kind=ResourceKind.REGISTRY,
                name=DEFAULT_REGISTRY_NAME,
                port=DEFAULT_REGISTRY_PORT,
                api_version=api_version,
                namespace=namespace,
                app_name=definition.name,
                owner_reference=owner_reference,
            ),
        )

        for module in definition.modules:
            module_kind = self._module_kind_classifier(module)
            if module_kind not in _DEFAULT_MODULE_PORTS:
                raise ValueError(f"module {module.name} classified as unsupported kind {module_kind}")
            self._cluster_adapter.adapter_create(
                kind=module_kind,
                body=domain_encode_subordinate(
                    kind=module_kind,
                    name=module.name,
                    port=module.port or _DEFAULT_MODULE_PORTS[module_kind],
                    api_version=api_version,
                    namespace=namespace,
                    app_name=definition.name,
                    owner_reference=owner_reference,
                ),
            )
            logger.info("> %s %s created for App %s", module_kind.value, module.name, definition.name)

        return stored_application

    def job_delete_application(self, name: str) -> None:
        """Delete a tracked Application resource.

        Subordinates are removed by the platform's cascading deletion through
        their owner references.

        Args:
            name: Application name.

        Returns:
            None: Deletion is a side effect.

        Raises:
            ApplicationNotFoundError: Raised when the name is not tracked or the
                cluster no longer has the resource.
            ClusterAdapterError: Raised for other cluster failures.
        """

        record = self._state_store.store_get_application(name)
        if record is None:
            raise ApplicationNotFoundError(f"application {name} is not tracked")

        try:
            self._cluster_adapter.adapter_delete(kind=ResourceKind.APPLICATION, name=record.name)
        except ClusterResourceNotFoundError as error:
            self._state_store.store_remove_application(record.name)
            raise ApplicationNotFoundError(f"application {name} no longer exists in the cluster") from error

        self._state_store.store_remove_application(record.name)
