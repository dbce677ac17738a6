"""Operator controller facade exposing the inbound entry points."""

from __future__ import annotations

import logging
import threading
from typing import Any, Mapping

from jhipster_operator.domain import (
    SUBORDINATE_KINDS,
    ApplicationDefinition,
    ApplicationRecord,
    DescriptorTranslator,
    HealthStatus,
    ResourceKind,
    SubordinateRecord,
    domain_translate_descriptor,
)
from jhipster_operator.store import ApplicationStateStore

from .bootstrap_loader import BootstrapLoader
from .interfaces import ControllerNotInitializedError, OperatorControllerPort, ReconcileResult
from .lifecycle import ApplicationLifecycleService
from .reconciler import ApplicationReconciler
from .type_registry import ResourceTypeRegistry
from .watch_manager import WatchManager

logger = logging.getLogger(__name__)


class AppsOperatorController(OperatorControllerPort):
    """Concrete controller wiring discovery, loading, watches, reconcile and lifecycle."""

    def __init__(
        self,
        type_registry: ResourceTypeRegistry,
        bootstrap_loader: BootstrapLoader,
        watch_manager: WatchManager,
        reconciler: ApplicationReconciler,
        lifecycle_service: ApplicationLifecycleService,
        state_store: ApplicationStateStore,
        descriptor_translator: DescriptorTranslator = domain_translate_descriptor,
    ):
        """Initialize controller dependencies.

        Args:
            type_registry: Custom resource definition discovery.
            bootstrap_loader: Initial listing loader.
            watch_manager: Owner of the four watch subscriptions.
            reconciler: Status/URL reconciler.
            lifecycle_service: Create/delete writer.
            state_store: Shared desired-state index.
            descriptor_translator: Raw descriptor to definition translator.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies are missing.
        """

        if type_registry is None:
            raise ValueError("type_registry must not be None")
        if bootstrap_loader is None:
            raise ValueError("bootstrap_loader must not be None")
        if watch_manager is None:
            raise ValueError("watch_manager must not be None")
        if reconciler is None:
            raise ValueError("reconciler must not be None")
        if lifecycle_service is None:
            raise ValueError("lifecycle_service must not be None")
        if state_store is None:
            raise ValueError("state_store must not be None")

        self._type_registry = type_registry
        self._bootstrap_loader = bootstrap_loader
        self._watch_manager = watch_manager
        self._reconciler = reconciler
        self._lifecycle_service = lifecycle_service
        self._state_store = state_store
        self._descriptor_translator = descriptor_translator
        self._bootstrap_lock = threading.Lock()
        self._enabled = True
        self._initialized = False

    def controller_bootstrap(self) -> bool:
        """Run discovery, the initial load and watch registration in order.

        Each step gates the next. Re-invoking after a failure is safe; running
        watches are stopped before the state is reloaded.

        Returns:
            bool: True when the controller is initialized.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        with self._bootstrap_lock:
            self._initialized = False
            if not self._type_registry.job_discover_types():
                return False

            logger.info("> JHipster K8s Operator is Starting!")
            self._watch_manager.job_stop_watches()
            if not self._bootstrap_loader.job_load_existing():
                logger.error("> Init sequence not done, existing resources could not be loaded")
                return False

            self._initialized = self._watch_manager.job_start_watches()
            return self._initialized

    def controller_reconcile(self) -> ReconcileResult:
        self._controller_require_ready()
        return self._reconciler.job_reconcile()

    def controller_create_application(self, definition: ApplicationDefinition) -> ApplicationRecord:
        self._controller_require_ready()
        logger.info("> Creating Application: %s", definition.name)
        return self._lifecycle_service.job_create_application(definition)

    def controller_create_application_from_payload(self, payload: Mapping[str, Any]) -> ApplicationRecord:
        """Translate a raw descriptor and create the application.

        Raises:
            DescriptorTranslationError: Raised when the payload is malformed.
            ControllerNotInitializedError: Raised when bootstrap has not completed.
        """

        definition = self._descriptor_translator(payload)
        return self.controller_create_application(definition)

    def controller_delete_application(self, name: str) -> None:
        self._controller_require_ready()
        logger.info("> Deleting Application: %s", name)
        self._lifecycle_service.job_delete_application(name)

    def controller_list_application_names(self) -> list[str]:
        return self._state_store.store_list_application_names()

    def controller_get_application(self, name: str) -> ApplicationRecord | None:
        return self._state_store.store_get_application(name)

    def controller_application_subordinates(self, name: str) -> dict[ResourceKind, list[SubordinateRecord]]:
        with self._state_store.store_transaction() as store:
            return {kind: store.store_list_subordinates(kind, name) for kind in SUBORDINATE_KINDS}

    def controller_is_enabled(self) -> bool:
        return self._enabled

    def controller_set_enabled(self, enabled: bool) -> bool:
        """Turn the operator on or off.

        Turning it on re-runs bootstrap; turning it off stops the watches and
        marks the controller uninitialized.

        Returns:
            bool: New enabled state.
        """

        self._enabled = enabled
        if enabled:
            self.controller_bootstrap()
        else:
            with self._bootstrap_lock:
                self._watch_manager.job_stop_watches()
                self._initialized = False
        logger.info("JHipster K8s Operator is now: %s", "ON" if enabled else "OFF")
        return self._enabled

    def controller_is_initialized(self) -> bool:
        return self._initialized

    def controller_health(self) -> HealthStatus:
        """Return operator health derived from switch, bootstrap and watch state."""

        watches = self._watch_manager.job_registration_state()
        cursors = self._watch_manager.job_cursor_state()
        if not self._enabled:
            return HealthStatus(status="disabled", detail="operator switched off", watches=watches, cursors=cursors)
        if not self._initialized:
            missing_types = [
                descriptor.crd_name for descriptor in self._type_registry.job_type_descriptors() if not descriptor.found
            ]
            detail = "not initialized"
            if missing_types:
                detail = f"not initialized, missing definitions: {', '.join(missing_types)}"
            return HealthStatus(status="degraded", detail=detail, watches=watches, cursors=cursors)
        return HealthStatus(
            status="ok",
            detail="all watches registered",
            watches=watches,
            cursors=cursors,
            urls=self._state_store.store_application_urls(),
        )

    def _controller_require_ready(self) -> None:
        if not self._enabled:
            raise ControllerNotInitializedError("operator is switched off")
        if not self._initialized:
            raise ControllerNotInitializedError("operator is not initialized, run bootstrap first")
