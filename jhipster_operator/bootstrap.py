"""Operator bootstrap wiring for startup validation and dependency assembly."""

from __future__ import annotations

import logging
import threading

from fastapi import FastAPI

from jhipster_operator.adapters import ClusterAdapterPort, KubernetesClusterAdapter, WatchRetryStrategy
from jhipster_operator.api import create_api_application
from jhipster_operator.config import OperatorSettings, config_load_settings
from jhipster_operator.jobs import (
    ApplicationLifecycleService,
    ApplicationReconciler,
    AppsOperatorController,
    BootstrapLoader,
    ControllerConfig,
    ControllerNotInitializedError,
    ResourceTypeRegistry,
    WatchManager,
)
from jhipster_operator.store import ApplicationStateStore, WatchCursorRegistry

logger = logging.getLogger(__name__)


def bootstrap_create_controller(
    settings: OperatorSettings,
    cluster_adapter: ClusterAdapterPort | None = None,
) -> AppsOperatorController:
    """Assemble the controller and its components.

    Args:
        settings: Validated operator settings.
        cluster_adapter: Optional adapter override; a Kubernetes adapter is built when omitted.

    Returns:
        AppsOperatorController: Controller ready for `controller_bootstrap`.

    Raises:
        ClusterConnectionError: Raised when the Kubernetes configuration cannot be loaded.
    """

    if cluster_adapter is None:
        cluster_adapter = KubernetesClusterAdapter(
            namespace=settings.namespace,
            kubeconfig_path=settings.kubeconfig_path,
            external_ip=settings.external_ip,
        )

    config = ControllerConfig(
        crd_group=settings.crd_group,
        crd_version=settings.crd_version,
        watch_timeout_seconds=settings.watch_timeout_seconds,
    )
    state_store = ApplicationStateStore()
    cursor_registry = WatchCursorRegistry()
    bootstrap_loader = BootstrapLoader(
        cluster_adapter=cluster_adapter,
        state_store=state_store,
        cursor_registry=cursor_registry,
    )
    watch_manager = WatchManager(
        cluster_adapter=cluster_adapter,
        state_store=state_store,
        cursor_registry=cursor_registry,
        retry_strategy=WatchRetryStrategy(
            backoff_base_seconds=settings.watch_backoff_base_seconds,
            max_backoff_seconds=settings.watch_backoff_max_seconds,
            jitter_min_multiplier=settings.watch_jitter_min_multiplier,
            jitter_max_multiplier=settings.watch_jitter_max_multiplier,
        ),
        reload_kind=bootstrap_loader.job_reload_kind,
        timeout_seconds=config.watch_timeout_seconds,
    )
    return AppsOperatorController(
        type_registry=ResourceTypeRegistry(cluster_adapter=cluster_adapter, config=config),
        bootstrap_loader=bootstrap_loader,
        watch_manager=watch_manager,
        reconciler=ApplicationReconciler(cluster_adapter=cluster_adapter, state_store=state_store, config=config),
        lifecycle_service=ApplicationLifecycleService(
            cluster_adapter=cluster_adapter,
            state_store=state_store,
            config=config,
        ),
        state_store=state_store,
    )


def bootstrap_create_application(
    settings: OperatorSettings | None = None,
    controller: AppsOperatorController | None = None,
) -> tuple[FastAPI, AppsOperatorController]:
    """Assemble the HTTP application around a controller.

    Returns:
        tuple[FastAPI, AppsOperatorController]: Application and the controller it serves.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    settings = settings or config_load_settings()
    controller = controller or bootstrap_create_controller(settings=settings)
    return create_api_application(settings=settings, controller=controller), controller


def bootstrap_run_reconcile_loop(
    controller: AppsOperatorController,
    interval_seconds: float,
    stop_event: threading.Event,
) -> None:
    """Reconcile on a fixed interval until `stop_event` is set.

    Passes are skipped while the operator is off or not initialized.

    Args:
        controller: Controller to reconcile.
        interval_seconds: Delay between passes.
        stop_event: Event ending the loop.

    Returns:
        None: Runs until stopped.
    """

    while not stop_event.is_set():
        if controller.controller_is_enabled() and controller.controller_is_initialized():
            try:
                result = controller.controller_reconcile()
                if result.failed:
                    logger.warning("Reconcile pass finished with failures: %s", ", ".join(result.failed))
            except ControllerNotInitializedError:
                logger.info("Reconcile skipped, operator not ready")
            except Exception:  # pylint: disable=broad-except
                logger.exception("Reconcile pass failed, retrying on the next interval")
        stop_event.wait(interval_seconds)


def bootstrap_start_reconcile_thread(
    controller: AppsOperatorController,
    interval_seconds: float,
) -> tuple[threading.Thread, threading.Event]:
    """Start the reconcile loop on a daemon thread.

    Returns:
        tuple[threading.Thread, threading.Event]: Running thread and the event that stops it.
    """

    stop_event = threading.Event()
    thread = threading.Thread(
        target=bootstrap_run_reconcile_loop,
        args=(controller, interval_seconds, stop_event),
        name="reconcile-scheduler",
        daemon=True,
    )
    thread.start()
    return thread, stop_event
