"""Reconciliation of tracked applications into health, status and URL."""

from __future__ import annotations

import logging

from jhipster_operator.adapters import ClusterAdapterPort
from jhipster_operator.domain import (
    URL_NOT_AVAILABLE,
    ApplicationRecord,
    ApplicationStatus,
    ResourceKind,
    domain_encode_application,
)
from jhipster_operator.store import ApplicationStateStore

from .interfaces import ControllerConfig, ReconcileResult

logger = logging.getLogger(__name__)


def job_build_application_url(external_ip: str, application_name: str, application_version: str) -> str:
    """Return the public URL of a healthy application."""

    return f"http://{external_ip}/apps/{application_name}/{application_version}/"


class ApplicationReconciler:
    """Derives status and URL for every tracked application and writes them back."""

    def __init__(
        self,
        cluster_adapter: ClusterAdapterPort,
        state_store: ApplicationStateStore,
        config: ControllerConfig,
    ):
        if cluster_adapter is None:
            raise ValueError("cluster_adapter must not be None")
        if state_store is None:
            raise ValueError("state_store must not be None")

        self._cluster_adapter = cluster_adapter
        self._state_store = state_store
        self._config = config

    def job_is_application_healthy(self, record: ApplicationRecord) -> bool:
        """Return whether every declared microservice is present in the store.

        An application that declares no microservice modules is unhealthy.
        """

        microservice_names = record.application_microservice_names()
        if not microservice_names:
            logger.info("App: %s: No MicroService declared.", record.name)
            return False

        healthy = True
        for microservice_name in microservice_names:
            if self._state_store.store_has_subordinate(ResourceKind.MICROSERVICE, record.name, microservice_name):
                logger.info("\t> MicroService found: %s", microservice_name)
            else:
                logger.info("\t> MicroService missing: %s", microservice_name)
                healthy = False
        return healthy

    def job_reconcile(self) -> ReconcileResult:
        """Reconcile every tracked application once.

        Persistence is an unconditional upsert per application. Any failure for
        one application is logged and the pass continues with the others.

        Returns:
            ReconcileResult: Status per application and names that failed to persist.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        applications = self._state_store.store_list_applications()
        if not applications:
            logger.info("> No Apps found.")
            return ReconcileResult()

        statuses: dict[str, ApplicationStatus] = {}
        failed: list[str] = []
        external_ip: str | None = None
        external_ip_failed = False

        for record in applications:
            logger.info("> Scanning App: %s...", record.name)
            if self.job_is_application_healthy(record):
                if external_ip is None and not external_ip_failed:
                    try:
                        external_ip = self._cluster_adapter.adapter_find_external_ip()
                    except Exception:  # pylint: disable=broad-except
                        logger.exception("> External IP lookup failed")
                        external_ip_failed = True
                if external_ip is None:
                    failed.append(record.name)
                    continue
                status = ApplicationStatus.HEALTHY
                url = job_build_application_url(external_ip, record.name, record.version)
                logger.info("> App: %s, status: HEALTHY, URL: %s", record.name, url)
            else:
                status = ApplicationStatus.UNHEALTHY
                url = URL_NOT_AVAILABLE
                logger.error("> App: %s, status: UNHEALTHY, missing services", record.name)

            updated_record = self._state_store.store_update_application_status(record.name, status, url)
            if updated_record is None:
                logger.info("> App %s was removed during reconcile, skipping write-back", record.name)
                continue
            statuses[record.name] = status

            try:
                self._cluster_adapter.adapter_create_or_replace(
                    kind=ResourceKind.APPLICATION,
                    body=domain_encode_application(
                        updated_record,
                        api_version=self._config.config_api_version(),
                        namespace=self._cluster_adapter.adapter_namespace(),
                    ),
                )
            except Exception:  # pylint: disable=broad-except
                logger.exception("> Persisting App %s failed", record.name)
                failed.append(record.name)

        return ReconcileResult(statuses=statuses, failed=tuple(failed))
