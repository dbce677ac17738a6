"""Discovery of the custom resource definitions the operator depends on."""

from __future__ import annotations

import logging

from jhipster_operator.adapters import ClusterAdapterError, ClusterAdapterPort
from jhipster_operator.domain import (
    ResourceDecoder,
    ResourceKind,
    TypeDescriptor,
    domain_build_subordinate_decoder,
    domain_decode_application,
)

from .interfaces import ControllerConfig

logger = logging.getLogger(__name__)


def job_decoder_for_kind(kind: ResourceKind) -> ResourceDecoder:
    """Return the payload decoder registered for a kind."""

    if kind is ResourceKind.APPLICATION:
        return domain_decode_application
    return domain_build_subordinate_decoder(kind)


class ResourceTypeRegistry:
    """Confirms the four required definitions exist before anything else runs."""

    def __init__(self, cluster_adapter: ClusterAdapterPort, config: ControllerConfig):
        if cluster_adapter is None:
            raise ValueError("cluster_adapter must not be None")

        self._cluster_adapter = cluster_adapter
        self._config = config
        self._descriptors: dict[ResourceKind, TypeDescriptor] = self._job_unresolved_descriptors()

    def job_discover_types(self) -> bool:
        """Register the custom kinds and check their definitions are installed.

        Returns:
            bool: True only when all four definitions are present. Any query
            error counts as not found.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        descriptors = self._job_unresolved_descriptors()
        try:
            for kind in ResourceKind:
                self._cluster_adapter.adapter_register_custom_kind(
                    api_version=self._config.config_api_version(),
                    kind=kind,
                    decoder=job_decoder_for_kind(kind),
                )
            installed_names = set(self._cluster_adapter.adapter_list_custom_resource_definitions())
        except (ClusterAdapterError, ConnectionError, TimeoutError):
            logger.exception("> Init sequence not done, custom resource definitions could not be listed")
            self._descriptors = descriptors
            return False

        for kind, descriptor in descriptors.items():
            descriptors[kind] = TypeDescriptor(
                kind=kind,
                crd_name=descriptor.crd_name,
                found=descriptor.crd_name in installed_names,
            )
        self._descriptors = descriptors

        if self.job_all_types_found():
            for descriptor in descriptors.values():
                logger.info("\t > %s CRD: %s", descriptor.kind.value, descriptor.crd_name)
            return True

        logger.error("> Custom CRDs required to work not found please check your installation!")
        for descriptor in descriptors.values():
            logger.error(
                "\t > %s CRD: %s",
                descriptor.kind.value,
                descriptor.crd_name if descriptor.found else "NOT FOUND",
            )
        return False

    def job_all_types_found(self) -> bool:
        return all(descriptor.found for descriptor in self._descriptors.values())

    def job_type_descriptors(self) -> tuple[TypeDescriptor, ...]:
        """Return discovery state per kind in declaration order."""

        return tuple(self._descriptors[kind] for kind in ResourceKind)

    def _job_unresolved_descriptors(self) -> dict[ResourceKind, TypeDescriptor]:
        return {
            kind: TypeDescriptor(kind=kind, crd_name=self._config.config_crd_name(kind), found=False)
            for kind in ResourceKind
        }
