"""Kubernetes adapter implementation for typed custom resource access."""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import Any, Final, Iterator

from kubernetes import client, config, watch
from kubernetes.client.rest import ApiException
from urllib3.exceptions import HTTPError as TransportError

from jhipster_operator.domain import (
    ApplicationRecord,
    ResourceDecoder,
    ResourceKind,
    ResourceList,
    SubordinateRecord,
    WatchAction,
    WatchEvent,
    domain_resource_version,
)

from .cluster_errors import (
    ClusterAdapterError,
    ClusterConflictError,
    ClusterConnectionError,
    ClusterResourceNotFoundError,
    ClusterUnknownKindError,
    ClusterWatchExpiredError,
)
from .interfaces import ClusterAdapterPort

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _RegisteredKind:
    """Routing and decoding data for one registered custom kind."""

    group: str
    version: str
    plural: str
    decoder: ResourceDecoder


class KubernetesClusterAdapter(ClusterAdapterPort):
    """Adapter backed by the official Kubernetes Python client."""

    _FALLBACK_EXTERNAL_IP: Final[str] = "localhost"
    _WATCH_ACTIONS: Final[frozenset[str]] = frozenset(action.value for action in WatchAction)

    def __init__(
        self,
        namespace: str,
        kubeconfig_path: str | None = None,
        external_ip: str | None = None,
        api_client: client.ApiClient | None = None,
    ):
        """Initialize Kubernetes adapter.

        Args:
            namespace: Namespace all typed operations are scoped to.
            kubeconfig_path: Optional kubeconfig file used when not running in-cluster.
            external_ip: Optional fixed external address returned by `adapter_find_external_ip`.
            api_client: Optional preconfigured API client; cluster config is loaded when omitted.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when namespace is blank.
            ClusterConnectionError: Raised when no cluster configuration can be loaded.
        """

        normalized_namespace = namespace.strip()
        if not normalized_namespace:
            raise ValueError("namespace must not be blank")

        if api_client is None:
            self._adapter_load_cluster_config(kubeconfig_path=kubeconfig_path)
            api_client = client.ApiClient()

        self._namespace = normalized_namespace
        self._external_ip = (external_ip or "").strip() or None
        self._custom_objects_api = client.CustomObjectsApi(api_client)
        self._apiextensions_api = client.ApiextensionsV1Api(api_client)
        self._core_api = client.CoreV1Api(api_client)
        self._registered_kinds: dict[ResourceKind, _RegisteredKind] = {}

    def adapter_namespace(self) -> str:
        """Return configured namespace."""

        return self._namespace

    def adapter_list_custom_resource_definitions(self) -> tuple[str, ...]:
        """Return names of all custom resource definitions.

        Returns:
            tuple[str, ...]: Definition names.

        Raises:
            ClusterAdapterError: Raised when the definitions cannot be listed.
        """

        try:
            definition_list = self._apiextensions_api.list_custom_resource_definition()
        except (ApiException, TransportError) as error:
            raise self._adapter_translate_error(error, context_label="list custom resource definitions") from error

        names: list[str] = []
        for definition in definition_list.items or ():
            metadata = definition.metadata
            if metadata is not None and metadata.name:
                names.append(metadata.name)
        return tuple(names)

    def adapter_register_custom_kind(self, api_version: str, kind: ResourceKind, decoder: ResourceDecoder) -> None:
        """Register group, version and decoder for one kind.

        Args:
            api_version: `<group>/<version>` serving the kind.
            kind: Resource kind.
            decoder: Raw payload decoder.

        Returns:
            None: Registration is stored as side effect.

        Raises:
            ValueError: Raised when api_version is not `<group>/<version>`.
        """

        group, separator, version = api_version.strip().partition("/")
        if not separator or not group or not version:
            raise ValueError(f"api_version must be <group>/<version>, got {api_version!r}")
        self._registered_kinds[kind] = _RegisteredKind(
            group=group,
            version=version,
            plural=kind.plural,
            decoder=decoder,
        )

    def adapter_list(self, kind: ResourceKind, label_selector: str | None = None) -> ResourceList:
        """List all instances of one kind in the namespace.

        Args:
            kind: Registered resource kind.
            label_selector: Optional label selector.

        Returns:
            ResourceList: Decoded items and collection resource version.

        Raises:
            ClusterUnknownKindError: Raised when kind is not registered.
            ClusterAdapterError: Raised when the list call fails.
        """

        registered_kind = self._adapter_registered_kind(kind)
        request_parameters: dict[str, Any] = {}
        if label_selector:
            request_parameters["label_selector"] = label_selector
        try:
            payload = self._custom_objects_api.list_namespaced_custom_object(
                registered_kind.group,
                registered_kind.version,
                self._namespace,
                registered_kind.plural,
                **request_parameters,
            )
        except (ApiException, TransportError) as error:
            raise self._adapter_translate_error(error, context_label=f"list {kind.value}") from error

        metadata = payload.get("metadata") or {}
        items = tuple(registered_kind.decoder(raw_item) for raw_item in payload.get("items") or ())
        return ResourceList(items=items, resource_version=metadata.get("resourceVersion"))

    def adapter_get(self, kind: ResourceKind, name: str) -> ApplicationRecord | SubordinateRecord | None:
        """Fetch one resource, None when it does not exist."""

        raw_resource = self._adapter_get_raw(kind=kind, name=name)
        if raw_resource is None:
            return None
        return self._adapter_registered_kind(kind).decoder(raw_resource)

    def adapter_create(self, kind: ResourceKind, body: dict[str, Any]) -> ApplicationRecord | SubordinateRecord:
        """Create one resource.

        Args:
            kind: Registered resource kind.
            body: Full custom object body.

        Returns:
            ApplicationRecord | SubordinateRecord: Decoded stored resource.

        Raises:
            ClusterConflictError: Raised when a resource with the same name exists.
            ClusterAdapterError: Raised for other API failures.
        """

        registered_kind = self._adapter_registered_kind(kind)
        try:
            stored_resource = self._custom_objects_api.create_namespaced_custom_object(
                registered_kind.group,
                registered_kind.version,
                self._namespace,
                registered_kind.plural,
                body,
            )
        except (ApiException, TransportError) as error:
            raise self._adapter_translate_error(error, context_label=f"create {kind.value}") from error
        return registered_kind.decoder(stored_resource)

    def adapter_create_or_replace(
        self,
        kind: ResourceKind,
        body: dict[str, Any],
    ) -> ApplicationRecord | SubordinateRecord:
        """Create a resource, replacing the stored one on name conflict.

        Custom resources reject unconditional updates, so the replace call
        carries the resource version read right before it.

        Raises:
            ClusterAdapterError: Raised when neither create nor replace succeeds.
        """

        try:
            return self.adapter_create(kind=kind, body=body)
        except ClusterConflictError:
            pass

        registered_kind = self._adapter_registered_kind(kind)
        name = str(body.get("metadata", {}).get("name") or "")
        current_resource = self._adapter_get_raw(kind=kind, name=name)
        if current_resource is None:
            return self.adapter_create(kind=kind, body=body)

        replacement_body = copy.deepcopy(body)
        replacement_body.setdefault("metadata", {})["resourceVersion"] = domain_resource_version(current_resource)
        try:
            stored_resource = self._custom_objects_api.replace_namespaced_custom_object(
                registered_kind.group,
                registered_kind.version,
                self._namespace,
                registered_kind.plural,
                name,
                replacement_body,
            )
        except (ApiException, TransportError) as error:
            raise self._adapter_translate_error(error, context_label=f"replace {kind.value} {name}") from error
        return registered_kind.decoder(stored_resource)

    def adapter_delete(self, kind: ResourceKind, name: str) -> None:
        """Delete one resource with foreground propagation.

        Raises:
            ClusterResourceNotFoundError: Raised when the resource does not exist.
            ClusterAdapterError: Raised for other API failures.
        """

        registered_kind = self._adapter_registered_kind(kind)
        try:
            self._custom_objects_api.delete_namespaced_custom_object(
                registered_kind.group,
                registered_kind.version,
                self._namespace,
                registered_kind.plural,
                name,
                body=client.V1DeleteOptions(propagation_policy="Foreground"),
            )
        except (ApiException, TransportError) as error:
            raise self._adapter_translate_error(error, context_label=f"delete {kind.value} {name}") from error

    def adapter_watch(
        self,
        kind: ResourceKind,
        resource_version: str | None,
        timeout_seconds: int | None = None,
    ) -> Iterator[WatchEvent]:
        """Stream decoded change events for one kind.

        Args:
            kind: Registered resource kind.
            resource_version: Cursor to resume after; None starts from the current state.
            timeout_seconds: Optional server-side stream timeout.

        Returns:
            Iterator[WatchEvent]: Events in the order the server delivers them.

        Raises:
            ClusterWatchExpiredError: Raised when the cursor is too old.
            ClusterAdapterError: Raised for other stream failures.
        """

        registered_kind = self._adapter_registered_kind(kind)
        stream_parameters: dict[str, Any] = {}
        if resource_version:
            stream_parameters["resource_version"] = resource_version
        if timeout_seconds is not None:
            stream_parameters["timeout_seconds"] = timeout_seconds

        watcher = watch.Watch()
        try:
            for raw_event in watcher.stream(
                self._custom_objects_api.list_namespaced_custom_object,
                registered_kind.group,
                registered_kind.version,
                self._namespace,
                registered_kind.plural,
                **stream_parameters,
            ):
                event_type = str(raw_event.get("type") or "")
                raw_object = raw_event.get("object") or {}
                if event_type == "ERROR":
                    status_code = raw_object.get("code")
                    message = raw_object.get("message") or "watch stream error"
                    if status_code == 410:
                        raise ClusterWatchExpiredError(message, status_code=410)
                    raise ClusterAdapterError(message, status_code=status_code)
                if event_type not in self._WATCH_ACTIONS:
                    continue
                yield WatchEvent(
                    action=WatchAction(event_type),
                    record=registered_kind.decoder(raw_object),
                    resource_version=domain_resource_version(raw_object),
                )
        except (ApiException, TransportError) as error:
            raise self._adapter_translate_error(error, context_label=f"watch {kind.value}") from error
        finally:
            watcher.stop()

    def adapter_find_external_ip(self) -> str:
        """Return the configured external address or discover one from the cluster.

        Lookup order: configured override, first LoadBalancer ingress in the
        namespace, first node ExternalIP, then `localhost`.

        Raises:
            ClusterAdapterError: Raised when the lookup calls fail.
        """

        if self._external_ip:
            return self._external_ip

        try:
            service_list = self._core_api.list_namespaced_service(self._namespace)
            for service in service_list.items or ():
                if service.spec is None or service.spec.type != "LoadBalancer":
                    continue
                load_balancer = service.status.load_balancer if service.status else None
                for ingress in (load_balancer.ingress if load_balancer else None) or ():
                    if ingress.ip or ingress.hostname:
                        return ingress.ip or ingress.hostname

            node_list = self._core_api.list_node()
            for node in node_list.items or ():
                for address in (node.status.addresses if node.status else None) or ():
                    if address.type == "ExternalIP" and address.address:
                        return address.address
        except (ApiException, TransportError) as error:
            raise self._adapter_translate_error(error, context_label="find external ip") from error

        logger.warning("No external address found in namespace=%s, using %s", self._namespace, self._FALLBACK_EXTERNAL_IP)
        return self._FALLBACK_EXTERNAL_IP

    def _adapter_get_raw(self, kind: ResourceKind, name: str) -> dict[str, Any] | None:
        registered_kind = self._adapter_registered_kind(kind)
        try:
            return self._custom_objects_api.get_namespaced_custom_object(
                registered_kind.group,
                registered_kind.version,
                self._namespace,
                registered_kind.plural,
                name,
            )
        except ApiException as error:
            if error.status == 404:
                return None
            raise self._adapter_translate_error(error, context_label=f"get {kind.value} {name}") from error
        except TransportError as error:
            raise self._adapter_translate_error(error, context_label=f"get {kind.value} {name}") from error

    def _adapter_registered_kind(self, kind: ResourceKind) -> _RegisteredKind:
        registered_kind = self._registered_kinds.get(kind)
        if registered_kind is None:
            raise ClusterUnknownKindError(f"custom kind {kind.value} is not registered")
        return registered_kind

    def _adapter_translate_error(self, error: Exception, context_label: str) -> ClusterAdapterError:
        """Map client exceptions onto the adapter error hierarchy.

        Args:
            error: Raised client or transport exception.
            context_label: Operation label used in the message.

        Returns:
            ClusterAdapterError: Typed adapter exception to raise.
        """

        if isinstance(error, TransportError):
            return ClusterConnectionError(f"Cluster transport failed during {context_label}")

        status_code = getattr(error, "status", None)
        message = f"Cluster API rejected {context_label}: status={status_code}, reason={getattr(error, 'reason', '')}"
        if status_code == 404:
            return ClusterResourceNotFoundError(message, status_code=404)
        if status_code == 409:
            return ClusterConflictError(message, status_code=409)
        if status_code == 410:
            return ClusterWatchExpiredError(message, status_code=410)
        if status_code == 0 or status_code is None:
            return ClusterConnectionError(message, status_code=status_code)
        return ClusterAdapterError(message, status_code=status_code)

    @staticmethod
    def _adapter_load_cluster_config(kubeconfig_path: str | None) -> None:
        try:
            if kubeconfig_path:
                config.load_kube_config(config_file=kubeconfig_path)
                return
            try:
                config.load_incluster_config()
            except config.ConfigException:
                config.load_kube_config()
        except (config.ConfigException, OSError) as error:
            raise ClusterConnectionError("Kubernetes configuration could not be loaded") from error
