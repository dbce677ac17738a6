"""Typed interfaces for cluster adapter responsibilities."""

from typing import Any, Iterator, Protocol

from jhipster_operator.domain import (
    ApplicationRecord,
    ResourceDecoder,
    ResourceKind,
    ResourceList,
    SubordinateRecord,
    WatchEvent,
)


class ClusterAdapterPort(Protocol):
    """Port definition for typed custom resource access in one namespace."""

    def adapter_namespace(self) -> str:
        """Return the namespace all typed operations are scoped to.

        Returns:
            str: Namespace name.

        Raises:
            RuntimeError: Raised when namespace metadata is unavailable.
        """

    def adapter_list_custom_resource_definitions(self) -> tuple[str, ...]:
        """Return names of all custom resource definitions registered in the cluster.

        Returns:
            tuple[str, ...]: Definition names such as `applications.<group>`.

        Raises:
            ClusterAdapterError: Raised when the definitions cannot be listed.
        """

    def adapter_register_custom_kind(self, api_version: str, kind: ResourceKind, decoder: ResourceDecoder) -> None:
        """Register a custom kind with the decoding layer.

        Args:
            api_version: `<group>/<version>` serving the kind.
            kind: Resource kind.
            decoder: Callable turning raw payloads into records.

        Returns:
            None: Registration is stored as side effect.

        Raises:
            ValueError: Raised when api_version is malformed.
        """

    def adapter_list(self, kind: ResourceKind, label_selector: str | None = None) -> ResourceList:
        """List all instances of one kind.

        Args:
            kind: Registered resource kind.
            label_selector: Optional label selector such as `app=store`.

        Returns:
            ResourceList: Decoded items and the collection resource version.

        Raises:
            ClusterAdapterError: Raised when the list call fails.
        """

    def adapter_get(self, kind: ResourceKind, name: str) -> ApplicationRecord | SubordinateRecord | None:
        """Fetch one resource by name, None when absent.

        Raises:
            ClusterAdapterError: Raised when the get call fails for reasons other than absence.
        """

    def adapter_create(self, kind: ResourceKind, body: dict[str, Any]) -> ApplicationRecord | SubordinateRecord:
        """Create one resource and return its stored form.

        Raises:
            ClusterConflictError: Raised when the resource already exists.
            ClusterAdapterError: Raised for other API failures.
        """

    def adapter_create_or_replace(
        self,
        kind: ResourceKind,
        body: dict[str, Any],
    ) -> ApplicationRecord | SubordinateRecord:
        """Create a resource or replace it when it already exists.

        Raises:
            ClusterAdapterError: Raised when neither create nor replace succeeds.
        """

    def adapter_delete(self, kind: ResourceKind, name: str) -> None:
        """Delete one resource by name.

        Raises:
            ClusterResourceNotFoundError: Raised when the resource does not exist.
            ClusterAdapterError: Raised for other API failures.
        """

    def adapter_watch(
        self,
        kind: ResourceKind,
        resource_version: str | None,
        timeout_seconds: int | None = None,
    ) -> Iterator[WatchEvent]:
        """Stream change events for one kind starting after `resource_version`.

        The iterator ends when the server closes the stream.

        Raises:
            ClusterWatchExpiredError: Raised when the cursor is too old to resume from.
            ClusterAdapterError: Raised for other stream failures.
        """

    def adapter_find_external_ip(self) -> str:
        """Return the externally reachable address of the cluster ingress.

        Raises:
            ClusterAdapterError: Raised when the lookup calls fail.
        """
