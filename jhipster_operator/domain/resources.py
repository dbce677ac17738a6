"""Conversion between custom resource payloads and domain records."""

from __future__ import annotations

from typing import Any, Callable, Mapping

from .models import (
    APP_LABEL_KEY,
    CASCADING_FINALIZER,
    DEFAULT_GATEWAY_NAME,
    DEFAULT_REGISTRY_NAME,
    DEFAULT_SERVICE_VERSION,
    DEFINITION_ANNOTATION_KEY,
    URL_NOT_AVAILABLE,
    ApplicationRecord,
    ApplicationStatus,
    ModuleDescriptor,
    ModuleKind,
    OwnerReference,
    ResourceKind,
    SubordinateRecord,
)

ResourceDecoder = Callable[[Mapping[str, Any]], ApplicationRecord | SubordinateRecord]


def domain_resource_metadata(resource: Mapping[str, Any]) -> Mapping[str, Any]:
    """Return the metadata mapping of a raw resource, empty when absent."""

    metadata = resource.get("metadata")
    return metadata if isinstance(metadata, Mapping) else {}


def domain_resource_version(resource: Mapping[str, Any]) -> str | None:
    """Return the resource version of a raw resource when present."""

    return domain_resource_metadata(resource).get("resourceVersion")


def domain_decode_application(resource: Mapping[str, Any]) -> ApplicationRecord:
    """Decode a raw Application resource.

    Args:
        resource: Raw custom object payload.

    Returns:
        ApplicationRecord: Decoded record. `spec_present` is False when the payload has no spec.

    Raises:
        ValueError: Raised when the resource has no name.
    """

    metadata = domain_resource_metadata(resource)
    name = str(metadata.get("name") or "").strip()
    if not name:
        raise ValueError("Application resource missing metadata.name")

    annotations = metadata.get("annotations") or {}
    common_fields: dict[str, Any] = {
        "name": name,
        "resource_version": metadata.get("resourceVersion"),
        "uid": metadata.get("uid"),
        "definition": annotations.get(DEFINITION_ANNOTATION_KEY),
        "finalizers": tuple(metadata.get("finalizers") or ()),
    }

    spec = resource.get("spec")
    if not isinstance(spec, Mapping):
        return ApplicationRecord(spec_present=False, **common_fields)

    return ApplicationRecord(
        version=str(spec.get("version") or ""),
        modules=tuple(_domain_decode_module(raw_module) for raw_module in spec.get("modules") or ()),
        selector=spec.get("selector"),
        registry=str(spec.get("registry") or DEFAULT_REGISTRY_NAME),
        gateway=str(spec.get("gateway") or DEFAULT_GATEWAY_NAME),
        status=_domain_decode_status(spec.get("status")),
        url=str(spec.get("url") or URL_NOT_AVAILABLE),
        **common_fields,
    )


def domain_build_subordinate_decoder(kind: ResourceKind) -> ResourceDecoder:
    """Return a decoder for one subordinate kind."""

    if kind is ResourceKind.APPLICATION:
        raise ValueError("Application is not a subordinate kind")

    def _decode(resource: Mapping[str, Any]) -> SubordinateRecord:
        metadata = domain_resource_metadata(resource)
        name = str(metadata.get("name") or "").strip()
        if not name:
            raise ValueError(f"{kind.value} resource missing metadata.name")
        labels = metadata.get("labels") or {}
        spec = resource.get("spec")
        if not isinstance(spec, Mapping):
            return SubordinateRecord(
                kind=kind,
                name=name,
                app_name=labels.get(APP_LABEL_KEY),
                resource_version=metadata.get("resourceVersion"),
                spec_present=False,
            )
        return SubordinateRecord(
            kind=kind,
            name=name,
            app_name=labels.get(APP_LABEL_KEY),
            port=str(spec.get("servicePort") or ""),
            version=str(spec.get("serviceVersion") or DEFAULT_SERVICE_VERSION),
            resource_version=metadata.get("resourceVersion"),
        )

    return _decode


def domain_encode_application(record: ApplicationRecord, api_version: str, namespace: str) -> dict[str, Any]:
    """Encode an application record as a custom object body.

    Args:
        record: Application record.
        api_version: `<group>/<version>` of the Application definition.
        namespace: Target namespace.

    Returns:
        dict[str, Any]: Body suitable for create or replace calls.
    """

    metadata: dict[str, Any] = {"name": record.name, "namespace": namespace}
    if record.definition is not None:
        metadata["annotations"] = {DEFINITION_ANNOTATION_KEY: record.definition}
    if record.finalizers:
        metadata["finalizers"] = list(record.finalizers)

    spec: dict[str, Any] = {
        "version": record.version,
        "selector": record.selector,
        "modules": [
            {"name": module.name, "kind": module.kind.value, "port": module.port} for module in record.modules
        ],
        "registry": record.registry,
        "gateway": record.gateway,
        "status": record.status.value,
        "url": record.url,
    }
    return {
        "apiVersion": api_version,
        "kind": ResourceKind.APPLICATION.value,
        "metadata": metadata,
        "spec": spec,
    }


def domain_encode_subordinate(
    kind: ResourceKind,
    name: str,
    port: str,
    api_version: str,
    namespace: str,
    app_name: str,
    owner_reference: OwnerReference,
    service_version: str = DEFAULT_SERVICE_VERSION,
) -> dict[str, Any]:
    """Encode a subordinate resource owned by an application.

    Args:
        kind: Subordinate kind.
        name: Resource and service name.
        port: Service port.
        api_version: `<group>/<version>` of the subordinate definition.
        namespace: Target namespace.
        app_name: Owning application name written as the `app` label.
        owner_reference: Owner link to the parent Application.
        service_version: Declared service version.

    Returns:
        dict[str, Any]: Body suitable for create calls.
    """

    return {
        "apiVersion": api_version,
        "kind": kind.value,
        "metadata": {
            "name": name,
            "namespace": namespace,
            "labels": {APP_LABEL_KEY: app_name},
            "finalizers": [CASCADING_FINALIZER],
            "ownerReferences": [domain_encode_owner_reference(owner_reference)],
        },
        "spec": {
            "serviceName": name,
            "serviceVersion": service_version,
            "servicePort": port,
        },
    }


def domain_encode_owner_reference(owner_reference: OwnerReference) -> dict[str, Any]:
    """Encode an owner reference using Kubernetes field names."""

    return {
        "apiVersion": owner_reference.api_version,
        "kind": owner_reference.kind,
        "name": owner_reference.name,
        "uid": owner_reference.uid,
        "controller": owner_reference.controller,
        "blockOwnerDeletion": owner_reference.block_owner_deletion,
    }


def _domain_decode_module(raw_module: Any) -> ModuleDescriptor:
    if isinstance(raw_module, str):
        return ModuleDescriptor(name=raw_module, kind=ModuleKind.MICROSERVICE)
    if not isinstance(raw_module, Mapping):
        raise ValueError("Application module entries must be mappings")
    raw_kind = str(raw_module.get("kind") or raw_module.get("type") or ModuleKind.MICROSERVICE.value).lower()
    kind = ModuleKind.GATEWAY if raw_kind == ModuleKind.GATEWAY.value else ModuleKind.MICROSERVICE
    port_value = raw_module.get("port")
    return ModuleDescriptor(
        name=str(raw_module.get("name") or ""),
        kind=kind,
        port="" if port_value is None else str(port_value),
    )


def _domain_decode_status(raw_status: Any) -> ApplicationStatus:
    try:
        return ApplicationStatus(str(raw_status))
    except ValueError:
        return ApplicationStatus.UNKNOWN
