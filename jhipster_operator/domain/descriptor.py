"""Application descriptor translation contract.

JDL parsing is owned by an external collaborator. This module accepts the
already-structured form of a descriptor and normalizes it into an
`ApplicationDefinition`, plus the module-kind classifier used when creating
subordinate resources.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from .models import ModuleDescriptor, ModuleKind, ResourceKind

_GATEWAY_MODULE_TYPES = frozenset({"gateway", "uaa-gateway"})


class DescriptorTranslationError(ValueError):
    """Raised when a descriptor payload cannot be translated into a definition."""


@dataclass(frozen=True)
class ApplicationDefinition:
    """Structured application definition produced by descriptor translation.

    Attributes:
        name: Application name.
        version: Application version.
        modules: Declared modules with their raw declared type preserved as kind.
        content: Opaque raw descriptor content carried on the Application resource.
    """

    name: str
    version: str
    modules: tuple[ModuleDescriptor, ...]
    content: str


DescriptorTranslator = Callable[[Mapping[str, Any]], ApplicationDefinition]
ModuleKindClassifier = Callable[[ModuleDescriptor], ResourceKind]


def domain_classify_module_kind(module: ModuleDescriptor) -> ResourceKind:
    """Map a declared module to the resource kind created for it.

    Args:
        module: Declared module.

    Returns:
        ResourceKind: Gateway for gateway modules, MicroService otherwise.
    """

    if module.kind is ModuleKind.GATEWAY:
        return ResourceKind.GATEWAY
    return ResourceKind.MICROSERVICE


def domain_module_kind_from_type(declared_type: str) -> ModuleKind:
    """Normalize a declared application type into a module kind."""

    if declared_type.strip().lower() in _GATEWAY_MODULE_TYPES:
        return ModuleKind.GATEWAY
    return ModuleKind.MICROSERVICE


def domain_translate_descriptor(payload: Mapping[str, Any]) -> ApplicationDefinition:
    """Translate a structured descriptor payload into an application definition.

    Args:
        payload: Mapping with `name`, `version` and `modules` entries. Each module
            carries `name`, `type` and an optional `port`. An optional `content`
            string is kept verbatim as the opaque definition.

    Returns:
        ApplicationDefinition: Normalized definition.

    Raises:
        DescriptorTranslationError: Raised when required fields are missing or malformed.
    """

    if not isinstance(payload, Mapping):
        raise DescriptorTranslationError("descriptor payload must be a mapping")

    name = str(payload.get("name") or "").strip()
    version = str(payload.get("version") or "").strip()
    if not name:
        raise DescriptorTranslationError("descriptor name must not be blank")
    if not version:
        raise DescriptorTranslationError("descriptor version must not be blank")

    raw_modules = payload.get("modules") or []
    if not isinstance(raw_modules, list):
        raise DescriptorTranslationError("descriptor modules must be a list")

    modules: list[ModuleDescriptor] = []
    seen_names: set[str] = set()
    for raw_module in raw_modules:
        if not isinstance(raw_module, Mapping):
            raise DescriptorTranslationError("descriptor module entries must be mappings")
        module_name = str(raw_module.get("name") or "").strip()
        if not module_name:
            raise DescriptorTranslationError("descriptor module name must not be blank")
        if module_name in seen_names:
            raise DescriptorTranslationError(f"duplicate module name={module_name}")
        seen_names.add(module_name)
        port_value = raw_module.get("port")
        modules.append(
            ModuleDescriptor(
                name=module_name,
                kind=domain_module_kind_from_type(str(raw_module.get("type") or "")),
                port="" if port_value is None else str(port_value).strip(),
            )
        )

    content = payload.get("content")
    if content is None:
        content = json.dumps(dict(payload), sort_keys=True, default=str)

    return ApplicationDefinition(name=name, version=version, modules=tuple(modules), content=str(content))
