"""Domain models used across operator layer boundaries."""

from .descriptor import (
	ApplicationDefinition,
	DescriptorTranslationError,
	DescriptorTranslator,
	ModuleKindClassifier,
	domain_classify_module_kind,
	domain_module_kind_from_type,
	domain_translate_descriptor,
)
from .models import (
	APP_LABEL_KEY,
	CASCADING_FINALIZER,
	DEFAULT_GATEWAY_PORT,
	DEFAULT_MICROSERVICE_PORT,
	DEFAULT_REGISTRY_NAME,
	DEFAULT_REGISTRY_PORT,
	DEFAULT_SERVICE_VERSION,
	DEFINITION_ANNOTATION_KEY,
	SUBORDINATE_KINDS,
	URL_NOT_AVAILABLE,
	ApplicationRecord,
	ApplicationStatus,
	HealthStatus,
	ModuleDescriptor,
	ModuleKind,
	OwnerReference,
	ResourceKind,
	ResourceList,
	SubordinateRecord,
	TypeDescriptor,
	WatchAction,
	WatchEvent,
)
from .resources import (
	ResourceDecoder,
	domain_build_subordinate_decoder,
	domain_decode_application,
	domain_encode_application,
	domain_encode_owner_reference,
	domain_encode_subordinate,
	domain_resource_version,
)

__all__ = [
	"APP_LABEL_KEY",
	"CASCADING_FINALIZER",
	"DEFAULT_GATEWAY_PORT",
	"DEFAULT_MICROSERVICE_PORT",
	"DEFAULT_REGISTRY_NAME",
	"DEFAULT_REGISTRY_PORT",
	"DEFAULT_SERVICE_VERSION",
	"DEFINITION_ANNOTATION_KEY",
	"SUBORDINATE_KINDS",
	"URL_NOT_AVAILABLE",
	"ApplicationDefinition",
	"ApplicationRecord",
	"ApplicationStatus",
	"DescriptorTranslationError",
	"DescriptorTranslator",
	"HealthStatus",
	"ModuleDescriptor",
	"ModuleKind",
	"ModuleKindClassifier",
	"OwnerReference",
	"ResourceDecoder",
	"ResourceKind",
	"ResourceList",
	"SubordinateRecord",
	"TypeDescriptor",
	"WatchAction",
	"WatchEvent",
	"domain_build_subordinate_decoder",
	"domain_classify_module_kind",
	"domain_decode_application",
	"domain_encode_application",
	"domain_encode_owner_reference",
	"domain_encode_subordinate",
	"domain_module_kind_from_type",
	"domain_resource_version",
	"domain_translate_descriptor",
]
