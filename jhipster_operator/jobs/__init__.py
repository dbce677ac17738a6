"""Job layer package for controller workflow boundaries."""

from .bootstrap_loader import BootstrapLoader, job_listing_cursor
from .controller import AppsOperatorController
from .interfaces import (
	ApplicationNotFoundError,
	ControllerConfig,
	ControllerNotInitializedError,
	OperatorControllerPort,
	ReconcileResult,
)
from .lifecycle import ApplicationLifecycleService
from .reconciler import ApplicationReconciler, job_build_application_url
from .type_registry import ResourceTypeRegistry, job_decoder_for_kind
from .watch_manager import TypedWatchSubscription, WatchEventHandlers, WatchManager

__all__ = [
	"ApplicationLifecycleService",
	"ApplicationNotFoundError",
	"ApplicationReconciler",
	"AppsOperatorController",
	"BootstrapLoader",
	"ControllerConfig",
	"ControllerNotInitializedError",
	"OperatorControllerPort",
	"ReconcileResult",
	"ResourceTypeRegistry",
	"TypedWatchSubscription",
	"WatchEventHandlers",
	"WatchManager",
	"job_build_application_url",
	"job_decoder_for_kind",
	"job_listing_cursor",
]
