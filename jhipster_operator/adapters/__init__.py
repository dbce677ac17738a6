"""Adapter layer package for cluster integration boundaries."""

from .cluster_errors import (
	ClusterAdapterError,
	ClusterConflictError,
	ClusterConnectionError,
	ClusterResourceNotFoundError,
	ClusterUnknownKindError,
	ClusterWatchExpiredError,
)
from .interfaces import ClusterAdapterPort
from .kubernetes_cluster import KubernetesClusterAdapter
from .retry_strategy import WatchRetryStrategy

__all__ = [
	"ClusterAdapterError",
	"ClusterAdapterPort",
	"ClusterConflictError",
	"ClusterConnectionError",
	"ClusterResourceNotFoundError",
	"ClusterUnknownKindError",
	"ClusterWatchExpiredError",
	"KubernetesClusterAdapter",
	"WatchRetryStrategy",
]
