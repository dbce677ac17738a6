"""Project-native typed exceptions for cluster adapter failures."""

from __future__ import annotations


class ClusterAdapterError(Exception):
    """Base exception for adapter-level cluster failures.

    Attributes:
        status_code: Optional HTTP status reported by the cluster API.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ClusterConnectionError(ClusterAdapterError, ConnectionError):
    """Transport-level connectivity failure while talking to the cluster API."""


class ClusterResourceNotFoundError(ClusterAdapterError, LookupError):
    """Requested resource does not exist (`404`)."""


class ClusterConflictError(ClusterAdapterError):
    """Write rejected because the resource already exists or changed (`409`)."""


class ClusterWatchExpiredError(ClusterAdapterError):
    """Watch cursor is too old for the API server to resume from (`410`)."""


class ClusterUnknownKindError(ClusterAdapterError, ValueError):
    """Typed operation requested for a kind that was never registered."""
