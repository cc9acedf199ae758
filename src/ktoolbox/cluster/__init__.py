"""Cluster client abstraction for ktoolbox."""

from ktoolbox.cluster.base import (
    NOT_FOUND,
    CleanupAttemptResult,
    ClusterClient,
    DeleteAttempt,
    Readiness,
    ResourceStatus,
)
from ktoolbox.cluster.kubectl import KubectlClient, build_pod_spec, selector_for

__all__ = [
    "NOT_FOUND",
    "CleanupAttemptResult",
    "ClusterClient",
    "DeleteAttempt",
    "KubectlClient",
    "Readiness",
    "ResourceStatus",
    "build_pod_spec",
    "selector_for",
]
