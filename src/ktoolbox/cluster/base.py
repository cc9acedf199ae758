"""Base protocol for cluster clients."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol


class Readiness(Enum):
    """Readiness of a pod as reported by the control plane."""

    READY = "ready"
    NOT_READY = "not-ready"
    UNKNOWN = "unknown"


class CleanupAttemptResult(Enum):
    """Outcome of a single delete request."""

    DELETED = "deleted"
    NOT_FOUND = "not-found"
    DELETE_FAILED = "delete-failed"


@dataclass(frozen=True)
class ResourceStatus:
    """Observed state of the pod matching a selector.

    Attributes:
        found: Whether any pod matches.
        readiness: Readiness condition of the matching pod.
        resolved_name: Name the control plane assigned to the pod.
    """

    found: bool
    readiness: Readiness = Readiness.UNKNOWN
    resolved_name: str | None = None


NOT_FOUND = ResourceStatus(found=False)


@dataclass(frozen=True)
class DeleteAttempt:
    """Result of a delete request, with the failure cause if any."""

    result: CleanupAttemptResult
    cause: str | None = None


class ClusterClient(Protocol):
    """Operations the lifecycle controller needs from the control plane.

    Creation is fire-and-forget and reads are eventually consistent: a pod
    may not be visible to ``get`` immediately after ``create`` returns, and
    may still be visible for a while after ``delete``.
    """

    def create(self, spec: dict[str, Any]) -> bool:
        """Submit a pod specification.

        Args:
            spec: Pod manifest.

        Returns:
            True if the control plane accepted the request.
        """
        ...

    def get(self, selector: str) -> ResourceStatus:
        """Look up the pod matching a label selector.

        Args:
            selector: Label selector (e.g. "ktoolbox.io/name=toolbox-alice").

        Returns:
            Observed status. ``found`` is False if nothing matches.

        Raises:
            ClusterError: If the query itself failed.
        """
        ...

    def delete(self, selector: str) -> DeleteAttempt:
        """Delete pods matching a selector immediately (grace period 0).

        Absent pods are not an error.

        Args:
            selector: Label selector.

        Returns:
            DeleteAttempt describing what happened.
        """
        ...

    def attach(self, name: str) -> int:
        """Attach an interactive terminal to a running pod.

        Blocks until the session ends.

        Args:
            name: Resolved pod name.

        Returns:
            Exit code of the attach process.

        Raises:
            SessionError: If the session could not be started.
        """
        ...
