"""Readiness polling for the debug pod."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from ktoolbox import status
from ktoolbox.cluster.base import ClusterClient, Readiness
from ktoolbox.config import PollPolicy
from ktoolbox.exceptions import ClusterError


class PollOutcome(Enum):
    """Result of a single readiness check."""

    READY = "ready"
    NOT_READY = "not-ready"
    QUERY_FAILED = "query-failed"


@dataclass(frozen=True)
class WaitResult:
    """Result of waiting for readiness.

    Attributes:
        outcome: Outcome of the last check.
        attempts: Number of queries issued.
        resolved_name: Pod name reported by the control plane, when ready.
        last_error: Most recent query error, if any check failed.
    """

    outcome: PollOutcome
    attempts: int
    resolved_name: str | None = None
    last_error: ClusterError | None = None

    @property
    def ready(self) -> bool:
        return self.outcome is PollOutcome.READY

    @property
    def timed_out(self) -> bool:
        return not self.ready


def wait_until_ready(
    client: ClusterClient,
    selector: str,
    policy: PollPolicy | None = None,
    sleep: Callable[[float], None] = time.sleep,
    verbose: bool = False,
) -> WaitResult:
    """Poll the control plane until the selected pod reports Ready.

    Each iteration issues one query. A ready pod returns immediately;
    otherwise the budget shrinks by ``policy.step`` and the poller sleeps for
    the same amount. Query errors are treated like "not ready yet", so a
    client that is broken for good only shows up once the budget runs out.

    Args:
        client: Cluster client.
        selector: Label selector of the pod.
        policy: Time budget (default 100s in 5s steps).
        sleep: Sleep function, replaceable in tests.
        verbose: Print every non-ready observation.

    Returns:
        WaitResult; ``timed_out`` is True if the budget ran out.
    """
    policy = policy or PollPolicy()
    outcome = PollOutcome.NOT_READY
    last_error: ClusterError | None = None

    for attempt in range(1, policy.iterations + 1):
        try:
            observed = client.get(selector)
        except ClusterError as e:
            outcome = PollOutcome.QUERY_FAILED
            last_error = e
            if verbose:
                status.debug(f"Readiness query {attempt} failed: {e}")
        else:
            if observed.found and observed.readiness is Readiness.READY:
                return WaitResult(
                    outcome=PollOutcome.READY,
                    attempts=attempt,
                    resolved_name=observed.resolved_name,
                    last_error=last_error,
                )
            outcome = PollOutcome.NOT_READY
            if verbose:
                state = observed.readiness.value if observed.found else "absent"
                status.debug(f"Readiness query {attempt}: {state}")

        sleep(policy.step)

    return WaitResult(
        outcome=outcome,
        attempts=policy.iterations,
        last_error=last_error,
    )
