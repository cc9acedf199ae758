"""Guaranteed removal of the debug pod."""

from __future__ import annotations

import time
from collections.abc import Callable
from types import TracebackType

from ktoolbox import status
from ktoolbox.cluster.base import CleanupAttemptResult, ClusterClient
from ktoolbox.config import PollPolicy
from ktoolbox.exceptions import CleanupTimeoutError, ClusterError


def _still_exists(client: ClusterClient, selector: str, verbose: bool) -> bool:
    """Check whether a pod matching the selector is still observed.

    A failed query counts as "still exists".
    """
    try:
        return client.get(selector).found
    except ClusterError as e:
        if verbose:
            status.debug(f"Existence check for {selector} failed: {e}")
        return True


def cleanup(
    client: ClusterClient,
    selector: str,
    policy: PollPolicy | None = None,
    sleep: Callable[[float], None] = time.sleep,
    verbose: bool = False,
) -> int:
    """Delete the selected pod and wait until it is gone.

    Safe to call any number of times: it acts only on what the control plane
    currently reports, and does nothing if no pod matches.

    Args:
        client: Cluster client.
        selector: Label selector of the pod.
        policy: Time budget (default 100s in 5s steps).
        sleep: Sleep function, replaceable in tests.
        verbose: Print retry diagnostics.

    Returns:
        Number of delete requests issued (0 if nothing existed).

    Raises:
        CleanupTimeoutError: If the pod is still observed once the budget
            is spent.
    """
    policy = policy or PollPolicy()
    attempts = 0

    exists = _still_exists(client, selector, verbose)
    while exists:
        if attempts >= policy.iterations:
            raise CleanupTimeoutError(
                f"Pod matching {selector} still present after {policy.timeout:g}s. "
                "It runs privileged; delete it manually: "
                f"kubectl delete pod -l {selector} --grace-period=0 --force"
            )
        if attempts == 0:
            status.info(f"Deleting pod matching {selector}...")

        attempts += 1
        attempt = client.delete(selector)
        failed = attempt.result is CleanupAttemptResult.DELETE_FAILED
        if failed:
            status.warn(f"Delete request failed: {attempt.cause}")
            sleep(policy.step)

        exists = _still_exists(client, selector, verbose)
        if exists and not failed:
            if verbose:
                status.debug(f"Pod still present after delete {attempts}, waiting")
            sleep(policy.step)

    if attempts:
        status.ok(f"Pod matching {selector} removed.")
    return attempts


class CleanupGuard:
    """Scope that owns the obligation to remove the debug pod.

    Entering the scope registers the obligation; leaving it, by return,
    exception, KeyboardInterrupt or SystemExit, runs ``cleanup`` once. The
    same guard also runs the pre-emptive sweep before anything is created.

    Example:
        with CleanupGuard(client, selector) as guard:
            guard.sweep()
            client.create(spec)
            ...
    """

    def __init__(
        self,
        client: ClusterClient,
        selector: str,
        policy: PollPolicy | None = None,
        sleep: Callable[[float], None] = time.sleep,
        verbose: bool = False,
    ) -> None:
        self._client = client
        self._selector = selector
        self._policy = policy or PollPolicy()
        self._sleep = sleep
        self._verbose = verbose
        self.invocations = 0

    def cleanup(self) -> int:
        """Run one cleanup pass. See ``cleanup``."""
        self.invocations += 1
        return cleanup(
            self._client,
            self._selector,
            policy=self._policy,
            sleep=self._sleep,
            verbose=self._verbose,
        )

    def sweep(self) -> int:
        """Remove a pod left behind by an earlier, crashed run."""
        removed = self.cleanup()
        if removed:
            status.warn("Removed a leftover pod from a previous run.")
        return removed

    def __enter__(self) -> CleanupGuard:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        # The budget is already spent if a cleanup pass gave up inside the scope.
        if exc_type is not None and issubclass(exc_type, CleanupTimeoutError):
            return
        # A CleanupTimeoutError raised here replaces the in-flight exception.
        self.cleanup()
