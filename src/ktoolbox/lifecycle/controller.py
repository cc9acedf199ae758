"""Lifecycle of a single debug session: create, wait, attach, clean up."""

from __future__ import annotations

import time
from collections.abc import Callable
from enum import Enum

from ktoolbox import status
from ktoolbox.cluster.base import ClusterClient
from ktoolbox.cluster.kubectl import build_pod_spec, selector_for
from ktoolbox.config import ToolboxConfig
from ktoolbox.exceptions import ReadinessTimeoutError, SessionError
from ktoolbox.lifecycle.cleanup import CleanupGuard
from ktoolbox.lifecycle.poller import wait_until_ready


class LifecycleState(Enum):
    """Phases of a run, entered strictly in order."""

    IDLE = "idle"
    CREATING_RESOURCE = "creating-resource"
    AWAITING_READINESS = "awaiting-readiness"
    ATTACHED = "attached"
    CLEANING_UP = "cleaning-up"
    TERMINATED = "terminated"


class LifecycleController:
    """Runs one debug session against a cluster client.

    The pod is created inside a CleanupGuard scope, so it is removed on
    every exit path, including errors and interrupts.
    """

    def __init__(
        self,
        config: ToolboxConfig,
        client: ClusterClient,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the controller.

        Args:
            config: Run configuration.
            client: Cluster client used for every operation.
            sleep: Sleep function shared by the polling loops.
        """
        self._config = config
        self._client = client
        self._sleep = sleep
        self._selector = selector_for(config.name)
        self.state = LifecycleState.IDLE
        self.history: list[LifecycleState] = [LifecycleState.IDLE]

    def _transition(self, state: LifecycleState) -> None:
        self.state = state
        self.history.append(state)

    def run(self) -> int:
        """Create the pod, attach to it, and remove it afterwards.

        Returns:
            0 once the session has ended and the pod is gone.

        Raises:
            ReadinessTimeoutError: If the pod never became ready.
            CleanupTimeoutError: If the pod could not be removed.
            ClusterError: If the pod could not be created.
        """
        guard = CleanupGuard(
            self._client,
            self._selector,
            policy=self._config.cleanup_policy,
            sleep=self._sleep,
            verbose=self._config.verbose,
        )

        try:
            with guard:
                try:
                    guard.sweep()
                    self._create()
                    name = self._await_readiness()
                    self._attach(name)
                finally:
                    self._transition(LifecycleState.CLEANING_UP)
        finally:
            self._transition(LifecycleState.TERMINATED)

        return 0

    def _create(self) -> None:
        self._transition(LifecycleState.CREATING_RESOURCE)
        config = self._config
        status.info(f"Creating pod {config.name} from image {config.image}...")
        self._client.create(build_pod_spec(config))

    def _await_readiness(self) -> str:
        """Block until the pod is ready and return its resolved name."""
        self._transition(LifecycleState.AWAITING_READINESS)
        config = self._config
        status.info(f"Waiting for pod {config.name} to be ready...")

        result = wait_until_ready(
            self._client,
            self._selector,
            policy=config.ready_policy,
            sleep=self._sleep,
            verbose=config.verbose,
        )

        if result.timed_out:
            self._report_events(config.name)
            message = (
                f"Pod {config.name} not ready within "
                f"{config.ready_policy.timeout:g}s"
            )
            if result.last_error is not None:
                message += f" (last query error: {result.last_error})"
            raise ReadinessTimeoutError(message)

        name = result.resolved_name or config.name
        status.ok(f"Pod {name} is ready.")
        return name

    def _attach(self, name: str) -> None:
        """Attach to the pod. Any way the session ends is a normal end."""
        self._transition(LifecycleState.ATTACHED)
        status.info(f"Attaching to {name}. Exit the shell to remove the pod.")
        try:
            exit_code = self._client.attach(name)
        except SessionError as e:
            status.warn(f"Session could not be started: {e}")
            return
        if exit_code != 0:
            status.warn(f"Session ended with exit code {exit_code}.")

    def _report_events(self, name: str) -> None:
        """Print recent pod events, if the client can provide them."""
        events = getattr(self._client, "events", None)
        if events is None:
            return
        messages = events(name)
        if messages:
            status.info("Recent pod events:")
            for message in messages[-5:]:
                status.info(f"  {message}")
