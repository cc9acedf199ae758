"""Cluster client that shells out to kubectl (or oc)."""

from __future__ import annotations

import json
import shlex
import subprocess
from typing import Any

from ktoolbox import status
from ktoolbox.cluster.base import (
    NOT_FOUND,
    CleanupAttemptResult,
    DeleteAttempt,
    Readiness,
    ResourceStatus,
)
from ktoolbox.config import ToolboxConfig
from ktoolbox.exceptions import (
    ClientNotInstalledError,
    ClientTimeoutError,
    ClusterError,
    SessionError,
)

NAME_LABEL = "ktoolbox.io/name"
MANAGED_BY_LABEL = "app.kubernetes.io/managed-by"
CONTAINER_NAME = "toolbox"


def selector_for(name: str) -> str:
    """Build the label selector matching a toolbox pod.

    Args:
        name: Requested pod name.

    Returns:
        Label selector string.
    """
    return f"{NAME_LABEL}={name}"


def build_pod_spec(config: ToolboxConfig) -> dict[str, Any]:
    """Generate the Kubernetes Pod manifest for a debug session.

    Args:
        config: Run configuration.

    Returns:
        Pod spec as a dictionary.
    """
    return {
        "apiVersion": "v1",
        "kind": "Pod",
        "metadata": {
            "name": config.name,
            "labels": {
                MANAGED_BY_LABEL: "ktoolbox",
                NAME_LABEL: config.name,
            },
        },
        "spec": {
            "containers": [
                {
                    "name": CONTAINER_NAME,
                    "image": config.image,
                    "imagePullPolicy": "Always",
                    "command": [config.command],
                    "stdin": True,
                    "stdinOnce": True,
                    "tty": True,
                    "securityContext": {
                        "privileged": True,
                    },
                },
            ],
            "restartPolicy": "Never",
            "terminationGracePeriodSeconds": 0,
        },
    }


def _readiness_from_pod(pod: dict[str, Any]) -> Readiness:
    """Read the Ready condition of a pod object."""
    pod_status = pod.get("status") or {}
    for condition in pod_status.get("conditions") or []:
        if condition.get("type") == "Ready":
            if condition.get("status") == "True":
                return Readiness.READY
            return Readiness.NOT_READY
    if pod_status.get("phase"):
        return Readiness.NOT_READY
    return Readiness.UNKNOWN


class KubectlClient:
    """Cluster client backed by the kubectl command line.

    Every command is scoped by the configured namespace arguments, so the
    same client works against any namespace or context kubectl can reach.
    """

    # Default timeout for non-interactive commands (seconds)
    DEFAULT_TIMEOUT = 30

    def __init__(
        self,
        binary: str = "kubectl",
        namespace_args: tuple[str, ...] = (),
        verbose: bool = False,
    ) -> None:
        """Initialize the client.

        Args:
            binary: Client executable name or path.
            namespace_args: Arguments added to every command.
            verbose: Echo each command before running it.
        """
        self._binary = binary
        self._namespace_args = tuple(namespace_args)
        self._verbose = verbose

    @classmethod
    def from_config(cls, config: ToolboxConfig) -> KubectlClient:
        """Create a client for a run configuration."""
        return cls(
            binary=config.client_binary,
            namespace_args=config.namespace_args,
            verbose=config.verbose,
        )

    def _command(self, *args: str) -> list[str]:
        return [self._binary, *self._namespace_args, *args]

    def _run(
        self,
        *args: str,
        check: bool = True,
        input_data: str | None = None,
        timeout: int | None = None,
    ) -> subprocess.CompletedProcess[str]:
        """Run a client command and capture its output.

        Args:
            *args: Command arguments (without the binary).
            check: Raise on non-zero exit (default True).
            input_data: Optional input to pass to stdin.
            timeout: Timeout in seconds (default DEFAULT_TIMEOUT).
                     Use 0 for no timeout.

        Returns:
            CompletedProcess result.

        Raises:
            ClientNotInstalledError: If the binary is not installed.
            ClientTimeoutError: If the command times out.
            ClusterError: If the command fails and check=True.
        """
        cmd = self._command(*args)

        if timeout is None:
            timeout_value: float | None = self.DEFAULT_TIMEOUT
        elif timeout == 0:
            timeout_value = None
        else:
            timeout_value = timeout

        if self._verbose:
            status.debug(f"$ {shlex.join(cmd)}")

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                input=input_data,
                timeout=timeout_value,
            )
        except subprocess.TimeoutExpired:
            raise ClientTimeoutError(
                f"{self._binary} command timed out after {timeout_value}s: "
                f"{shlex.join(cmd)}"
            ) from None
        except FileNotFoundError as e:
            raise ClientNotInstalledError(
                f"{self._binary} not found. Install it or point --client "
                "at an existing cluster client."
            ) from e

        if check and result.returncode != 0:
            raise ClusterError(
                f"{self._binary} {args[0] if args else ''} failed: "
                f"{result.stderr.strip()}"
            )

        return result

    def create(self, spec: dict[str, Any]) -> bool:
        """Submit a pod manifest with ``create -f -``.

        Raises:
            ClusterError: If the control plane rejected the request.
        """
        self._run("create", "-f", "-", input_data=json.dumps(spec))
        return True

    def get(self, selector: str) -> ResourceStatus:
        """Look up the first pod matching a selector.

        Raises:
            ClusterError: If the query failed or returned unreadable output.
        """
        result = self._run("get", "pods", "-l", selector, "-o", "json")
        try:
            items = json.loads(result.stdout).get("items") or []
        except (json.JSONDecodeError, AttributeError) as e:
            raise ClusterError(f"Unreadable pod list for {selector}: {e}") from e

        if not items:
            return NOT_FOUND

        pod = items[0]
        return ResourceStatus(
            found=True,
            readiness=_readiness_from_pod(pod),
            resolved_name=(pod.get("metadata") or {}).get("name"),
        )

    def delete(self, selector: str) -> DeleteAttempt:
        """Force-delete pods matching a selector without waiting."""
        try:
            result = self._run(
                "delete", "pods",
                "-l", selector,
                "--grace-period=0",
                "--force",
                "--ignore-not-found=true",
                "--wait=false",
                check=False,
            )
        except ClusterError as e:
            return DeleteAttempt(CleanupAttemptResult.DELETE_FAILED, str(e))

        if result.returncode != 0:
            return DeleteAttempt(
                CleanupAttemptResult.DELETE_FAILED, result.stderr.strip()
            )
        if not result.stdout.strip():
            return DeleteAttempt(CleanupAttemptResult.NOT_FOUND)
        return DeleteAttempt(CleanupAttemptResult.DELETED)

    def attach(self, name: str) -> int:
        """Attach to the toolbox container with an interactive TTY.

        Raises:
            SessionError: If the client binary could not be started.
        """
        cmd = self._command("attach", "-it", name, "-c", CONTAINER_NAME)
        if self._verbose:
            status.debug(f"$ {shlex.join(cmd)}")
        try:
            result = subprocess.run(cmd)
        except OSError as e:
            raise SessionError(f"Could not attach to {name}: {e}") from e
        return result.returncode

    def events(self, name: str) -> list[str]:
        """Return recent event messages for a pod, oldest first.

        Used for diagnostics only; failures yield an empty list.
        """
        try:
            result = self._run(
                "get", "events",
                "--field-selector", f"involvedObject.name={name}",
                "--sort-by=.lastTimestamp",
                "-o", "jsonpath={range .items[*]}{.message}{\"\\n\"}{end}",
                check=False,
            )
        except ClusterError:
            return []
        if result.returncode != 0:
            return []
        return [line for line in result.stdout.splitlines() if line.strip()]
