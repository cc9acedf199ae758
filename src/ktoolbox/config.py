"""Configuration for ktoolbox runs."""

from __future__ import annotations

import getpass
import math
import os
import re
from dataclasses import dataclass, field

from ktoolbox.exceptions import ConfigError

DEFAULT_COMMAND = "bash"
DEFAULT_CLIENT = "kubectl"
NAME_PREFIX = "toolbox"

# Kubernetes object names used as label values must be DNS-1123 labels.
_NAME_MAX_LENGTH = 63
_NAME_PATTERN = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$")


@dataclass(frozen=True)
class PollPolicy:
    """Time budget for a polling loop.

    Attributes:
        timeout: Total budget in seconds.
        step: Seconds deducted from the budget per iteration, and slept
            between iterations.
    """

    timeout: float = 100
    step: float = 5

    def __post_init__(self) -> None:
        if not math.isfinite(self.timeout) or self.timeout <= 0:
            raise ConfigError(f"Timeout must be positive, got {self.timeout}")
        if not math.isfinite(self.step) or self.step <= 0:
            raise ConfigError(f"Poll interval must be positive, got {self.step}")

    @property
    def iterations(self) -> int:
        """Number of iterations the budget allows."""
        return math.ceil(self.timeout / self.step)


@dataclass(frozen=True)
class ToolboxConfig:
    """Immutable settings for a single ktoolbox run.

    Attributes:
        image: Container image for the debug pod.
        command: Entry command run in the container.
        name: Pod name, also used as the selector label value.
        namespace_args: Arguments passed to every client call
            (e.g. ``("-n", "kube-system")``).
        client_binary: Cluster client executable (kubectl or oc).
        verbose: Print every client command and retry diagnostics.
        ready_policy: Budget for waiting on pod readiness.
        cleanup_policy: Budget for deleting the pod.
    """

    image: str
    command: str = DEFAULT_COMMAND
    name: str = field(default_factory=lambda: default_name())
    namespace_args: tuple[str, ...] = ()
    client_binary: str = DEFAULT_CLIENT
    verbose: bool = False
    ready_policy: PollPolicy = field(default_factory=PollPolicy)
    cleanup_policy: PollPolicy = field(default_factory=PollPolicy)


def sanitize_name(raw: str) -> str:
    """Turn an arbitrary string into a DNS-1123 label fragment.

    Args:
        raw: Input string, typically a login name.

    Returns:
        Lowercase string of alphanumerics and dashes (may be empty).
    """
    lowered = raw.lower()
    sanitized = "".join(c if c.isascii() and c.isalnum() else "-" for c in lowered)
    return sanitized.strip("-")


def default_name(user: str | None = None) -> str:
    """Build the default pod name for the invoking user.

    Args:
        user: Login name. Defaults to ``$USER`` or the account name.

    Returns:
        Name in format "toolbox-{user}".
    """
    if user is None:
        user = os.environ.get("USER") or getpass.getuser()
    suffix = sanitize_name(user)
    if not suffix:
        return NAME_PREFIX
    name = f"{NAME_PREFIX}-{suffix}"[:_NAME_MAX_LENGTH]
    return name.rstrip("-")


def validate_name(name: str) -> None:
    """Check that a pod name is a valid resource identifier.

    Raises:
        ConfigError: If the name is not a DNS-1123 label.
    """
    if len(name) > _NAME_MAX_LENGTH or not _NAME_PATTERN.match(name):
        raise ConfigError(
            f"Invalid name '{name}': must be at most {_NAME_MAX_LENGTH} "
            "lowercase alphanumeric characters or '-', "
            "starting and ending with an alphanumeric character"
        )


def build_namespace_args(
    namespace: str | None = None,
    context: str | None = None,
    extra: list[str] | None = None,
) -> tuple[str, ...]:
    """Assemble the scoping arguments passed to every client call."""
    args: list[str] = []
    if context:
        args.extend(["--context", context])
    if namespace:
        args.extend(["-n", namespace])
    args.extend(extra or [])
    return tuple(args)


def resolve_config(
    image: str | None,
    command: str | None = None,
    name: str | None = None,
    namespace: str | None = None,
    context: str | None = None,
    extra_args: list[str] | None = None,
    client_binary: str | None = None,
    verbose: bool = False,
    ready_timeout: float = 100,
    cleanup_timeout: float = 100,
    poll_interval: float = 5,
) -> ToolboxConfig:
    """Validate raw CLI input and build a ToolboxConfig.

    Raises:
        ConfigError: If the image is missing or any value is invalid.
    """
    if not image or not image.strip():
        raise ConfigError("An image is required (use --image or KTOOLBOX_IMAGE)")

    resolved_name = name or default_name()
    validate_name(resolved_name)

    return ToolboxConfig(
        image=image.strip(),
        command=command or DEFAULT_COMMAND,
        name=resolved_name,
        namespace_args=build_namespace_args(namespace, context, extra_args),
        client_binary=client_binary or DEFAULT_CLIENT,
        verbose=verbose,
        ready_policy=PollPolicy(timeout=ready_timeout, step=poll_interval),
        cleanup_policy=PollPolicy(timeout=cleanup_timeout, step=poll_interval),
    )
