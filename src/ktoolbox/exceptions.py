"""Exception types for ktoolbox."""

from __future__ import annotations


class ToolboxError(Exception):
    """Base exception for ktoolbox errors."""

    pass


class ConfigError(ToolboxError):
    """Invalid or missing configuration."""

    pass


class ClusterError(ToolboxError):
    """A cluster client command failed."""

    pass


class ClientNotInstalledError(ClusterError):
    """The cluster client binary is not installed."""

    pass


class ClientTimeoutError(ClusterError):
    """The cluster client command timed out."""

    pass


class ReadinessTimeoutError(ToolboxError):
    """The debug pod did not become ready within its budget."""

    pass


class CleanupTimeoutError(ToolboxError):
    """The debug pod could not be removed within its budget.

    This is the most severe failure: a privileged pod may have been left
    running in the cluster.
    """

    pass


class SessionError(ToolboxError):
    """The interactive session could not be started."""

    pass
