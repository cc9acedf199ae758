"""Debug pod lifecycle: readiness polling, cleanup and the controller."""

from ktoolbox.lifecycle.cleanup import CleanupGuard, cleanup
from ktoolbox.lifecycle.controller import LifecycleController, LifecycleState
from ktoolbox.lifecycle.poller import PollOutcome, WaitResult, wait_until_ready

__all__ = [
    "CleanupGuard",
    "LifecycleController",
    "LifecycleState",
    "PollOutcome",
    "WaitResult",
    "cleanup",
    "wait_until_ready",
]
