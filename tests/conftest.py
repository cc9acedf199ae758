"""Shared fixtures for ktoolbox tests."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from ktoolbox.cluster.base import (
    NOT_FOUND,
    CleanupAttemptResult,
    DeleteAttempt,
    Readiness,
    ResourceStatus,
)
from ktoolbox.config import PollPolicy, ToolboxConfig


class FakeCluster:
    """In-memory cluster client with scripted behavior.

    Args:
        readiness: Readiness reported by successive queries after create;
            the last value repeats.
        resolved_name: Name the "control plane" assigns to created pods.
        leftover: Name of a pod that already exists before the run.
        delete_lag: Number of existence checks a deleted pod stays visible.
        stuck: Deleted pods never go away.
        attach: Called with the pod name instead of a real session; its
            return value is the exit code.
    """

    def __init__(
        self,
        readiness: list[Readiness] | None = None,
        resolved_name: str | None = None,
        leftover: str | None = None,
        delete_lag: int = 0,
        stuck: bool = False,
        attach: Callable[[str], int] | None = None,
    ) -> None:
        self.readiness = list(readiness or [Readiness.READY])
        self.resolved_name = resolved_name
        self.pod: str | None = leftover
        self.delete_lag = delete_lag
        self.stuck = stuck
        self._attach = attach
        self._deleting = False
        self._lag = 0
        self.calls: list[tuple[str, Any]] = []

    def count(self, op: str) -> int:
        return sum(1 for name, _ in self.calls if name == op)

    def gets_between(self, first: str, last: str) -> int:
        """Count get calls between the first `first` op and the first `last` op."""
        ops = [name for name, _ in self.calls]
        start, end = ops.index(first), ops.index(last)
        return ops[start:end].count("get")

    def create(self, spec: dict[str, Any]) -> bool:
        self.calls.append(("create", spec))
        self.pod = self.resolved_name or spec["metadata"]["name"]
        self._deleting = False
        return True

    def get(self, selector: str) -> ResourceStatus:
        self.calls.append(("get", selector))
        if self.pod is None:
            return NOT_FOUND
        if self._deleting and not self.stuck:
            if self._lag == 0:
                self.pod = None
                self._deleting = False
                return NOT_FOUND
            self._lag -= 1
        readiness = self.readiness[0]
        if len(self.readiness) > 1:
            self.readiness.pop(0)
        return ResourceStatus(found=True, readiness=readiness, resolved_name=self.pod)

    def delete(self, selector: str) -> DeleteAttempt:
        self.calls.append(("delete", selector))
        if self.pod is None:
            return DeleteAttempt(CleanupAttemptResult.NOT_FOUND)
        if not self._deleting:
            self._deleting = True
            self._lag = self.delete_lag
        return DeleteAttempt(CleanupAttemptResult.DELETED)

    def attach(self, name: str) -> int:
        self.calls.append(("attach", name))
        if self._attach is not None:
            return self._attach(name)
        return 0


@pytest.fixture
def fast_policy() -> PollPolicy:
    """Default 100s/5s budget; tests never really sleep."""
    return PollPolicy(timeout=100, step=5)


@pytest.fixture
def no_sleep() -> Callable[[float], None]:
    """A sleep replacement that records requested delays."""
    delays: list[float] = []

    def sleep(seconds: float) -> None:
        delays.append(seconds)

    sleep.delays = delays  # type: ignore[attr-defined]
    return sleep


@pytest.fixture
def config() -> ToolboxConfig:
    """Configuration for the standard debug scenario."""
    return ToolboxConfig(image="debian:latest", name="toolbox-alice")


@pytest.fixture
def make_cluster() -> type[FakeCluster]:
    """Factory for in-memory cluster clients."""
    return FakeCluster
