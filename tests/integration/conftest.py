"""Pytest fixtures and configuration for integration tests."""

from __future__ import annotations

import os
import secrets
import shutil
import subprocess

import pytest

# Small image with a shell; can be overridden via environment variable
DEFAULT_TEST_IMAGE = "docker.io/library/busybox:latest"


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for integration tests."""
    config.addinivalue_line(
        "markers",
        "integration: integration tests requiring real infrastructure",
    )
    config.addinivalue_line(
        "markers",
        "kubernetes: tests requiring kubernetes cluster (Kind or OpenShift)",
    )


@pytest.fixture(scope="session")
def cluster_cli() -> str | None:
    """Return the available cluster client, preferring kubectl."""
    for cli in ("kubectl", "oc"):
        if shutil.which(cli) is not None:
            return cli
    return None


@pytest.fixture(scope="session")
def kubernetes_available(cluster_cli: str | None) -> bool:
    """Check if a Kubernetes cluster is accessible."""
    if cluster_cli is None:
        return False

    try:
        result = subprocess.run(
            [cluster_cli, "cluster-info"],
            capture_output=True,
            text=True,
            timeout=30,
        )
        return result.returncode == 0
    except (subprocess.TimeoutExpired, OSError):
        return False


@pytest.fixture
def require_kubernetes(kubernetes_available: bool) -> None:
    """Skip test if kubernetes cluster is not available."""
    if not kubernetes_available:
        pytest.skip("kubernetes cluster not available")


@pytest.fixture
def unique_name() -> str:
    """Generate a unique pod name for testing."""
    return f"toolbox-test-{secrets.token_hex(4)}"


@pytest.fixture(scope="session")
def test_image() -> str:
    """Get the test image name.

    Can be overridden with KTOOLBOX_TEST_IMAGE environment variable.
    """
    return os.environ.get("KTOOLBOX_TEST_IMAGE", DEFAULT_TEST_IMAGE)


@pytest.fixture(scope="session")
def test_namespace() -> str | None:
    """Namespace for test pods (None for the current namespace).

    Can be set with KTOOLBOX_TEST_NAMESPACE.
    """
    return os.environ.get("KTOOLBOX_TEST_NAMESPACE")
