"""Colored status lines for ktoolbox.

All output goes to stderr so that stdout stays free for the attached
session and for ``--dry-run`` manifests. Writes are best-effort: after a
hangup the terminal is gone, and cleanup must still run.
"""

from __future__ import annotations

from typing import Any

import typer


def _emit(message: str, **style: Any) -> None:
    try:
        typer.secho(message, err=True, **style)
    except OSError:
        # stderr closed or detached (EIO/EPIPE); the line is dropped.
        pass


def info(message: str) -> None:
    """Print a plain progress line."""
    _emit(message)


def ok(message: str) -> None:
    """Print a success line."""
    _emit(f"[ OK ] {message}", fg=typer.colors.GREEN)


def warn(message: str) -> None:
    """Print a warning line."""
    _emit(f"[WARN] {message}", fg=typer.colors.YELLOW)


def fail(message: str) -> None:
    """Print a failure line."""
    _emit(f"[FAIL] {message}", fg=typer.colors.RED, bold=True)


def debug(message: str) -> None:
    """Print a verbose diagnostic line.

    Callers decide whether verbose output is enabled.
    """
    _emit(message, dim=True)
