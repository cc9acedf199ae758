"""Typer CLI for ktoolbox."""

from __future__ import annotations

import json
import shlex
import signal
import sys
from typing import Annotated

import click
import typer

from ktoolbox import __version__, status
from ktoolbox.config import (
    DEFAULT_CLIENT,
    DEFAULT_COMMAND,
    ToolboxConfig,
    resolve_config,
)
from ktoolbox.exceptions import ConfigError, ToolboxError

app = typer.Typer(
    name="ktoolbox",
    help="Run a throwaway privileged debug pod and attach to it.",
    add_completion=False,
    context_settings={"allow_interspersed_args": False},
)

HELP_TEXT = """ktoolbox - Run a throwaway privileged debug pod in a Kubernetes cluster

USAGE:
    ktoolbox --image IMAGE [OPTIONS] [-- CLIENT_ARGS...]

OPTIONS:
    -i, --image IMAGE       Container image for the debug pod (required)
                            Can also be set with KTOOLBOX_IMAGE
    -c, --command CMD       Command to run in the container (default: bash)
    -N, --name NAME         Pod name (default: toolbox-$USER)
                            Can also be set with KTOOLBOX_NAME
    -n, --namespace NS      Namespace to create the pod in
    --context CONTEXT       Kubeconfig context to use
    --client BINARY         Cluster client to run (default: kubectl)
                            Can also be set with KTOOLBOX_CLIENT
    --ready-timeout SECS    How long to wait for the pod to be ready (default: 100)
    --cleanup-timeout SECS  How long to keep trying to delete the pod (default: 100)
    --poll-interval SECS    Seconds between status checks (default: 5)
    -v, --verbose           Print every client command and retry
    --dry-run               Print the pod manifest and settings, then exit
    -V, --version           Show ktoolbox version and exit
    -h, --help              Show this help message and exit

CLIENT ARGS:
    All arguments after -- are passed to every client call,
    e.g. '-- --kubeconfig ~/.kube/staging'.

EXAMPLES:
    ktoolbox -i debian:latest                   Debian shell in the current namespace
    ktoolbox -i nicolaka/netshoot -n kube-system
    ktoolbox -i alpine -c sh --client oc        Use oc against OpenShift

SECURITY:
    The pod runs privileged. It is deleted when the session ends, on errors
    and on Ctrl-C, and any leftover from a crashed run is removed at start."""


def version_callback(value: bool) -> None:
    """Print version information and exit."""
    if value:
        typer.echo(f"ktoolbox {__version__}")
        raise typer.Exit()


def show_help(err: bool = False) -> None:
    """Show the usage text."""
    typer.echo(HELP_TEXT, err=err)


def help_callback(value: bool) -> None:
    """Print help and exit."""
    if value:
        show_help()
        raise typer.Exit()


def _exit_on_signal(signum: int, frame: object) -> None:
    """Turn a termination signal into SystemExit so cleanup scopes unwind."""
    sys.exit(128 + signum)


def install_signal_handlers() -> None:
    """Route SIGINT, SIGTERM and SIGHUP through normal interpreter exit."""
    for name in ("SIGINT", "SIGTERM", "SIGHUP"):
        signum = getattr(signal, name, None)
        if signum is not None:
            signal.signal(signum, _exit_on_signal)


def show_dry_run(config: ToolboxConfig) -> None:
    """Print the resolved settings and the pod manifest."""
    from ktoolbox.cluster.kubectl import build_pod_spec, selector_for

    typer.echo("Dry-run mode: no resources will be created")
    typer.echo(f"  image: {config.image}")
    typer.echo(f"  command: {config.command}")
    typer.echo(f"  name: {config.name}")
    typer.echo(f"  selector: {selector_for(config.name)}")
    typer.echo(f"  client: {config.client_binary}")
    typer.echo(f"  client args: {shlex.join(config.namespace_args) or 'none'}")
    typer.echo(
        f"  ready timeout: {config.ready_policy.timeout:g}s "
        f"(every {config.ready_policy.step:g}s)"
    )
    typer.echo(
        f"  cleanup timeout: {config.cleanup_policy.timeout:g}s "
        f"(every {config.cleanup_policy.step:g}s)"
    )
    typer.echo(f"  verbose: {config.verbose}")
    typer.echo("")
    typer.echo(json.dumps(build_pod_spec(config), indent=2))


@app.command()
def main(
    image: Annotated[
        str | None,
        typer.Option(
            "--image", "-i",
            envvar="KTOOLBOX_IMAGE",
            help="Container image for the debug pod.",
        ),
    ] = None,
    command: Annotated[
        str,
        typer.Option("--command", "-c", help="Command to run in the container."),
    ] = DEFAULT_COMMAND,
    name: Annotated[
        str | None,
        typer.Option(
            "--name", "-N",
            envvar="KTOOLBOX_NAME",
            help="Pod name (default: toolbox-$USER).",
        ),
    ] = None,
    namespace: Annotated[
        str | None,
        typer.Option("--namespace", "-n", help="Namespace to create the pod in."),
    ] = None,
    context: Annotated[
        str | None,
        typer.Option("--context", help="Kubeconfig context to use."),
    ] = None,
    client: Annotated[
        str,
        typer.Option(
            "--client",
            envvar="KTOOLBOX_CLIENT",
            help="Cluster client binary (kubectl or oc).",
        ),
    ] = DEFAULT_CLIENT,
    ready_timeout: Annotated[
        float,
        typer.Option("--ready-timeout", help="Seconds to wait for readiness."),
    ] = 100,
    cleanup_timeout: Annotated[
        float,
        typer.Option("--cleanup-timeout", help="Seconds to keep deleting the pod."),
    ] = 100,
    poll_interval: Annotated[
        float,
        typer.Option("--poll-interval", help="Seconds between status checks."),
    ] = 5,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Print every client command."),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Print the pod manifest, then exit."),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version", "-V",
            callback=version_callback,
            is_eager=True,
            help="Show ktoolbox version and exit.",
        ),
    ] = False,
    help_opt: Annotated[
        bool,
        typer.Option(
            "--help", "-h",
            callback=help_callback,
            is_eager=True,
            help="Show this help message and exit.",
        ),
    ] = False,
    client_args: Annotated[
        list[str] | None,
        typer.Argument(help="Arguments passed to every client call (after --)."),
    ] = None,
) -> None:
    """Run a throwaway privileged debug pod and attach to it."""
    try:
        config = resolve_config(
            image=image,
            command=command,
            name=name,
            namespace=namespace,
            context=context,
            extra_args=client_args,
            client_binary=client,
            verbose=verbose,
            ready_timeout=ready_timeout,
            cleanup_timeout=cleanup_timeout,
            poll_interval=poll_interval,
        )
    except ConfigError as e:
        if not image:
            show_help(err=True)
            typer.echo("", err=True)
        status.fail(str(e))
        raise typer.Exit(1) from None

    if dry_run:
        show_dry_run(config)
        raise typer.Exit()

    from ktoolbox.cluster.kubectl import KubectlClient
    from ktoolbox.lifecycle.controller import LifecycleController

    install_signal_handlers()

    controller = LifecycleController(config, KubectlClient.from_config(config))
    try:
        exit_code = controller.run()
    except ToolboxError as e:
        status.fail(str(e))
        raise typer.Exit(1) from None

    raise typer.Exit(exit_code)


def run() -> None:
    """Console script entry point.

    Usage errors (unknown flags, bad values) exit with 1 like every other
    fatal condition, instead of Click's default of 2.
    """
    try:
        exit_code = app(standalone_mode=False)
    except click.UsageError as e:
        e.show()
        sys.exit(1)
    except click.Abort:
        typer.echo("Aborted!", err=True)
        sys.exit(1)
    sys.exit(exit_code or 0)
