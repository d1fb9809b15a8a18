"""Base utilities for fluxinv commands.

Provides common Typer options and error handling shared by all commands.
"""

from __future__ import annotations

from typing import Annotated, NoReturn

import typer
from rich.console import Console

from flux_inventory.cli.formatters import OutputFormat
from flux_inventory.integrations.kubernetes.exceptions import (
    KubernetesAuthError,
    KubernetesConnectionError,
    KubernetesError,
    KubernetesNotFoundError,
    KubernetesTimeoutError,
    KubernetesValidationError,
)

# Shared console instances; diagnostics go to stderr so JSON/YAML stays parseable
console = Console()
err_console = Console(stderr=True)


# =============================================================================
# Common Typer Option Annotations
# =============================================================================

OutputOption = Annotated[
    OutputFormat,
    typer.Option(
        "--output",
        "-o",
        help="Output format: table, json, or yaml",
        case_sensitive=False,
    ),
]

ContextOption = Annotated[
    str | None,
    typer.Option(
        "--context",
        "-c",
        help="Configured cluster name or kubeconfig context (defaults to the active one)",
    ),
]

NamespacesOption = Annotated[
    list[str] | None,
    typer.Option(
        "--namespace",
        "-n",
        help="Only fetch resources from this namespace (repeatable)",
    ),
]

IncludeInventoryOption = Annotated[
    bool,
    typer.Option(
        "--inventory/--no-inventory",
        help="Include 'owns' edges from status.inventory",
    ),
]

ClustersOption = Annotated[
    list[str] | None,
    typer.Option(
        "--cluster",
        help="Configured cluster to query (repeatable, defaults to all)",
    ),
]


# =============================================================================
# Error Handling
# =============================================================================


def handle_k8s_error(error: KubernetesError) -> NoReturn:
    """Handle Kubernetes errors with user-friendly output.

    Args:
        error: The Kubernetes error to handle.

    Raises:
        typer.Exit: Always exits with code 1.
    """
    if isinstance(error, KubernetesConnectionError):
        err_console.print("[red]Error:[/red] Cannot connect to Kubernetes cluster")
        err_console.print(f"  {error.message}")
        if error.original_error:
            err_console.print(f"  Cause: {error.original_error}")
        err_console.print(
            "\n[dim]Hint: Check that your kubeconfig is valid and the cluster is reachable.[/dim]"
        )

    elif isinstance(error, KubernetesAuthError):
        err_console.print("[red]Error:[/red] Authentication/authorization failed")
        err_console.print(f"  {error.message}")
        err_console.print(
            "\n[dim]Hint: Flux CRDs must be listable cluster-wide by your credentials.[/dim]"
        )

    elif isinstance(error, KubernetesNotFoundError):
        err_console.print("[red]Error:[/red] Resource not found")
        err_console.print(f"  {error.message}")

    elif isinstance(error, KubernetesValidationError):
        err_console.print("[red]Error:[/red] Validation failed")
        err_console.print(f"  {error.message}")

    elif isinstance(error, KubernetesTimeoutError):
        err_console.print("[red]Error:[/red] Operation timed out")
        err_console.print(f"  {error.message}")
        err_console.print(
            "\n[dim]Hint: Try increasing FLUXINV_K8S_FETCH_TIMEOUT or FLUXINV_K8S_TIMEOUT.[/dim]"
        )

    else:
        err_console.print(f"[red]Error:[/red] {error.message}")
        if error.status_code:
            err_console.print(f"  HTTP Status: {error.status_code}")

    raise typer.Exit(1)


def report_fetch_errors(errors: dict[str, str], cluster: str | None = None) -> None:
    """Print a warning for every resource type that failed to list."""
    where = f" on {cluster}" if cluster else ""
    for resource_type, message in errors.items():
        err_console.print(
            f"[yellow]Warning:[/yellow] could not list {resource_type}{where}: {message}"
        )
