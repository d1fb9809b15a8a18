"""Main CLI entry point using Typer."""

from __future__ import annotations

from pathlib import Path

import typer
import yaml
from rich.console import Console

from flux_inventory import __version__
from flux_inventory.cli.commands import register_inventory_commands
from flux_inventory.integrations.kubernetes.client import KubernetesClient
from flux_inventory.integrations.kubernetes.config import KubernetesPluginConfig
from flux_inventory.logging.config import configure_logging
from flux_inventory.services.kubernetes.inventory_manager import InventoryManager
from flux_inventory.services.kubernetes.multicluster_manager import (
    MultiClusterInventoryManager,
)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "fluxinv" / "config.yaml"

app = typer.Typer(
    name="fluxinv",
    help="Inspect Flux CD inventories, relationships and health across clusters.",
    add_completion=True,
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)


class ClientProvider:
    """Builds the Kubernetes client on first use.

    Commands such as ``parse-id`` never touch a cluster, so neither the
    configuration nor the kubeconfig is loaded until a manager is needed.
    """

    def __init__(self, config_path: Path = DEFAULT_CONFIG_PATH) -> None:
        self.config_path = config_path
        self._client: KubernetesClient | None = None

    def load_config(self) -> KubernetesPluginConfig:
        try:
            return KubernetesPluginConfig.from_file(self.config_path)
        except (OSError, ValueError, yaml.YAMLError) as e:
            err_console.print(f"[red]Error:[/red] Invalid configuration {self.config_path}: {e}")
            raise typer.Exit(1) from None

    def client(self) -> KubernetesClient:
        if self._client is None:
            self._client = KubernetesClient(self.load_config())
        return self._client

    def inventory_manager(self) -> InventoryManager:
        return InventoryManager(self.client())

    def multicluster_manager(self) -> MultiClusterInventoryManager:
        return MultiClusterInventoryManager(self.client())


provider = ClientProvider()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"fluxinv version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output.",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug mode.",
    ),
    config: Path = typer.Option(
        DEFAULT_CONFIG_PATH,
        "--config",
        envvar="FLUXINV_CONFIG",
        help="Path to the fluxinv YAML configuration.",
    ),
) -> None:
    """fluxinv - Flux CD inventory explorer."""
    configure_logging(verbose=verbose, debug=debug)
    provider.config_path = config


register_inventory_commands(app, provider.inventory_manager, provider.multicluster_manager)


if __name__ == "__main__":
    app()
