"""CLI commands for Flux inventories.

Provides commands that aggregate a cluster's Flux resources and show them,
their relationships, dependency cycles and health.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import TYPE_CHECKING, Annotated, Any

import typer

from flux_inventory.cli.commands.base import (
    ClustersOption,
    ContextOption,
    IncludeInventoryOption,
    NamespacesOption,
    OutputOption,
    console,
    err_console,
    handle_k8s_error,
    report_fetch_errors,
)
from flux_inventory.cli.formatters import OutputFormat, get_formatter
from flux_inventory.integrations.kubernetes.exceptions import KubernetesError
from flux_inventory.integrations.kubernetes.models.relationships import EdgeType
from flux_inventory.utils.cycles import detect_circular_dependencies
from flux_inventory.utils.health import build_health_map, get_resource_health, get_resource_status
from flux_inventory.utils.inventory import parse_inventory_id
from flux_inventory.utils.relationships import build_relationship_graph

if TYPE_CHECKING:
    from flux_inventory.integrations.kubernetes.models.flux import FluxResource
    from flux_inventory.integrations.kubernetes.models.snapshot import InventoryData
    from flux_inventory.services.kubernetes.inventory_manager import InventoryManager
    from flux_inventory.services.kubernetes.multicluster_manager import (
        MultiClusterInventoryManager,
    )

# =============================================================================
# Column Definitions
# =============================================================================

RESOURCE_COLUMNS = [
    ("kind", "Kind"),
    ("namespace", "Namespace"),
    ("name", "Name"),
    ("status", "Status"),
    ("health", "Health"),
    ("revision", "Revision"),
    ("age", "Age"),
]

RELATIONSHIP_COLUMNS = [
    ("from", "From"),
    ("type", "Type"),
    ("to", "To"),
    ("label", "Label"),
    ("resolved", "Resolved"),
]

CYCLE_COLUMNS = [
    ("key", "Resource"),
    ("status", "Status"),
]

OVERVIEW_COLUMNS = [
    ("type", "Type"),
    ("total", "Total"),
    ("healthy", "Healthy"),
    ("failed", "Failed"),
    ("suspended", "Suspended"),
    ("error", "Fetch Error"),
]

CLUSTER_COLUMNS = [
    ("cluster", "Cluster"),
    ("context", "Context"),
    ("resources", "Resources"),
    ("relationships", "Relationships"),
    ("cycles", "In Cycles"),
    ("failed_types", "Failed Types"),
    ("error", "Error"),
]

INVENTORY_ID_COLUMNS = [
    ("id", "ID"),
    ("namespace", "Namespace"),
    ("name", "Name"),
    ("group", "Group"),
    ("kind", "Kind"),
]

KindOption = Annotated[
    list[str] | None,
    typer.Option(
        "--kind",
        "-k",
        help="Only show resources of this kind (repeatable)",
    ),
]


def _resource_row(resource: FluxResource) -> dict[str, Any]:
    artifact = resource.status.artifact
    revision = resource.status.last_applied_revision or (artifact.revision if artifact else None)
    return {
        "kind": resource.kind,
        "namespace": resource.namespace,
        "name": resource.name,
        "status": get_resource_status(resource).value,
        "health": get_resource_health(resource.status.conditions, resource.suspended).value,
        "revision": revision,
        "age": resource.age,
    }


def _cycle_members(data: InventoryData, include_inventory: bool) -> set[str]:
    # Flux's bootstrap Kustomization lists itself in its own inventory
    exclude = () if include_inventory else (EdgeType.OWNS,)
    return detect_circular_dependencies(data.relationships, exclude=exclude)


# =============================================================================
# Command Registration
# =============================================================================


def register_inventory_commands(
    app: typer.Typer,
    get_manager: Callable[[], InventoryManager],
    get_multicluster_manager: Callable[[], MultiClusterInventoryManager],
) -> None:
    """Register Flux inventory CLI commands."""

    def fetch(context: str | None, namespaces: list[str] | None = None) -> InventoryData:
        manager = get_manager()
        data = asyncio.run(manager.get_inventory_data(context, namespaces=namespaces))
        report_fetch_errors(data.errors)
        return data

    @app.command("inventory")
    def inventory(
        context: ContextOption = None,
        namespaces: NamespacesOption = None,
        kinds: KindOption = None,
        output: OutputOption = OutputFormat.TABLE,
    ) -> None:
        """List every Flux resource of a cluster with its status.

        Examples:
            fluxinv inventory
            fluxinv inventory -c production -n flux-system
            fluxinv inventory -k Kustomization -k HelmRelease -o json
        """
        try:
            data = fetch(context, namespaces)
        except KubernetesError as e:
            handle_k8s_error(e)

        resources = [r for r in data.all_resources if not kinds or r.kind in kinds]
        formatter = get_formatter(output, console)
        formatter.format_list(
            [_resource_row(r) for r in resources],
            RESOURCE_COLUMNS,
            title=f"Flux resources ({data.cluster})",
        )

    @app.command("relationships")
    def relationships(
        context: ContextOption = None,
        namespaces: NamespacesOption = None,
        include_inventory: IncludeInventoryOption = True,
        dangling: Annotated[
            bool,
            typer.Option("--dangling", help="Only show edges whose target was not fetched"),
        ] = False,
        output: OutputOption = OutputFormat.TABLE,
    ) -> None:
        """Show the relationships between Flux resources.

        Edges point from the consumer to its dependency.

        Examples:
            fluxinv relationships
            fluxinv relationships --no-inventory
            fluxinv relationships --dangling -o yaml
        """
        try:
            data = fetch(context, namespaces)
        except KubernetesError as e:
            handle_k8s_error(e)

        edges = [
            edge
            for edge in data.relationships
            if include_inventory or edge.type != EdgeType.OWNS
        ]
        graph = build_relationship_graph(data.resource_map, edges)
        rows = [
            {
                "from": edge.from_id,
                "type": edge.type.value,
                "to": edge.to_id,
                "label": edge.label,
                "resolved": graph.is_resolved(edge),
            }
            for edge in graph.edges
            if not dangling or not graph.is_resolved(edge)
        ]
        formatter = get_formatter(output, console)
        formatter.format_list(rows, RELATIONSHIP_COLUMNS, title=f"Relationships ({data.cluster})")

    @app.command("cycles")
    def cycles(
        context: ContextOption = None,
        namespaces: NamespacesOption = None,
        include_inventory: Annotated[
            bool,
            typer.Option(
                "--inventory/--no-inventory",
                help="Also follow 'owns' edges from status.inventory",
            ),
        ] = False,
        output: OutputOption = OutputFormat.TABLE,
    ) -> None:
        """Find Flux resources that take part in circular dependencies.

        Exits with code 2 when a cycle is found.

        Examples:
            fluxinv cycles
            fluxinv cycles -c staging -o json
        """
        try:
            data = fetch(context, namespaces)
        except KubernetesError as e:
            handle_k8s_error(e)

        members = _cycle_members(data, include_inventory)
        health = build_health_map(data.all_resources)
        rows = [
            {"key": key, "status": health[key].value if key in health else None}
            for key in sorted(members)
        ]

        formatter = get_formatter(output, console)
        if not rows and output == OutputFormat.TABLE:
            formatter.format_success(f"No circular dependencies found ({data.cluster})")
            return
        formatter.format_list(rows, CYCLE_COLUMNS, title=f"Circular dependencies ({data.cluster})")
        if rows:
            raise typer.Exit(2)

    @app.command("overview")
    def overview(
        context: ContextOption = None,
        output: OutputOption = OutputFormat.TABLE,
    ) -> None:
        """Show per-type health counts of a cluster.

        Examples:
            fluxinv overview
            fluxinv overview -c production -o json
        """
        try:
            manager = get_manager()
            summaries = asyncio.run(manager.get_overview(context))
        except KubernetesError as e:
            handle_k8s_error(e)

        formatter = get_formatter(output, console)
        formatter.format_list(
            [s.model_dump() for s in summaries],
            OVERVIEW_COLUMNS,
            title="Flux health overview",
        )

    @app.command("clusters")
    def clusters(
        cluster_names: ClustersOption = None,
        output: OutputOption = OutputFormat.TABLE,
    ) -> None:
        """Aggregate the inventories of all configured clusters.

        Examples:
            fluxinv clusters
            fluxinv clusters --cluster staging --cluster production -o yaml
        """
        try:
            manager = get_multicluster_manager()
            result = asyncio.run(manager.get_inventory_data(cluster_names or None))
        except ValueError as e:
            err_console.print(f"[red]Error:[/red] {e}")
            raise typer.Exit(1) from None
        except KubernetesError as e:
            handle_k8s_error(e)

        rows = []
        for entry in result.clusters:
            data = entry.data
            rows.append(
                {
                    "cluster": entry.cluster,
                    "context": entry.context,
                    "resources": len(data.all_resources) if data else None,
                    "relationships": len(data.relationships) if data else None,
                    "cycles": len(_cycle_members(data, False)) if data else None,
                    "failed_types": sorted(data.errors) if data else [],
                    "error": entry.error,
                }
            )

        formatter = get_formatter(output, console)
        formatter.format_list(rows, CLUSTER_COLUMNS, title="Clusters", data=result)
        if result.failed:
            raise typer.Exit(1)

    @app.command("parse-id")
    def parse_id(
        inventory_ids: Annotated[
            list[str],
            typer.Argument(help="Inventory ids, e.g. default_redis__Service"),
        ],
        output: OutputOption = OutputFormat.TABLE,
    ) -> None:
        """Decode Flux inventory ids into their coordinates.

        Examples:
            fluxinv parse-id flux-system_source-controller_apps_Deployment
            fluxinv parse-id default_redis__Service _monitoring__Namespace -o json
        """
        rows = []
        invalid = []
        for inventory_id in inventory_ids:
            coordinates = parse_inventory_id(inventory_id)
            if coordinates is None:
                invalid.append(inventory_id)
                continue
            rows.append({"id": inventory_id, **coordinates.model_dump()})

        formatter = get_formatter(output, console)
        if rows:
            formatter.format_list(rows, INVENTORY_ID_COLUMNS, title="Inventory ids")
        for inventory_id in invalid:
            err_console.print(f"[red]Error:[/red] not a valid inventory id: {inventory_id}")
        if invalid:
            raise typer.Exit(1)
