"""Multi-cluster Flux inventory manager.

Aggregates the Flux inventories of several configured clusters. Every
cluster is queried through its own per-context API client, so clusters
are fetched concurrently without switching the process-wide kubeconfig
context.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from flux_inventory.integrations.kubernetes.models.multicluster import (
    ClusterInventory,
    MultiClusterInventoryResult,
)
from flux_inventory.services.kubernetes.base import K8sBaseManager
from flux_inventory.services.kubernetes.inventory_manager import InventoryManager

if TYPE_CHECKING:
    from flux_inventory.integrations.kubernetes.client import KubernetesClient


class MultiClusterInventoryManager(K8sBaseManager):
    """Manager for inventory aggregation across clusters.

    A cluster that cannot be reached (or whose kubeconfig context cannot
    be loaded) is reported with an error; the other clusters' results are
    unaffected.
    """

    _entity_name: str = "multicluster"

    def __init__(
        self,
        client: KubernetesClient,
        inventory_manager: InventoryManager | None = None,
    ) -> None:
        super().__init__(client)
        self._inventory = inventory_manager or InventoryManager(client)

    # -----------------------------------------------------------------------
    # Cluster Resolution
    # -----------------------------------------------------------------------

    def get_cluster_names(self) -> list[str]:
        """Get all configured cluster names.

        Returns:
            List of cluster names from the configuration.
        """
        return list(self.config.clusters.keys())

    def _resolve_clusters(self, clusters: list[str] | None) -> list[str]:
        """Resolve cluster list to configured cluster names.

        Args:
            clusters: Specific cluster names, or None for all configured clusters.

        Returns:
            List of validated cluster names.

        Raises:
            ValueError: If specified cluster names are not in configuration.
        """
        configured = self.get_cluster_names()

        if not configured:
            raise ValueError(
                "No clusters configured. Add clusters to the fluxinv configuration file."
            )

        if clusters is None:
            return configured

        unknown = set(clusters) - set(configured)
        if unknown:
            raise ValueError(
                f"Unknown clusters: {', '.join(sorted(unknown))}. "
                f"Configured: {', '.join(sorted(configured))}"
            )

        return clusters

    # -----------------------------------------------------------------------
    # Inventory
    # -----------------------------------------------------------------------

    async def get_inventory_data(
        self,
        clusters: list[str] | None = None,
    ) -> MultiClusterInventoryResult:
        """Aggregate the inventories of several clusters concurrently.

        Args:
            clusters: Specific cluster names, or None for all configured.

        Returns:
            Per-cluster inventories in the order the clusters were given.

        Raises:
            ValueError: If no clusters are configured or a name is unknown.
        """
        target_clusters = self._resolve_clusters(clusters)
        self._log.info("fetching_multi_cluster_inventory", clusters=target_clusters)

        results = await asyncio.gather(
            *(self._get_single_cluster_inventory(name) for name in target_clusters)
        )

        successful = sum(1 for r in results if r.success)
        result = MultiClusterInventoryResult(
            clusters=list(results),
            total=len(results),
            successful=successful,
            failed=len(results) - successful,
        )
        self._log.info(
            "multi_cluster_inventory_complete",
            total=result.total,
            successful=result.successful,
        )
        return result

    async def _get_single_cluster_inventory(self, cluster_name: str) -> ClusterInventory:
        """Aggregate one cluster, converting failures into an error entry."""
        cluster_cfg = self.config.clusters[cluster_name]
        try:
            data = await self._inventory.get_inventory_data(cluster_name)
        except Exception as e:
            self._log.warning("cluster_inventory_failed", cluster=cluster_name, error=str(e))
            return ClusterInventory(
                cluster=cluster_name,
                context=cluster_cfg.context,
                error=str(e),
            )

        # Every type failing usually means the cluster is unreachable.
        if data.errors and len(data.errors) == len(data.resource_map):
            return ClusterInventory(
                cluster=cluster_name,
                context=cluster_cfg.context,
                data=data,
                error="All resource types failed to list",
            )

        return ClusterInventory(cluster=cluster_name, context=cluster_cfg.context, data=data)
