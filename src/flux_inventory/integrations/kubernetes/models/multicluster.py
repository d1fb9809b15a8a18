"""Multi-cluster aggregation result models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from flux_inventory.integrations.kubernetes.models.snapshot import InventoryData


class ClusterInventory(BaseModel):
    """Inventory result for a single cluster."""

    model_config = ConfigDict(extra="forbid")

    cluster: str = Field(description="Cluster name from configuration")
    context: str = Field(default="", description="Kubeconfig context name")
    data: InventoryData | None = Field(default=None, description="Aggregated inventory")
    error: str | None = Field(default=None, description="Error message if aggregation failed")

    @property
    def success(self) -> bool:
        return self.data is not None and self.error is None


class MultiClusterInventoryResult(BaseModel):
    """Aggregated inventory result for multiple clusters."""

    model_config = ConfigDict(extra="forbid")

    clusters: list[ClusterInventory] = Field(
        default_factory=list, description="Per-cluster inventory"
    )
    total: int = Field(default=0, description="Total number of clusters queried")
    successful: int = Field(default=0, description="Clusters whose inventory was fetched")
    failed: int = Field(default=0, description="Clusters that could not be queried")
