"""Aggregated inventory snapshot of one cluster."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from flux_inventory.integrations.kubernetes.models.flux import FluxResource
from flux_inventory.integrations.kubernetes.models.relationships import RelationshipEdge


class InventoryData(BaseModel):
    """Flux resources, relationships and fetch errors of one cluster.

    ``resource_map`` holds every requested resource type, in fetch order;
    a type that failed to list maps to an empty list and has an entry in
    ``errors``.
    """

    model_config = ConfigDict(extra="forbid")

    cluster: str = Field(description="Cluster the snapshot was taken from")
    resource_map: dict[str, list[FluxResource]] = Field(
        default_factory=dict, description="Resource type -> fetched resources"
    )
    relationships: list[RelationshipEdge] = Field(
        default_factory=list, description="Edges between resources"
    )
    all_resources: list[FluxResource] = Field(
        default_factory=list, description="All fetched resources, in type order"
    )
    errors: dict[str, str] = Field(
        default_factory=dict, description="Resource type -> fetch error"
    )

    @property
    def resource_count(self) -> int:
        return len(self.all_resources)
