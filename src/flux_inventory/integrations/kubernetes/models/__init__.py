"""Models for Flux resources, inventories, relationships and health."""

from flux_inventory.integrations.kubernetes.models.base import K8sEntityBase
from flux_inventory.integrations.kubernetes.models.flux import (
    SPEC_VIEWS,
    AlertSpec,
    FluxCondition,
    FluxResource,
    FluxResourceStatus,
    FluxSpec,
    HelmReleaseSpec,
    ImagePolicySpec,
    ImageUpdateAutomationSpec,
    KustomizationSpec,
    ReceiverSpec,
    SourceSpec,
)
from flux_inventory.integrations.kubernetes.models.health import (
    HealthStatus,
    ResourceStatus,
    ResourceTypeHealthSummary,
)
from flux_inventory.integrations.kubernetes.models.inventory import (
    InventoryCoordinates,
    InventoryEntry,
    InventoryResource,
)
from flux_inventory.integrations.kubernetes.models.multicluster import (
    ClusterInventory,
    MultiClusterInventoryResult,
)
from flux_inventory.integrations.kubernetes.models.relationships import (
    EdgeType,
    RelationshipEdge,
    RelationshipGraph,
    ResourceRef,
    resource_key,
)
from flux_inventory.integrations.kubernetes.models.snapshot import InventoryData

__all__ = [
    "SPEC_VIEWS",
    "AlertSpec",
    "ClusterInventory",
    "EdgeType",
    "FluxCondition",
    "FluxResource",
    "FluxResourceStatus",
    "FluxSpec",
    "HealthStatus",
    "HelmReleaseSpec",
    "ImagePolicySpec",
    "ImageUpdateAutomationSpec",
    "InventoryCoordinates",
    "InventoryData",
    "InventoryEntry",
    "InventoryResource",
    "K8sEntityBase",
    "KustomizationSpec",
    "MultiClusterInventoryResult",
    "ReceiverSpec",
    "RelationshipEdge",
    "RelationshipGraph",
    "ResourceRef",
    "ResourceStatus",
    "ResourceTypeHealthSummary",
    "SourceSpec",
    "resource_key",
]
