"""Kubernetes service managers."""

from flux_inventory.services.kubernetes.base import K8sBaseManager
from flux_inventory.services.kubernetes.cache import CacheKey, ResourceCache
from flux_inventory.services.kubernetes.inventory_manager import (
    InventoryManager,
    get_inventory_data,
)
from flux_inventory.services.kubernetes.multicluster_manager import (
    MultiClusterInventoryManager,
)

__all__ = [
    "CacheKey",
    "InventoryManager",
    "K8sBaseManager",
    "MultiClusterInventoryManager",
    "ResourceCache",
    "get_inventory_data",
]
