"""Pure functions over fetched Flux resources."""

from flux_inventory.utils.cycles import detect_circular_dependencies, find_cycle_members
from flux_inventory.utils.health import (
    build_health_map,
    get_resource_health,
    get_resource_status,
    summarize_health,
)
from flux_inventory.utils.inventory import parse_inventory, parse_inventory_id
from flux_inventory.utils.relationships import (
    build_relationship_graph,
    build_relationship_map,
    get_resource_edges,
    normalize_resources,
)

__all__ = [
    "build_health_map",
    "build_relationship_graph",
    "build_relationship_map",
    "detect_circular_dependencies",
    "find_cycle_members",
    "get_resource_edges",
    "get_resource_health",
    "get_resource_status",
    "normalize_resources",
    "parse_inventory",
    "parse_inventory_id",
    "summarize_health",
]
