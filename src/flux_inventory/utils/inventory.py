"""Flux inventory id parsing.

An inventory id packs an object's coordinates as
``<namespace>_<name>_<group>_<kind>``. The group is empty for core API
objects, which yields a double underscore (``default_redis__Service``),
and the namespace is empty for cluster-scoped objects
(``_monitoring__Namespace``). Namespaces and names are DNS-1123 labels and
never contain underscores, so splitting on ``_`` is unambiguous for ids
Flux produces.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from flux_inventory.integrations.kubernetes.models.inventory import (
    InventoryCoordinates,
    InventoryEntry,
    InventoryResource,
)

ID_SEPARATOR = "_"
ID_PARTS = 4


def parse_inventory_id(inventory_id: Any) -> InventoryCoordinates | None:
    """Decode an inventory id into resource coordinates.

    Ids with more than four parts are parsed right to left: the last three
    parts are kind, group and name, and whatever remains is rejoined as the
    namespace. Valid Kubernetes ids never take this path.

    Args:
        inventory_id: Packed id, e.g. ``flux-system_source-controller_apps_Deployment``.

    Returns:
        The decoded coordinates, or None if the id has fewer than four parts
        or is not a string.
    """
    if not isinstance(inventory_id, str):
        return None

    parts = inventory_id.split(ID_SEPARATOR)
    if len(parts) < ID_PARTS:
        return None

    if len(parts) == ID_PARTS:
        namespace, name, group, kind = parts
    else:
        *namespace_parts, name, group, kind = parts
        namespace = ID_SEPARATOR.join(namespace_parts)

    return InventoryCoordinates(namespace=namespace, name=name, group=group, kind=kind)


def _entry_fields(entry: Any) -> tuple[Any, Any]:
    if isinstance(entry, InventoryEntry):
        return entry.id, entry.v
    if isinstance(entry, Mapping):
        return entry.get("id"), entry.get("v", entry.get("version", ""))
    return None, None


def parse_inventory(entries: Iterable[Any] | None = None) -> list[InventoryResource]:
    """Decode a list of inventory entries.

    Accepts Flux's ``{id, v}`` dicts, ``{id, version}`` dicts or
    ``InventoryEntry`` models. Entries that fail to parse are dropped; the
    order of the remaining entries is preserved.
    """
    resources: list[InventoryResource] = []
    for entry in entries or ():
        entry_id, version = _entry_fields(entry)
        coordinates = parse_inventory_id(entry_id)
        if coordinates is None:
            continue
        resources.append(
            InventoryResource(
                id=entry_id,
                version=version if isinstance(version, str) else "",
                **coordinates.model_dump(),
            )
        )
    return resources
