"""Flux inventory models.

Kustomizations record the objects they applied in
``.status.inventory.entries[]`` as ``{id, v}`` pairs, where ``id`` packs the
object coordinates as ``<namespace>_<name>_<group>_<kind>``.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from flux_inventory.integrations.kubernetes.models.relationships import ResourceRef


class InventoryEntry(BaseModel):
    """Raw inventory entry as stored by Flux."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str = Field(default="", description="Packed resource coordinates")
    v: str = Field(default="", alias="version", description="API version of the object")


class InventoryCoordinates(BaseModel):
    """Coordinates decoded from an inventory id."""

    model_config = ConfigDict(frozen=True)

    namespace: str
    name: str
    group: str
    kind: str


class InventoryResource(InventoryCoordinates):
    """A decoded inventory entry."""

    id: str
    version: str = ""

    @property
    def api_version(self) -> str:
        """``group/version``, or just ``version`` for the core group."""
        if not self.group:
            return self.version
        if not self.version:
            return self.group
        return f"{self.group}/{self.version}"

    def to_ref(self) -> ResourceRef:
        """Convert to a reference; an empty namespace means cluster-scoped."""
        return ResourceRef(
            kind=self.kind,
            name=self.name,
            namespace=self.namespace or None,
            api_version=self.api_version or None,
        )
