"""Relationship graph models.

Resources are identified by their ``(kind, namespace, name)`` composite key,
rendered as ``Kind/namespace/name``. Edges point from the consumer to the
thing it depends on.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

CLUSTER_SCOPED = "cluster-scoped"


def resource_key(kind: str, namespace: str | None, name: str) -> str:
    """Build the composite identity key of a resource."""
    return f"{kind}/{namespace or CLUSTER_SCOPED}/{name}"


class EdgeType(StrEnum):
    """Kinds of relationships between Flux resources."""

    SOURCE = "source"
    DEPENDS_ON = "depends_on"
    USES = "uses"
    NOTIFIES = "notifies"
    WATCHES = "watches"
    TRIGGERS = "triggers"
    OWNS = "owns"


class ResourceRef(BaseModel):
    """Reference to a resource that may or may not have been fetched."""

    model_config = ConfigDict(extra="ignore")

    kind: str = Field(description="Resource kind")
    name: str = Field(description="Resource name")
    namespace: str | None = Field(default=None, description="Namespace, None if cluster-scoped")
    api_version: str | None = Field(default=None, description="API version, if declared")
    match_labels: dict[str, str] | None = Field(
        default=None, description="Label selector for wildcard references"
    )

    @property
    def key(self) -> str:
        """Composite identity key."""
        return resource_key(self.kind, self.namespace, self.name)


class RelationshipEdge(BaseModel):
    """A directed edge from a consumer resource to one of its dependencies."""

    model_config = ConfigDict(extra="ignore")

    source: ResourceRef = Field(description="Referencing resource")
    target: ResourceRef = Field(description="Referenced resource")
    type: EdgeType = Field(description="Relationship type")
    label: str | None = Field(default=None, description="Human-readable label")

    @property
    def from_id(self) -> str:
        return self.source.key

    @property
    def to_id(self) -> str:
        return self.target.key


class RelationshipGraph(BaseModel):
    """Nodes, edges and adjacency for one fetched snapshot.

    ``nodes`` holds every fetched resource, including those without any
    edge. Edge targets that are not among the nodes are dangling.
    """

    nodes: dict[str, ResourceRef] = Field(default_factory=dict, description="Fetched resources")
    edges: list[RelationshipEdge] = Field(default_factory=list, description="All edges")

    def is_resolved(self, edge: RelationshipEdge) -> bool:
        """Whether the edge target was part of the fetched snapshot."""
        return edge.to_id in self.nodes

    @property
    def dangling_edges(self) -> list[RelationshipEdge]:
        """Edges whose target was not fetched."""
        return [edge for edge in self.edges if not self.is_resolved(edge)]

    @property
    def adjacency(self) -> dict[str, list[RelationshipEdge]]:
        """Map every node to the edges touching it, in edge order.

        Fetched nodes come first (possibly with an empty list), followed by
        edge endpoints that were not fetched.
        """
        result: dict[str, list[RelationshipEdge]] = {key: [] for key in self.nodes}
        for edge in self.edges:
            result.setdefault(edge.from_id, []).append(edge)
            if edge.to_id != edge.from_id:
                result.setdefault(edge.to_id, []).append(edge)
        return result

    def outgoing(self, key: str) -> list[RelationshipEdge]:
        """Edges leaving a node."""
        return [edge for edge in self.edges if edge.from_id == key]

    def incoming(self, key: str) -> list[RelationshipEdge]:
        """Edges arriving at a node."""
        return [edge for edge in self.edges if edge.to_id == key]
