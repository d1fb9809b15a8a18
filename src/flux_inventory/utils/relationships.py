"""Relationship mapping between Flux resources.

Relationship types:
- Kustomization -> source (GitRepository, OCIRepository, Bucket) via ``spec.sourceRef``
- Kustomization -> Kustomization via ``spec.dependsOn``
- HelmRelease -> chart source via ``spec.chart.spec.sourceRef`` or ``spec.chartRef``
- HelmRelease -> HelmRelease via ``spec.dependsOn``
- ImagePolicy -> ImageRepository via ``spec.imageRepositoryRef``
- ImageUpdateAutomation -> GitRepository via ``spec.sourceRef``
- Alert -> Provider via ``spec.providerRef``
- Alert -> watched resources via ``spec.eventSources``
- Receiver -> resources it can trigger via ``spec.resources``
- any resource -> objects listed in ``status.inventory``

Every edge points from the consumer to its dependency. Targets are not
required to exist in the fetched set.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any

import structlog

from flux_inventory.integrations.kubernetes.models.flux import (
    AlertSpec,
    CrossNamespaceSourceReference,
    FluxResource,
    FluxSpec,
    HelmReleaseSpec,
    ImagePolicySpec,
    ImageUpdateAutomationSpec,
    KustomizationSpec,
    NamespacedObjectReference,
    ReceiverSpec,
    SourceSpec,
)
from flux_inventory.integrations.kubernetes.models.relationships import (
    EdgeType,
    RelationshipEdge,
    RelationshipGraph,
    ResourceRef,
)
from flux_inventory.utils.inventory import parse_inventory

logger = structlog.get_logger()

WILDCARD = "*"

# Plural keys accepted in place of kinds.
RESOURCE_KEY_ALIASES: dict[str, str] = {
    "kustomizations": "Kustomization",
    "helmReleases": "HelmRelease",
    "gitRepositories": "GitRepository",
    "helmRepositories": "HelmRepository",
    "helmCharts": "HelmChart",
    "ociRepositories": "OCIRepository",
    "buckets": "Bucket",
    "alerts": "Alert",
    "providers": "Provider",
    "receivers": "Receiver",
    "imagePolicies": "ImagePolicy",
    "imageRepositories": "ImageRepository",
    "imageUpdateAutomations": "ImageUpdateAutomation",
}


def normalize_resources(
    resources_by_kind: Mapping[str, Iterable[FluxResource | Mapping[str, Any]] | None],
) -> dict[str, list[FluxResource]]:
    """Coerce a kind -> resources mapping into ``FluxResource`` lists.

    Keys may be kinds or their plural aliases. Raw dicts are parsed, and
    resources without a kind take it from their key. Items that are neither
    resources nor valid Kubernetes objects are logged and skipped.
    """
    normalized: dict[str, list[FluxResource]] = {}
    for key, items in resources_by_kind.items():
        kind = RESOURCE_KEY_ALIASES.get(key, key)
        bucket = normalized.setdefault(kind, [])
        for index, item in enumerate(items or ()):
            if isinstance(item, FluxResource):
                bucket.append(item if item.kind else item.model_copy(update={"kind": kind}))
                continue
            if not isinstance(item, Mapping):
                logger.warning("skipping_invalid_item", resource_type=kind, index=index)
                continue
            try:
                bucket.append(FluxResource.from_k8s_object(dict(item), kind=kind))
            except ValueError as e:
                logger.warning(
                    "skipping_invalid_item",
                    resource_type=kind,
                    index=index,
                    error=str(e),
                )
    return normalized


def _owner_ref(resource: FluxResource) -> ResourceRef:
    return ResourceRef(kind=resource.kind, name=resource.name, namespace=resource.namespace)


def _edge(
    resource: FluxResource,
    target: ResourceRef,
    edge_type: EdgeType,
    label: str,
) -> RelationshipEdge:
    return RelationshipEdge(source=_owner_ref(resource), target=target, type=edge_type, label=label)


# =============================================================================
# Reference extraction
# =============================================================================


def _source_ref(
    resource: FluxResource,
    ref: CrossNamespaceSourceReference | None,
    default_kind: str = "",
) -> ResourceRef | None:
    if ref is None or not ref.name:
        return None
    return ResourceRef(
        kind=ref.kind or default_kind,
        name=ref.name,
        namespace=ref.namespace or resource.namespace,
        api_version=ref.api_version,
    )


def _helm_chart_source(
    resource: FluxResource, view: HelmReleaseSpec
) -> ResourceRef | None:
    # chart.spec.sourceRef wins over chartRef; Flux rejects releases setting both
    ref = view.chart.spec.source_ref if view.chart and view.chart.spec else None
    return _source_ref(resource, ref or view.chart_ref)


def get_kustomization_source_ref(resource: FluxResource) -> ResourceRef | None:
    """Source referenced by a Kustomization's ``spec.sourceRef``."""
    view = resource.spec_view()
    if not isinstance(view, KustomizationSpec):
        return None
    return _source_ref(resource, view.source_ref)


def get_helm_release_source_ref(resource: FluxResource) -> ResourceRef | None:
    """Chart source of a HelmRelease (``spec.chart.spec.sourceRef`` or ``spec.chartRef``)."""
    view = resource.spec_view()
    if not isinstance(view, HelmReleaseSpec):
        return None
    return _helm_chart_source(resource, view)


def get_depends_on_refs(
    resource: FluxResource,
    depends_on: Iterable[NamespacedObjectReference],
) -> list[ResourceRef]:
    """``dependsOn`` entries; they always name objects of the same kind."""
    return [
        ResourceRef(
            kind=resource.kind,
            name=dep.name,
            namespace=dep.namespace or resource.namespace,
        )
        for dep in depends_on
        if dep.name
    ]


def _kustomization_edges(resource: FluxResource, view: KustomizationSpec) -> list[RelationshipEdge]:
    edges: list[RelationshipEdge] = []
    target = _source_ref(resource, view.source_ref)
    if target is not None:
        edges.append(_edge(resource, target, EdgeType.SOURCE, "uses source"))
    for dep in get_depends_on_refs(resource, view.depends_on):
        edges.append(_edge(resource, dep, EdgeType.DEPENDS_ON, "depends on"))
    return edges


def _helm_release_edges(resource: FluxResource, view: HelmReleaseSpec) -> list[RelationshipEdge]:
    edges: list[RelationshipEdge] = []
    target = _helm_chart_source(resource, view)
    if target is not None:
        edges.append(_edge(resource, target, EdgeType.SOURCE, "uses chart from"))
    for dep in get_depends_on_refs(resource, view.depends_on):
        edges.append(_edge(resource, dep, EdgeType.DEPENDS_ON, "depends on"))
    return edges


def _image_policy_edges(resource: FluxResource, view: ImagePolicySpec) -> list[RelationshipEdge]:
    ref = view.image_repository_ref
    if ref is None or not ref.name:
        return []
    target = ResourceRef(
        kind="ImageRepository",
        name=ref.name,
        namespace=ref.namespace or resource.namespace,
    )
    return [_edge(resource, target, EdgeType.USES, "scans")]


def _image_update_automation_edges(
    resource: FluxResource, view: ImageUpdateAutomationSpec
) -> list[RelationshipEdge]:
    target = _source_ref(resource, view.source_ref, default_kind="GitRepository")
    if target is None:
        return []
    return [_edge(resource, target, EdgeType.USES, "commits to")]


def _alert_edges(resource: FluxResource, view: AlertSpec) -> list[RelationshipEdge]:
    edges: list[RelationshipEdge] = []
    if view.provider_ref is not None and view.provider_ref.name:
        # providerRef is a local reference
        target = ResourceRef(
            kind="Provider", name=view.provider_ref.name, namespace=resource.namespace
        )
        edges.append(_edge(resource, target, EdgeType.NOTIFIES, "sends to"))
    for source in view.event_sources:
        if not source.name or source.name == WILDCARD:
            continue
        target = ResourceRef(
            kind=source.kind,
            name=source.name,
            namespace=source.namespace or resource.namespace,
            api_version=source.api_version,
            match_labels=source.match_labels,
        )
        edges.append(_edge(resource, target, EdgeType.WATCHES, "watches"))
    return edges


def _receiver_edges(resource: FluxResource, view: ReceiverSpec) -> list[RelationshipEdge]:
    edges: list[RelationshipEdge] = []
    for ref in view.resources:
        if not ref.name:
            continue
        target = ResourceRef(
            kind=ref.kind,
            name=ref.name,
            namespace=ref.namespace or resource.namespace,
            api_version=ref.api_version,
            match_labels=ref.match_labels,
        )
        edges.append(_edge(resource, target, EdgeType.TRIGGERS, "can trigger"))
    return edges


def _no_edges(resource: FluxResource, view: SourceSpec) -> list[RelationshipEdge]:
    return []


EDGE_EXTRACTORS: dict[type[FluxSpec], Callable[[FluxResource, Any], list[RelationshipEdge]]] = {
    SourceSpec: _no_edges,
    KustomizationSpec: _kustomization_edges,
    HelmReleaseSpec: _helm_release_edges,
    ImagePolicySpec: _image_policy_edges,
    ImageUpdateAutomationSpec: _image_update_automation_edges,
    AlertSpec: _alert_edges,
    ReceiverSpec: _receiver_edges,
}


def _inventory_edges(resource: FluxResource) -> list[RelationshipEdge]:
    return [
        _edge(resource, entry.to_ref(), EdgeType.OWNS, "manages")
        for entry in parse_inventory(resource.status.inventory)
    ]


def get_resource_edges(
    resource: FluxResource,
    *,
    include_inventory: bool = True,
) -> list[RelationshipEdge]:
    """All outgoing edges of a single resource."""
    view = resource.spec_view()
    edges = EDGE_EXTRACTORS[type(view)](resource, view)
    if include_inventory:
        edges.extend(_inventory_edges(resource))
    return edges


# =============================================================================
# Graph construction
# =============================================================================


def build_relationship_map(
    resources_by_kind: Mapping[str, Iterable[FluxResource | Mapping[str, Any]] | None],
    *,
    include_inventory: bool = True,
) -> list[RelationshipEdge]:
    """Build the relationship edges of a fetched snapshot.

    Args:
        resources_by_kind: Kind (or plural alias) -> resources.
        include_inventory: Emit ``owns`` edges for ``status.inventory`` entries.

    Returns:
        Edges in kind order, then resource order, then field order.
    """
    edges: list[RelationshipEdge] = []
    for resources in normalize_resources(resources_by_kind).values():
        for resource in resources:
            edges.extend(get_resource_edges(resource, include_inventory=include_inventory))
    return edges


def build_relationship_graph(
    resources_by_kind: Mapping[str, Iterable[FluxResource | Mapping[str, Any]] | None],
    edges: list[RelationshipEdge] | None = None,
    *,
    include_inventory: bool = True,
) -> RelationshipGraph:
    """Build a graph with every fetched resource as a node.

    Args:
        resources_by_kind: Kind (or plural alias) -> resources.
        edges: Previously built edges for the same snapshot; built here if None.
        include_inventory: Emit ``owns`` edges when building edges here.
    """
    normalized = normalize_resources(resources_by_kind)
    nodes: dict[str, ResourceRef] = {}
    for resources in normalized.values():
        for resource in resources:
            nodes.setdefault(resource.key, _owner_ref(resource))

    if edges is None:
        edges = build_relationship_map(normalized, include_inventory=include_inventory)

    return RelationshipGraph(nodes=nodes, edges=list(edges))
