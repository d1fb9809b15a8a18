"""Unit tests for relationship mapping."""

from __future__ import annotations

from typing import Any

import pytest

from flux_inventory.integrations.kubernetes.models.flux import FluxResource
from flux_inventory.integrations.kubernetes.models.relationships import EdgeType
from flux_inventory.utils.relationships import (
    build_relationship_graph,
    build_relationship_map,
    get_helm_release_source_ref,
    get_kustomization_source_ref,
    get_resource_edges,
    normalize_resources,
)

# =============================================================================
# Sample objects
# =============================================================================

GIT_REPO = {
    "kind": "GitRepository",
    "metadata": {"name": "podinfo", "namespace": "flux-system"},
    "spec": {"url": "https://github.com/stefanprodan/podinfo"},
}

HELM_REPO = {
    "kind": "HelmRepository",
    "metadata": {"name": "bitnami", "namespace": "flux-system"},
    "spec": {"url": "https://charts.bitnami.com/bitnami"},
}

INFRA_KS = {
    "kind": "Kustomization",
    "metadata": {"name": "infra", "namespace": "flux-system"},
    "spec": {"sourceRef": {"kind": "GitRepository", "name": "podinfo"}},
}

APPS_KS = {
    "kind": "Kustomization",
    "metadata": {"name": "apps", "namespace": "flux-system"},
    "spec": {
        "sourceRef": {"kind": "GitRepository", "name": "podinfo"},
        "dependsOn": [{"name": "infra"}],
    },
    "status": {
        "inventory": {
            "entries": [
                {"id": "apps_podinfo_apps_Deployment", "v": "v1"},
                {"id": "bogus"},
            ]
        }
    },
}

NGINX_HR = {
    "kind": "HelmRelease",
    "metadata": {"name": "nginx", "namespace": "web"},
    "spec": {
        "chart": {
            "spec": {
                "chart": "nginx",
                "sourceRef": {
                    "kind": "HelmRepository",
                    "name": "bitnami",
                    "namespace": "flux-system",
                },
            }
        },
        "dependsOn": [{"name": "cert-manager", "namespace": "cert-manager"}],
    },
}


def _edge_tuples(edges: list[Any]) -> list[tuple[str, str, str, str | None]]:
    return [(e.from_id, e.type.value, e.to_id, e.label) for e in edges]


# =============================================================================
# Reference extraction
# =============================================================================


@pytest.mark.unit
class TestSourceRefs:
    """Tests for the public source reference getters."""

    def test_kustomization_source_ref_defaults_namespace(self) -> None:
        ref = get_kustomization_source_ref(FluxResource.from_k8s_object(INFRA_KS))

        assert ref is not None
        assert ref.key == "GitRepository/flux-system/podinfo"

    def test_kustomization_without_source_ref(self) -> None:
        obj = {"kind": "Kustomization", "metadata": {"name": "x", "namespace": "ns"}}
        assert get_kustomization_source_ref(FluxResource.from_k8s_object(obj)) is None

    def test_helm_release_chart_source(self) -> None:
        ref = get_helm_release_source_ref(FluxResource.from_k8s_object(NGINX_HR))

        assert ref is not None
        assert ref.key == "HelmRepository/flux-system/bitnami"

    def test_helm_release_chart_ref(self) -> None:
        obj = {
            "kind": "HelmRelease",
            "metadata": {"name": "podinfo", "namespace": "apps"},
            "spec": {"chartRef": {"kind": "OCIRepository", "name": "podinfo-chart"}},
        }

        ref = get_helm_release_source_ref(FluxResource.from_k8s_object(obj))

        assert ref is not None
        assert ref.key == "OCIRepository/apps/podinfo-chart"

    def test_getter_on_other_kind_returns_none(self) -> None:
        assert get_helm_release_source_ref(FluxResource.from_k8s_object(INFRA_KS)) is None


@pytest.mark.unit
class TestResourceEdges:
    """Tests for per-kind edge extraction."""

    def test_kustomization_edges(self) -> None:
        edges = get_resource_edges(FluxResource.from_k8s_object(APPS_KS))

        assert _edge_tuples(edges) == [
            (
                "Kustomization/flux-system/apps",
                "source",
                "GitRepository/flux-system/podinfo",
                "uses source",
            ),
            (
                "Kustomization/flux-system/apps",
                "depends_on",
                "Kustomization/flux-system/infra",
                "depends on",
            ),
            (
                "Kustomization/flux-system/apps",
                "owns",
                "Deployment/apps/podinfo",
                "manages",
            ),
        ]

    def test_inventory_edges_can_be_disabled(self) -> None:
        edges = get_resource_edges(FluxResource.from_k8s_object(APPS_KS), include_inventory=False)

        assert EdgeType.OWNS not in {e.type for e in edges}
        assert len(edges) == 2

    def test_helm_release_edges(self) -> None:
        edges = get_resource_edges(FluxResource.from_k8s_object(NGINX_HR))

        assert _edge_tuples(edges) == [
            (
                "HelmRelease/web/nginx",
                "source",
                "HelmRepository/flux-system/bitnami",
                "uses chart from",
            ),
            (
                "HelmRelease/web/nginx",
                "depends_on",
                "HelmRelease/cert-manager/cert-manager",
                "depends on",
            ),
        ]

    def test_image_policy_edge(self) -> None:
        obj = {
            "kind": "ImagePolicy",
            "metadata": {"name": "podinfo", "namespace": "flux-system"},
            "spec": {"imageRepositoryRef": {"name": "podinfo"}},
        }

        edges = get_resource_edges(FluxResource.from_k8s_object(obj))

        assert _edge_tuples(edges) == [
            (
                "ImagePolicy/flux-system/podinfo",
                "uses",
                "ImageRepository/flux-system/podinfo",
                "scans",
            )
        ]

    def test_image_update_automation_defaults_to_git_repository(self) -> None:
        obj = {
            "kind": "ImageUpdateAutomation",
            "metadata": {"name": "auto", "namespace": "flux-system"},
            "spec": {"sourceRef": {"name": "fleet"}},
        }

        edges = get_resource_edges(FluxResource.from_k8s_object(obj))

        assert _edge_tuples(edges) == [
            (
                "ImageUpdateAutomation/flux-system/auto",
                "uses",
                "GitRepository/flux-system/fleet",
                "commits to",
            )
        ]

    def test_alert_edges_skip_wildcards(self) -> None:
        obj = {
            "kind": "Alert",
            "metadata": {"name": "on-call", "namespace": "flux-system"},
            "spec": {
                "providerRef": {"name": "slack"},
                "eventSources": [
                    {"kind": "Kustomization", "name": "apps"},
                    {"kind": "HelmRelease", "name": "*", "namespace": "web"},
                    {"kind": "GitRepository", "name": "podinfo", "namespace": "other"},
                ],
            },
        }

        edges = get_resource_edges(FluxResource.from_k8s_object(obj))

        assert _edge_tuples(edges) == [
            ("Alert/flux-system/on-call", "notifies", "Provider/flux-system/slack", "sends to"),
            ("Alert/flux-system/on-call", "watches", "Kustomization/flux-system/apps", "watches"),
            ("Alert/flux-system/on-call", "watches", "GitRepository/other/podinfo", "watches"),
        ]

    def test_receiver_edges(self) -> None:
        obj = {
            "kind": "Receiver",
            "metadata": {"name": "github", "namespace": "flux-system"},
            "spec": {
                "type": "github",
                "resources": [
                    {"kind": "GitRepository", "name": "podinfo"},
                    {"kind": "GitRepository", "name": ""},
                ],
            },
        }

        edges = get_resource_edges(FluxResource.from_k8s_object(obj))

        assert _edge_tuples(edges) == [
            (
                "Receiver/flux-system/github",
                "triggers",
                "GitRepository/flux-system/podinfo",
                "can trigger",
            )
        ]

    @pytest.mark.parametrize("obj", [GIT_REPO, HELM_REPO])
    def test_sources_have_no_edges(self, obj: dict[str, Any]) -> None:
        assert get_resource_edges(FluxResource.from_k8s_object(obj)) == []

    def test_malformed_spec_yields_no_edges(self) -> None:
        obj = {
            "kind": "Kustomization",
            "metadata": {"name": "broken", "namespace": "flux-system"},
            "spec": {"sourceRef": "not-a-mapping", "dependsOn": 5},
        }

        assert get_resource_edges(FluxResource.from_k8s_object(obj)) == []


# =============================================================================
# Graph construction
# =============================================================================


@pytest.mark.unit
class TestBuildRelationshipMap:
    """Tests for build_relationship_map."""

    def test_accepts_plural_keys_and_raw_dicts(self) -> None:
        edges = build_relationship_map(
            {
                "kustomizations": [INFRA_KS],
                "gitRepositories": [GIT_REPO],
                "helmReleases": None,
            }
        )

        assert _edge_tuples(edges) == [
            (
                "Kustomization/flux-system/infra",
                "source",
                "GitRepository/flux-system/podinfo",
                "uses source",
            )
        ]

    def test_invalid_raw_items_are_skipped(self) -> None:
        edges = build_relationship_map(
            {
                "Kustomization": [
                    {"metadata": {"name": 5}, "spec": {}},
                    "not-an-object",
                    INFRA_KS,
                ]
            }
        )

        assert [e.from_id for e in edges] == ["Kustomization/flux-system/infra"]

    def test_empty_snapshot(self) -> None:
        assert build_relationship_map({}) == []

    def test_dangling_targets_are_kept(self) -> None:
        edges = build_relationship_map({"HelmRelease": [NGINX_HR]})

        assert [e.to_id for e in edges] == [
            "HelmRepository/flux-system/bitnami",
            "HelmRelease/cert-manager/cert-manager",
        ]

    def test_is_idempotent(self) -> None:
        snapshot = {
            "Kustomization": [INFRA_KS, APPS_KS],
            "HelmRelease": [NGINX_HR],
            "GitRepository": [GIT_REPO],
        }

        first = build_relationship_map(snapshot)
        second = build_relationship_map(snapshot)

        assert first == second
        assert _edge_tuples(first) == _edge_tuples(second)

    def test_order_follows_kind_then_resource(self) -> None:
        edges = build_relationship_map(
            {"HelmRelease": [NGINX_HR], "Kustomization": [INFRA_KS]}
        )

        assert [e.source.kind for e in edges] == ["HelmRelease", "HelmRelease", "Kustomization"]


@pytest.mark.unit
class TestBuildRelationshipGraph:
    """Tests for build_relationship_graph."""

    def test_includes_isolated_nodes_and_dangling_edges(self) -> None:
        graph = build_relationship_graph(
            {
                "Kustomization": [INFRA_KS, APPS_KS],
                "GitRepository": [GIT_REPO],
                "HelmRepository": [HELM_REPO],
            }
        )

        assert list(graph.nodes) == [
            "Kustomization/flux-system/infra",
            "Kustomization/flux-system/apps",
            "GitRepository/flux-system/podinfo",
            "HelmRepository/flux-system/bitnami",
        ]
        assert graph.adjacency["HelmRepository/flux-system/bitnami"] == []
        assert [e.to_id for e in graph.dangling_edges] == ["Deployment/apps/podinfo"]
        assert len(graph.incoming("GitRepository/flux-system/podinfo")) == 2
        assert len(graph.outgoing("Kustomization/flux-system/apps")) == 3

    def test_uses_given_edges(self) -> None:
        resources = {"Kustomization": [APPS_KS]}
        edges = build_relationship_map(resources, include_inventory=False)

        graph = build_relationship_graph(resources, edges)

        assert graph.edges == edges

    def test_normalize_resources_fills_missing_kind(self) -> None:
        obj = {"metadata": {"name": "podinfo", "namespace": "flux-system"}}

        normalized = normalize_resources({"gitRepositories": [obj]})

        assert normalized["GitRepository"][0].kind == "GitRepository"
        assert normalized["GitRepository"][0].key == "GitRepository/flux-system/podinfo"

    def test_normalize_resources_skips_invalid_metadata(self) -> None:
        normalized = normalize_resources(
            {
                "Kustomization": [
                    {"metadata": {"name": 5}},
                    {"metadata": {"name": "apps", "namespace": 7}},
                    {"metadata": {"name": "infra", "labels": "x"}},
                ]
            }
        )

        assert [r.name for r in normalized["Kustomization"]] == ["infra"]
