"""Unit tests for circular dependency detection."""

from __future__ import annotations

import pytest

from flux_inventory.integrations.kubernetes.models.relationships import (
    EdgeType,
    RelationshipEdge,
    ResourceRef,
)
from flux_inventory.utils.cycles import detect_circular_dependencies, find_cycle_members


def _ks(name: str) -> ResourceRef:
    return ResourceRef(kind="Kustomization", name=name, namespace="flux-system")


def _edge(source: str, target: str, edge_type: EdgeType = EdgeType.DEPENDS_ON) -> RelationshipEdge:
    return RelationshipEdge(source=_ks(source), target=_ks(target), type=edge_type)


def _key(name: str) -> str:
    return f"Kustomization/flux-system/{name}"


@pytest.mark.unit
class TestFindCycleMembers:
    """Tests for find_cycle_members over plain key pairs."""

    def test_empty(self) -> None:
        assert find_cycle_members([]) == set()

    def test_acyclic_chain_and_diamond(self) -> None:
        pairs = [("a", "b"), ("b", "c"), ("a", "d"), ("d", "c"), ("c", "e")]
        assert find_cycle_members(pairs) == set()

    def test_triangle_excludes_disjoint_node(self) -> None:
        pairs = [("A", "B"), ("B", "C"), ("C", "A"), ("D", "E")]
        assert find_cycle_members(pairs) == {"A", "B", "C"}

    def test_self_loop(self) -> None:
        assert find_cycle_members([("a", "a"), ("a", "b")]) == {"a"}

    def test_tail_leading_into_cycle_is_excluded(self) -> None:
        pairs = [("tail", "x"), ("x", "y"), ("y", "x"), ("y", "out")]
        assert find_cycle_members(pairs) == {"x", "y"}

    def test_cycle_member_reached_through_cross_edge(self) -> None:
        # 4 is first reached after 2 has finished; it still closes 2->1->3->4->2
        pairs = [("1", "2"), ("2", "1"), ("1", "3"), ("3", "4"), ("4", "2")]
        assert find_cycle_members(pairs) == {"1", "2", "3", "4"}

    def test_two_separate_cycles(self) -> None:
        pairs = [("a", "b"), ("b", "a"), ("c", "d"), ("d", "c"), ("b", "c")]
        assert find_cycle_members(pairs) == {"a", "b", "c", "d"}

    def test_deep_chain_does_not_recurse(self) -> None:
        depth = 20_000
        pairs = [(str(i), str(i + 1)) for i in range(depth)]
        assert find_cycle_members(pairs) == set()

        pairs.append((str(depth), "0"))
        assert len(find_cycle_members(pairs)) == depth + 1


@pytest.mark.unit
class TestDetectCircularDependencies:
    """Tests for detect_circular_dependencies over relationship edges."""

    def test_acyclic_returns_empty_set(self) -> None:
        edges = [_edge("apps", "infra"), _edge("infra", "crds")]
        assert detect_circular_dependencies(edges) == set()

    def test_returns_resource_keys(self) -> None:
        edges = [
            _edge("a", "b"),
            _edge("b", "c"),
            _edge("c", "a"),
            _edge("d", "a"),
        ]

        assert detect_circular_dependencies(edges) == {_key("a"), _key("b"), _key("c")}

    def test_exclude_edge_types(self) -> None:
        edges = [
            _edge("flux-system", "flux-system", EdgeType.OWNS),
            _edge("apps", "infra"),
        ]

        assert detect_circular_dependencies(edges) == {_key("flux-system")}
        assert detect_circular_dependencies(edges, exclude=(EdgeType.OWNS,)) == set()

    def test_accepts_generators(self) -> None:
        edges = [_edge("a", "b"), _edge("b", "a")]
        assert detect_circular_dependencies(e for e in edges) == {_key("a"), _key("b")}
