"""Circular dependency detection over relationship edges.

Node keys are mapped to dense indices and the traversal runs over index
arrays with an explicit work stack, so deep dependency chains never hit
the interpreter's recursion limit.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable

from flux_inventory.integrations.kubernetes.models.relationships import (
    EdgeType,
    RelationshipEdge,
)


def find_cycle_members(pairs: Iterable[tuple[str, str]]) -> set[str]:
    """Return every node that lies on at least one directed cycle.

    Depth-first traversal with Tarjan's low-link bookkeeping: a node is on
    a cycle iff its strongly connected component has more than one member
    or it has an edge to itself.

    Args:
        pairs: ``(from, to)`` node key pairs.
    """
    index_of: dict[str, int] = {}
    keys: list[str] = []
    adjacency: list[list[int]] = []
    self_loops: set[int] = set()

    def intern(key: str) -> int:
        idx = index_of.get(key)
        if idx is None:
            idx = len(keys)
            index_of[key] = idx
            keys.append(key)
            adjacency.append([])
        return idx

    for from_key, to_key in pairs:
        u = intern(from_key)
        v = intern(to_key)
        adjacency[u].append(v)
        if u == v:
            self_loops.add(u)

    count = len(keys)
    order = [-1] * count
    low = [0] * count
    on_stack = [False] * count
    stack: list[int] = []
    counter = 0
    members: set[str] = set()

    for root in range(count):
        if order[root] != -1:
            continue

        order[root] = low[root] = counter
        counter += 1
        stack.append(root)
        on_stack[root] = True
        work: list[tuple[int, int]] = [(root, 0)]

        while work:
            node, next_edge = work[-1]
            neighbors = adjacency[node]

            if next_edge < len(neighbors):
                work[-1] = (node, next_edge + 1)
                neighbor = neighbors[next_edge]
                if order[neighbor] == -1:
                    order[neighbor] = low[neighbor] = counter
                    counter += 1
                    stack.append(neighbor)
                    on_stack[neighbor] = True
                    work.append((neighbor, 0))
                elif on_stack[neighbor]:
                    low[node] = min(low[node], order[neighbor])
                continue

            work.pop()
            if work:
                parent = work[-1][0]
                low[parent] = min(low[parent], low[node])

            if low[node] == order[node]:
                component: list[int] = []
                while True:
                    member = stack.pop()
                    on_stack[member] = False
                    component.append(member)
                    if member == node:
                        break
                if len(component) > 1 or node in self_loops:
                    members.update(keys[m] for m in component)

    return members


def detect_circular_dependencies(
    edges: Iterable[RelationshipEdge],
    *,
    exclude: Collection[EdgeType] = (),
) -> set[str]:
    """Keys of every resource that participates in a circular dependency.

    Args:
        edges: Relationship edges of one snapshot.
        exclude: Edge types to ignore, e.g. ``EdgeType.OWNS`` since the
            bootstrap Kustomization lists itself in its own inventory.
    """
    return find_cycle_members(
        (edge.from_id, edge.to_id) for edge in edges if edge.type not in exclude
    )
