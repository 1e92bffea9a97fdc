"""Breadth-first shortest paths over a materialized subgraph."""

from collections import deque

from opsgraph.models.graph import Edge, Path, Subgraph


def find_path(
    graph: Subgraph,
    source_id: str,
    target_id: str,
    *,
    stable_order: bool = False,
) -> Path | None:
    """Find a shortest path by edge count.

    Directed edges are only followed from source to target; undirected
    edges are followed both ways. Among equally short paths the one found
    first in adjacency order wins. With stable_order, adjacency lists are
    sorted by edge id so the choice no longer depends on fetch order.

    Returns None when either endpoint is absent or no path exists.
    """
    if source_id not in graph or target_id not in graph:
        return None
    if source_id == target_id:
        return Path(nodes=[graph.nodes[source_id]], edges=[], distance=0)

    # visited on enqueue so every node is expanded at most once
    parents: dict[str, tuple[str, Edge] | None] = {source_id: None}
    queue = deque([source_id])
    while queue:
        current = queue.popleft()
        neighbors = graph.neighbors(current)
        if stable_order:
            neighbors = sorted(neighbors, key=lambda pair: (pair[1].id, pair[0]))
        for neighbor_id, edge in neighbors:
            if neighbor_id in parents:
                continue
            parents[neighbor_id] = (current, edge)
            if neighbor_id == target_id:
                return _reconstruct(graph, parents, target_id)
            queue.append(neighbor_id)
    return None


def _reconstruct(
    graph: Subgraph, parents: dict[str, tuple[str, Edge] | None], target_id: str
) -> Path:
    node_ids = [target_id]
    edges: list[Edge] = []
    step = parents[target_id]
    while step is not None:
        previous_id, edge = step
        edges.append(edge)
        node_ids.append(previous_id)
        step = parents[previous_id]
    node_ids.reverse()
    edges.reverse()
    return Path(
        nodes=[graph.nodes[node_id] for node_id in node_ids],
        edges=edges,
        distance=len(edges),
        total_strength=sum(edge.weight or 1 for edge in edges),
    )
