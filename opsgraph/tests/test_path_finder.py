"""Tests for breadth-first path finding."""

from opsgraph.analysis.graph_builder import build_path_graph
from opsgraph.analysis.path_finder import find_path
from opsgraph.models.graph import Edge, EdgeKind, Node, Subgraph
from opsgraph.models.refs import EntityKind


def _graph(edges: list[tuple[str, str, str, bool]]) -> Subgraph:
    """Build a subdomain graph from (edge id, source, target, directed) tuples."""
    graph = Subgraph()
    for edge_id, source, target, directed in edges:
        for node_id in (source, target):
            graph.add_node(Node(id=node_id, kind=EntityKind.subdomain, name=node_id.upper()))
        graph.add_edge(Edge(
            id=edge_id,
            source_id=source,
            target_id=target,
            kind=EdgeKind.bridge if not directed else EdgeKind.mcp_dependency,
            directed=directed,
            weight=3,
        ))
    return graph


class TestFindPath:
    def test_source_equals_target(self):
        """A node reaches itself with distance 0 and no edges."""
        graph = _graph([("e1", "a", "b", False)])
        path = find_path(graph, "a", "a")
        assert path.distance == 0
        assert [n.id for n in path.nodes] == ["a"]
        assert path.edges == []

    def test_unknown_endpoint(self):
        graph = _graph([("e1", "a", "b", False)])
        assert find_path(graph, "a", "zzz") is None
        assert find_path(graph, "zzz", "a") is None

    def test_shortest_by_edge_count(self):
        """The direct hop wins over the longer detour."""
        graph = _graph([
            ("e1", "a", "b", False),
            ("e2", "b", "c", False),
            ("e3", "c", "d", False),
            ("e4", "a", "d", False),
        ])
        path = find_path(graph, "a", "d")
        assert path.distance == 1
        assert [e.id for e in path.edges] == ["e4"]

    def test_cycles_terminate(self):
        """Directed cycles are walked once and do not loop forever."""
        graph = _graph([
            ("e1", "a", "b", True),
            ("e2", "b", "c", True),
            ("e3", "c", "a", True),
        ])
        assert find_path(graph, "a", "c").distance == 2
        assert find_path(graph, "c", "b").distance == 2
        assert find_path(graph, "a", "x") is None

    def test_directed_edges_one_way(self):
        graph = _graph([("e1", "a", "b", True)])
        assert find_path(graph, "a", "b").distance == 1
        assert find_path(graph, "b", "a") is None

    def test_undirected_symmetric(self):
        """Over undirected edges the reverse path has the same length."""
        graph = _graph([("e1", "a", "b", False), ("e2", "b", "c", False)])
        forward = find_path(graph, "a", "c")
        backward = find_path(graph, "c", "a")
        assert forward.distance == backward.distance == 2
        assert [n.id for n in backward.nodes] == ["c", "b", "a"]

    def test_total_strength(self):
        graph = _graph([("e1", "a", "b", False), ("e2", "b", "c", False)])
        assert find_path(graph, "a", "c").total_strength == 6

    def test_tie_break_follows_fetch_order(self):
        """Among equal paths the first-fetched edge wins unless stable_order is set."""
        graph = _graph([
            ("z-first", "a", "b", True),
            ("y-second", "a", "c", True),
            ("x1", "b", "d", True),
            ("x2", "c", "d", True),
        ])
        default = find_path(graph, "a", "d")
        stable = find_path(graph, "a", "d", stable_order=True)
        assert [n.id for n in default.nodes] == ["a", "b", "d"]
        assert [n.id for n in stable.nodes] == ["a", "c", "d"]


class TestCatalogPaths:
    """Paths over the sample catalog's subdomain graph."""

    def test_dependency_hop(self, catalog):
        path = find_path(build_path_graph(catalog), "sd-ioc", "sd-planning")
        assert path.distance == 1
        assert path.edges[0].id == "mcp_dependency:dep-ioc-plan"

    def test_dependency_direction_respected(self, catalog):
        """Planning does not depend on operations control, so there is no way back."""
        assert find_path(build_path_graph(catalog), "sd-planning", "sd-ioc") is None

    def test_two_bridge_path_both_ways(self, catalog):
        graph = build_path_graph(catalog)
        forward = find_path(graph, "sd-care", "sd-ramp")
        backward = find_path(graph, "sd-ramp", "sd-care")
        assert [n.id for n in forward.nodes] == ["sd-care", "sd-ioc", "sd-ramp"]
        assert [n.id for n in backward.nodes] == ["sd-ramp", "sd-ioc", "sd-care"]
        assert forward.total_strength == 10

    def test_shortest_mixed_path(self, catalog):
        """Care reaches rostering through operations control in two hops."""
        path = find_path(build_path_graph(catalog), "sd-care", "sd-roster")
        assert path.distance == 2
        assert path.nodes[1].id == "sd-ioc"

    def test_isolated_subdomain(self, catalog):
        assert find_path(build_path_graph(catalog), "sd-isolated", "sd-ioc") is None
