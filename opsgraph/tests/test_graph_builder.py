"""Tests for materializing subgraphs from the entity store."""

import pytest

from opsgraph.analysis.graph_builder import build_path_graph, build_subgraph
from opsgraph.errors import EntityNotFound
from opsgraph.models.entities import MCP, Domain, MCPDependency, Subdomain
from opsgraph.models.graph import EdgeKind
from opsgraph.models.refs import EntityKind
from opsgraph.store.memory import InMemoryEntityStore


class TestNeighbourhood:
    def test_one_hop_around_mcp(self, catalog):
        """Depth 1 reaches parent, tools, agents, dependencies and workflows."""
        graph = build_subgraph(catalog, (EntityKind.mcp, "mcp-ioc"))
        assert set(graph.nodes) == {
            "mcp-ioc", "sd-ioc", "tool-delay", "agent-ioc",
            "mcp-plan", "mcp-roster", "mcp-rebook", "wf-irops",
        }
        assert len(graph.edges) == 7
        assert graph.seed_id == "mcp-ioc"
        assert graph.missing == []

    def test_depth_zero_is_seed_only(self, catalog):
        graph = build_subgraph(catalog, (EntityKind.mcp, "mcp-ioc"), depth=0)
        assert list(graph.nodes) == ["mcp-ioc"]
        assert graph.edges == []

    def test_edge_kind_filter(self, catalog):
        """Only the requested edge kinds are followed."""
        graph = build_subgraph(
            catalog, (EntityKind.mcp, "mcp-ioc"), [EdgeKind.mcp_dependency], depth=2
        )
        assert set(graph.nodes) == {"mcp-ioc", "mcp-plan", "mcp-roster", "mcp-rebook", "mcp-weather"}
        assert all(edge.kind == EdgeKind.mcp_dependency for edge in graph.edges)

    def test_undirected_bridge_in_both_adjacency_lists(self, catalog):
        """A bridge can be walked from either subdomain."""
        graph = build_subgraph(catalog, (EntityKind.subdomain, "sd-planning"), [EdgeKind.bridge])
        assert set(graph.nodes) == {"sd-planning", "sd-roster"}
        assert [n for n, _ in graph.neighbors("sd-planning")] == ["sd-roster"]
        assert [n for n, _ in graph.neighbors("sd-roster")] == ["sd-planning"]

    def test_directed_edge_only_from_source(self, catalog):
        graph = build_subgraph(catalog, (EntityKind.mcp, "mcp-plan"), [EdgeKind.mcp_dependency])
        assert "mcp-ioc" in graph
        assert [n for n, _ in graph.neighbors("mcp-plan")] == ["mcp-weather"]
        assert graph.neighbors("mcp-weather") == []

    def test_category_children(self, catalog):
        """Agents hang below their category even though the edge points up."""
        graph = build_subgraph(catalog, (EntityKind.agent_category, "OPS"))
        children = graph.children("OPS", EntityKind.agent)
        assert {node.id for node in children} == {"agent-dispatch", "agent-ioc"}
        assert graph.children("agent-ioc") == []

    def test_bridge_seed(self, catalog):
        """A bridge is expanded to both of its subdomains through one edge."""
        graph = build_subgraph(catalog, (EntityKind.bridge, "br-plan-roster"), depth=1)
        assert {"br-plan-roster", "sd-planning", "sd-roster"} <= set(graph.nodes)
        assert len(graph.touching("sd-planning", EdgeKind.bridge)) == 1

    def test_missing_seed_raises(self, catalog):
        with pytest.raises(EntityNotFound) as exc_info:
            build_subgraph(catalog, (EntityKind.mcp, "mcp-nope"))
        assert exc_info.value.entity_id == "mcp-nope"
        assert exc_info.value.entity_type == "mcp"

    def test_missing_endpoint_becomes_placeholder(self):
        """Dangling references are kept as placeholder nodes and reported."""
        store = InMemoryEntityStore()
        store.add(MCP(id="mcp-x", subdomain_id="sd-gone", name="Stray MCP"))
        graph = build_subgraph(store, (EntityKind.mcp, "mcp-x"))
        assert "sd-gone" in graph
        assert graph.nodes["sd-gone"].properties["missing"] is True
        assert [ref.id for ref in graph.missing] == ["sd-gone"]

    def test_fresh_graph_per_call(self, catalog):
        """Graphs are not cached; a later call sees new rows."""
        first = build_subgraph(catalog, (EntityKind.subdomain, "sd-isolated"))
        catalog.add(MCP(id="mcp-new", subdomain_id="sd-isolated", name="New MCP"))
        second = build_subgraph(catalog, (EntityKind.subdomain, "sd-isolated"))
        assert "mcp-new" not in first
        assert "mcp-new" in second


class TestFullGraph:
    def test_full_dependency_graph(self, catalog):
        graph = build_subgraph(catalog, edge_kinds=[EdgeKind.mcp_dependency], full=True)
        assert len(graph.edges) == 4
        assert set(graph.nodes) == {"mcp-ioc", "mcp-plan", "mcp-weather", "mcp-rebook", "mcp-roster"}

    def test_seed_required_without_full(self, catalog):
        with pytest.raises(ValueError):
            build_subgraph(catalog)


class TestPathGraph:
    def test_dependencies_lifted_to_subdomains(self, catalog):
        """MCP dependency rows connect the subdomains owning their MCPs."""
        graph = build_path_graph(catalog)
        edge = next(e for e in graph.edges if e.id == "mcp_dependency:dep-ioc-plan")
        assert (edge.source_id, edge.target_id) == ("sd-ioc", "sd-planning")
        assert edge.properties["source_mcp_id"] == "mcp-ioc"
        assert edge.directed is True

    def test_same_subdomain_rows_skipped(self, catalog):
        graph = build_path_graph(catalog)
        assert "mcp_dependency:dep-plan-weather" not in {e.id for e in graph.edges}

    def test_all_subdomains_present(self, catalog):
        """Subdomains without any relation are still nodes."""
        graph = build_path_graph(catalog)
        assert "sd-isolated" in graph
        assert graph.neighbors("sd-isolated") == []

    def test_dangling_dependency_reported(self):
        store = InMemoryEntityStore()
        store.add(
            Domain(id="d", name="D"),
            Subdomain(id="s", domain_id="d", name="S"),
            MCP(id="m", subdomain_id="s", name="M"),
        )
        store.add(MCPDependency(id="dep", source_mcp_id="m", target_mcp_id="ghost"))
        graph = build_path_graph(store)
        assert [ref.id for ref in graph.missing] == ["ghost"]
        assert graph.edges == []
