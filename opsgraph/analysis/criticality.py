"""Criticality Scorer: ranks MCPs by how much depends on them."""

from collections.abc import Iterable

from opsgraph.analysis.graph_builder import build_subgraph
from opsgraph.config import AnalysisConfig
from opsgraph.models.entities import MCP
from opsgraph.models.graph import Edge, EdgeKind, Node
from opsgraph.models.impact import CriticalMCP
from opsgraph.models.refs import EntityKind
from opsgraph.store.base import EntityStore


def score_criticality(
    mcp_nodes: Iterable[Node],
    dependency_edges: Iterable[Edge],
    *,
    incoming_weight: int = 2,
    outgoing_weight: int = 1,
    domains: dict[str, str] | None = None,
) -> list[CriticalMCP]:
    """Score = incoming * incoming_weight + outgoing * outgoing_weight.

    Incoming counts MCPs that depend on this one. Edges whose endpoints are
    not among mcp_nodes are ignored. Sorted by score descending; ties keep
    the order of mcp_nodes.
    """
    nodes = list(mcp_nodes)
    incoming = {node.id: 0 for node in nodes}
    outgoing = {node.id: 0 for node in nodes}

    for edge in dependency_edges:
        if edge.target_id in incoming:
            incoming[edge.target_id] += 1
        if edge.source_id in outgoing:
            outgoing[edge.source_id] += 1

    domains = domains or {}
    scored = [
        CriticalMCP(
            node=node,
            domain=domains.get(node.id),
            incoming=incoming[node.id],
            outgoing=outgoing[node.id],
            score=incoming[node.id] * incoming_weight + outgoing[node.id] * outgoing_weight,
        )
        for node in nodes
    ]
    # sorted() is stable, so ties keep input order
    return sorted(scored, key=lambda item: item.score, reverse=True)


def rank_critical_mcps(
    store: EntityStore, config: AnalysisConfig | None = None, limit: int | None = None
) -> list[CriticalMCP]:
    """Score every MCP in the store and attach its domain name."""
    config = config or AnalysisConfig()
    mcps = [record for record in store.list_entities(EntityKind.mcp) if isinstance(record, MCP)]
    graph = build_subgraph(store, edge_kinds={EdgeKind.mcp_dependency}, full=True)

    subdomain_domain = {
        subdomain.id: subdomain.domain_id
        for subdomain in store.list_entities(EntityKind.subdomain)
    }
    domain_names = {domain.id: domain.name for domain in store.list_entities(EntityKind.domain)}
    domains = {}
    for mcp in mcps:
        domain_id = subdomain_domain.get(mcp.subdomain_id)
        if domain_id in domain_names:
            domains[mcp.id] = domain_names[domain_id]

    ranked = score_criticality(
        [mcp.to_node() for mcp in mcps],
        graph.edges,
        incoming_weight=config.incoming_weight,
        outgoing_weight=config.outgoing_weight,
        domains=domains,
    )
    if limit is not None:
        ranked = ranked[:limit]
    return ranked
