"""
Graph Builder: materializes per-request subgraphs from the entity store.

Every call builds a fresh Subgraph; nothing is cached between calls.
"""

import logging
from collections.abc import Iterable, Iterator

from opsgraph.models.entities import (
    EDGE_RELATIONS,
    ENTITY_RELATIONS,
    MCP,
    CatalogRecord,
    RelationKind,
)
from opsgraph.models.graph import Edge, EdgeKind, Node, Subgraph
from opsgraph.models.refs import EntityKind, EntityRef
from opsgraph.store.base import EntityStore, require_entity

logger = logging.getLogger(__name__)

ALL_EDGE_KINDS = frozenset(EdgeKind)

_STRUCTURAL = (EdgeKind.hierarchy, EdgeKind.usage)


def build_subgraph(
    store: EntityStore,
    seed: tuple[EntityKind, str] | None = None,
    edge_kinds: Iterable[EdgeKind] | None = None,
    *,
    depth: int = 1,
    full: bool = False,
) -> Subgraph:
    """Build the graph around a seed entity, or the whole graph.

    Args:
        store: where records and relation rows are read from
        seed: (kind, id) of the entity to expand from; required unless full
        edge_kinds: edge kinds to follow, all kinds when None
        depth: expansion rounds in neighbourhood mode
        full: load every row of the requested kinds instead of expanding

    Raises:
        EntityNotFound: if the seed does not exist
    """
    kinds = frozenset(edge_kinds) if edge_kinds is not None else ALL_EDGE_KINDS
    if full:
        graph = _build_full(store, kinds)
        if seed is not None:
            seed_record = require_entity(store, *seed)
            graph.seed_id = seed_record.id
            graph.add_node(seed_record.to_node())
        return graph

    if seed is None:
        raise ValueError("seed is required unless full=True")

    seed_record = require_entity(store, *seed)
    graph = Subgraph(seed_id=seed_record.id)
    graph.add_node(seed_record.to_node())

    frontier = [seed_record]
    for _ in range(max(depth, 0)):
        next_frontier: list[CatalogRecord] = []
        for record in frontier:
            for other_kind, other_id, edge in _links(store, record, kinds):
                resolved = _ensure_node(store, graph, other_kind, other_id)
                if resolved is not None:
                    next_frontier.append(resolved)
                graph.add_edge(edge)
        if not next_frontier:
            break
        frontier = next_frontier

    if graph.missing:
        logger.warning(
            "graph around %s %s references %d missing record(s)",
            seed_record.kind.value, seed_record.id, len(graph.missing),
        )
    return graph


def _links(
    store: EntityStore, record: CatalogRecord, kinds: frozenset[EdgeKind]
) -> Iterator[tuple[EntityKind, str, Edge]]:
    """Yield (kind, id, edge) for every neighbour of record."""
    if any(kind in kinds for kind in (*_STRUCTURAL, EdgeKind.bridge)):
        for parent_kind, parent_id, edge in record.parent_links():
            if edge.kind in kinds:
                yield parent_kind, parent_id, edge

    if any(kind in kinds for kind in _STRUCTURAL):
        for child in store.list_children(record.kind, record.id):
            for parent_kind, parent_id, edge in child.parent_links():
                if parent_kind == record.kind and parent_id == record.id and edge.kind in kinds:
                    yield child.kind, child.id, edge

    for relation_kind in ENTITY_RELATIONS.get(record.kind, []):
        model_edge_kind = _edge_kind_for(relation_kind)
        if model_edge_kind not in kinds:
            continue
        for row in store.list_relations(relation_kind, source_id=record.id):
            yield row.target_kind, row.target_id, row.to_edge()
        for row in store.list_relations(relation_kind, target_id=record.id):
            yield row.source_kind, row.source_id, row.to_edge()


def _edge_kind_for(relation_kind: RelationKind) -> EdgeKind:
    for edge_kind, relation_kinds in EDGE_RELATIONS.items():
        if relation_kind in relation_kinds:
            return edge_kind
    raise KeyError(relation_kind)


def _ensure_node(
    store: EntityStore, graph: Subgraph, kind: EntityKind, entity_id: str
) -> CatalogRecord | None:
    """Add the node for (kind, id) if new; return its record when it should be expanded."""
    if entity_id in graph:
        return None
    record = store.get_entity(kind, entity_id)
    if record is None:
        graph.add_node(_placeholder(kind, entity_id))
        graph.missing.append(EntityRef(id=entity_id, type=kind, name=entity_id))
        return None
    graph.add_node(record.to_node())
    return record


def _placeholder(kind: EntityKind, entity_id: str) -> Node:
    return Node(id=entity_id, kind=kind, name=entity_id, properties={"missing": True})


def _build_full(store: EntityStore, kinds: frozenset[EdgeKind]) -> Subgraph:
    graph = Subgraph()

    if any(kind in kinds for kind in _STRUCTURAL):
        for entity_kind in EntityKind:
            if entity_kind == EntityKind.bridge:
                continue
            for record in store.list_entities(entity_kind):
                graph.add_node(record.to_node())
        for node in list(graph.nodes.values()):
            record = store.get_entity(node.kind, node.id)
            for parent_kind, parent_id, edge in record.parent_links():
                if edge.kind in kinds:
                    _ensure_node(store, graph, parent_kind, parent_id)
                    graph.add_edge(edge)

    for edge_kind, relation_kinds in EDGE_RELATIONS.items():
        if edge_kind not in kinds:
            continue
        for relation_kind in relation_kinds:
            for row in store.list_relations(relation_kind):
                _ensure_node(store, graph, row.source_kind, row.source_id)
                _ensure_node(store, graph, row.target_kind, row.target_id)
                graph.add_edge(row.to_edge())
    return graph


def build_path_graph(store: EntityStore) -> Subgraph:
    """Subdomain graph for path finding.

    Bridges connect subdomains both ways. MCP dependency rows are lifted to
    the subdomains that own their MCPs and stay directed, source subdomain
    to target subdomain.
    """
    graph = Subgraph()
    for subdomain in store.list_entities(EntityKind.subdomain):
        graph.add_node(subdomain.to_node())

    for bridge in store.list_relations(RelationKind.bridge):
        _ensure_node(store, graph, EntityKind.subdomain, bridge.source_id)
        _ensure_node(store, graph, EntityKind.subdomain, bridge.target_id)
        graph.add_edge(bridge.to_edge())

    owner: dict[str, str] = {
        mcp.id: mcp.subdomain_id
        for mcp in store.list_entities(EntityKind.mcp)
        if isinstance(mcp, MCP)
    }
    for row in store.list_relations(RelationKind.mcp_dependency):
        source_subdomain = owner.get(row.source_id)
        target_subdomain = owner.get(row.target_id)
        if source_subdomain is None or target_subdomain is None:
            for mcp_id in (row.source_id, row.target_id):
                if mcp_id not in owner:
                    graph.missing.append(EntityRef(id=mcp_id, type=EntityKind.mcp, name=mcp_id))
            continue
        if source_subdomain == target_subdomain:
            continue
        _ensure_node(store, graph, EntityKind.subdomain, source_subdomain)
        _ensure_node(store, graph, EntityKind.subdomain, target_subdomain)
        edge = row.to_edge()
        graph.add_edge(
            edge.model_copy(
                update={
                    "source_id": source_subdomain,
                    "target_id": target_subdomain,
                    "properties": {
                        **edge.properties,
                        "source_mcp_id": row.source_id,
                        "target_mcp_id": row.target_id,
                    },
                }
            )
        )

    if graph.missing:
        logger.warning("path graph references %d missing record(s)", len(graph.missing))
    return graph
