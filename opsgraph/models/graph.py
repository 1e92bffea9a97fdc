"""Graph types materialized from catalog relationships.

A Subgraph is built fresh for every analysis call and thrown away
afterwards. GraphData is the serializable subset returned to callers
as evidence.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from opsgraph.models.refs import EntityKind, EntityRef


class EdgeKind(str, Enum):
    """Kinds of edges in a materialized graph."""

    hierarchy = "hierarchy"
    bridge = "bridge"
    mcp_dependency = "mcp_dependency"
    agent_collaboration = "agent_collaboration"
    workflow_link = "workflow_link"
    usage = "usage"  # agent -> its primary MCP


# label of agent -> category hierarchy edges
BELONGS_TO = "belongs_to"


class Node(BaseModel):
    """a projection of one entity store row."""

    id: str
    kind: EntityKind
    name: str
    status: str | None = None
    properties: dict[str, Any] = {}

    def ref(self) -> EntityRef:
        return EntityRef(id=self.id, type=self.kind, name=self.name)


class Edge(BaseModel):
    """a relationship between two nodes.

    Undirected edges are stored once but traversed both ways.
    """

    id: str
    source_id: str
    target_id: str
    kind: EdgeKind
    directed: bool = True
    weight: int | None = Field(default=None, ge=1, le=10)
    critical: bool = False
    label: str | None = None  # bridge type, dependency type, link role
    properties: dict[str, Any] = {}

    def other(self, node_id: str) -> str:
        """Return the endpoint opposite to node_id."""
        return self.target_id if node_id == self.source_id else self.source_id


class GraphData(BaseModel):
    """serializable nodes and edges, used as decision evidence."""

    nodes: list[Node] = []
    edges: list[Edge] = []

    def node_ids(self) -> set[str]:
        return {node.id for node in self.nodes}


class Path(BaseModel):
    """a shortest path found by breadth-first search."""

    nodes: list[Node]
    edges: list[Edge]
    distance: int
    total_strength: int = 0


@dataclass
class Subgraph:
    """Per-request graph with adjacency lists in fetch order."""

    nodes: dict[str, Node] = field(default_factory=dict)
    adjacency: dict[str, list[Edge]] = field(default_factory=dict)
    edges: list[Edge] = field(default_factory=list)
    missing: list[EntityRef] = field(default_factory=list)
    seed_id: str | None = None
    _edge_ids: set[str] = field(default_factory=set, repr=False)

    def __contains__(self, node_id: str) -> bool:
        return node_id in self.nodes

    def add_node(self, node: Node) -> bool:
        """Add a node; returns False if it was already present."""
        if node.id in self.nodes:
            return False
        self.nodes[node.id] = node
        self.adjacency.setdefault(node.id, [])
        return True

    def add_edge(self, edge: Edge) -> bool:
        """Add an edge; returns False if an edge with the same id exists."""
        if edge.id in self._edge_ids:
            return False
        self._edge_ids.add(edge.id)
        self.edges.append(edge)
        self.adjacency.setdefault(edge.source_id, []).append(edge)
        self.adjacency.setdefault(edge.target_id, [])
        if not edge.directed:
            self.adjacency[edge.target_id].append(edge)
        return True

    def node(self, node_id: str) -> Node | None:
        return self.nodes.get(node_id)

    def neighbors(self, node_id: str) -> list[tuple[str, Edge]]:
        """Traversable (neighbor_id, edge) pairs leaving node_id."""
        return [(edge.other(node_id), edge) for edge in self.adjacency.get(node_id, [])]

    def outgoing(self, node_id: str, kind: EdgeKind | None = None) -> list[Edge]:
        return [
            e for e in self.edges
            if e.source_id == node_id and (kind is None or e.kind == kind)
        ]

    def incoming(self, node_id: str, kind: EdgeKind | None = None) -> list[Edge]:
        return [
            e for e in self.edges
            if e.target_id == node_id and (kind is None or e.kind == kind)
        ]

    def touching(self, node_id: str, kind: EdgeKind | None = None) -> list[Edge]:
        return [
            e for e in self.edges
            if node_id in (e.source_id, e.target_id) and (kind is None or e.kind == kind)
        ]

    def children(self, node_id: str, kind: EntityKind | None = None) -> list[Node]:
        """Hierarchy children of node_id.

        Hierarchy edges point parent to child, except agent to category
        edges which are labelled belongs_to.
        """
        result = []
        for edge in self.touching(node_id, EdgeKind.hierarchy):
            if (edge.source_id == node_id) == (edge.label == BELONGS_TO):
                continue
            child = self.nodes.get(edge.other(node_id))
            if child is not None and (kind is None or child.kind == kind):
                result.append(child)
        return result

    def to_graph_data(self) -> GraphData:
        return GraphData(nodes=list(self.nodes.values()), edges=list(self.edges))
