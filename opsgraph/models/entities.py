"""
Catalog records read by the analysis layer.

Entities are the nodes of the catalog (domains down to tools, agents and
workflows). Relations are the rows that connect them. Both know how to
project themselves into graph Nodes and Edges.
"""

from enum import Enum
from typing import Any, ClassVar

from pydantic import BaseModel, Field, model_validator

from opsgraph.errors import ValidationError
from opsgraph.models.graph import BELONGS_TO, Edge, EdgeKind, Node
from opsgraph.models.refs import EntityKind, EntityRef
from opsgraph.utils.identifiers import pair_id


class BuildStatus(str, Enum):
    """Lifecycle of MCPs and tools."""

    built = "built"
    in_progress = "in-progress"
    planned = "planned"


class WorkflowStatus(str, Enum):
    draft = "draft"
    planned = "planned"
    in_progress = "in-progress"
    completed = "completed"
    archived = "archived"


class DependencyType(str, Enum):
    requires = "requires"
    enhances = "enhances"
    feeds_data = "feeds_data"
    optional = "optional"


class RelationKind(str, Enum):
    """Relation tables the entity store can list."""

    bridge = "bridge"
    mcp_dependency = "mcp_dependency"
    agent_collaboration = "agent_collaboration"
    workflow_mcp = "workflow_mcp"
    workflow_agent = "workflow_agent"

    @classmethod
    def parse(cls, value: "RelationKind | str") -> "RelationKind":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ", ".join(kind.value for kind in cls)
            raise ValidationError(
                f"Invalid relation type: {value!r}. Must be one of: {valid}"
            ) from None


def edge_id(kind: EdgeKind, source_id: str, target_id: str) -> str:
    return f"{kind.value}:{source_id}:{target_id}"


# =============================================================================
# Entities
# =============================================================================


class CatalogRecord(BaseModel):
    """Base for every checkable catalog entity."""

    model_config = {"extra": "forbid"}

    kind: ClassVar[EntityKind]
    # foreign key field -> parent kind, in the order edges are emitted
    parent_fields: ClassVar[dict[str, EntityKind]] = {}

    id: str
    name: str

    def ref(self) -> EntityRef:
        return EntityRef(id=self.id, type=self.kind, name=self.name)

    @property
    def status_value(self) -> str | None:
        status = getattr(self, "status", None)
        return status.value if status is not None else None

    def to_node(self) -> Node:
        properties = self.model_dump(mode="json", exclude={"id", "name"})
        return Node(
            id=self.id,
            kind=self.kind,
            name=self.name,
            status=self.status_value,
            properties=properties,
        )

    def parent_links(self) -> list[tuple[EntityKind, str, Edge]]:
        """(parent kind, parent id, edge) for every populated foreign key."""
        links = []
        for field_name, parent_kind in self.parent_fields.items():
            parent_id = getattr(self, field_name)
            if parent_id:
                links.append((parent_kind, parent_id, self._link_edge(field_name, parent_id)))
        return links

    def _link_edge(self, field_name: str, parent_id: str) -> Edge:
        return Edge(
            id=edge_id(EdgeKind.hierarchy, parent_id, self.id),
            source_id=parent_id,
            target_id=self.id,
            kind=EdgeKind.hierarchy,
            label="contains",
        )


class Domain(CatalogRecord):
    kind: ClassVar[EntityKind] = EntityKind.domain

    description: str | None = None
    icon: str | None = None
    color: str | None = None


class Subdomain(CatalogRecord):
    kind: ClassVar[EntityKind] = EntityKind.subdomain
    parent_fields: ClassVar[dict[str, EntityKind]] = {"domain_id": EntityKind.domain}

    domain_id: str
    description: str | None = None


class MCP(CatalogRecord):
    """A Model Context Protocol server that groups tools."""

    kind: ClassVar[EntityKind] = EntityKind.mcp
    parent_fields: ClassVar[dict[str, EntityKind]] = {"subdomain_id": EntityKind.subdomain}

    subdomain_id: str
    description: str | None = None
    status: BuildStatus = BuildStatus.planned
    owner: str | None = None
    target_quarter: str | None = None


class Tool(CatalogRecord):
    kind: ClassVar[EntityKind] = EntityKind.tool
    parent_fields: ClassVar[dict[str, EntityKind]] = {"mcp_id": EntityKind.mcp}

    mcp_id: str
    description: str | None = None
    status: BuildStatus = BuildStatus.planned


class AgentCategory(CatalogRecord):
    """Category of agents; the category code is the id."""

    kind: ClassVar[EntityKind] = EntityKind.agent_category

    description: str | None = None


class Agent(CatalogRecord):
    kind: ClassVar[EntityKind] = EntityKind.agent
    parent_fields: ClassVar[dict[str, EntityKind]] = {
        "category_id": EntityKind.agent_category,
        "mcp_id": EntityKind.mcp,
    }

    code: str
    category_id: str
    mcp_id: str | None = None  # primary MCP
    active: bool = True
    active_instances: int = Field(default=0, ge=0)
    autonomy_level: int = Field(default=1, ge=1, le=5)

    @property
    def is_running(self) -> bool:
        return self.active and self.active_instances > 0

    def _link_edge(self, field_name: str, parent_id: str) -> Edge:
        if field_name == "mcp_id":
            return Edge(
                id=edge_id(EdgeKind.usage, self.id, parent_id),
                source_id=self.id,
                target_id=parent_id,
                kind=EdgeKind.usage,
                label="uses_mcp",
            )
        return Edge(
            id=edge_id(EdgeKind.hierarchy, self.id, parent_id),
            source_id=self.id,
            target_id=parent_id,
            kind=EdgeKind.hierarchy,
            label=BELONGS_TO,
        )


class Workflow(CatalogRecord):
    kind: ClassVar[EntityKind] = EntityKind.workflow
    parent_fields: ClassVar[dict[str, EntityKind]] = {"subdomain_id": EntityKind.subdomain}

    subdomain_id: str
    description: str | None = None
    status: WorkflowStatus = WorkflowStatus.draft


# =============================================================================
# Relations
# =============================================================================


class RelationRecord(BaseModel):
    """Base for rows that connect two entities."""

    model_config = {"extra": "forbid"}

    relation_kind: ClassVar[RelationKind]
    edge_kind: ClassVar[EdgeKind]
    source_kind: ClassVar[EntityKind]
    target_kind: ClassVar[EntityKind]
    source_field: ClassVar[str]
    target_field: ClassVar[str]

    id: str

    @model_validator(mode="before")
    @classmethod
    def derive_pair_id(cls, data: Any) -> Any:
        """Junction rows without an id are keyed by their endpoints."""
        if isinstance(data, dict) and not data.get("id"):
            source = data.get(cls.source_field)
            target = data.get(cls.target_field)
            if source and target:
                data = {**data, "id": pair_id(source, target)}
        return data

    @property
    def source_id(self) -> str:
        return getattr(self, self.source_field)

    @property
    def target_id(self) -> str:
        return getattr(self, self.target_field)

    @property
    def directed(self) -> bool:
        return True

    def edge_label(self) -> str | None:
        return None

    def to_edge(self) -> Edge:
        properties = self.model_dump(mode="json", exclude={"id"})
        return Edge(
            id=f"{self.relation_kind.value}:{self.id}",
            source_id=self.source_id,
            target_id=self.target_id,
            kind=self.edge_kind,
            directed=self.directed,
            weight=getattr(self, "strength", None),
            critical=getattr(self, "is_critical", False),
            label=self.edge_label(),
            properties=properties,
        )


class CrossDomainBridge(RelationRecord, CatalogRecord):
    """A link between two subdomains, usually in different domains.

    Bridges are symmetric in traversal and are themselves checkable:
    deleting one goes through the gate like any entity.
    """

    kind: ClassVar[EntityKind] = EntityKind.bridge
    relation_kind: ClassVar[RelationKind] = RelationKind.bridge
    edge_kind: ClassVar[EdgeKind] = EdgeKind.bridge
    source_kind: ClassVar[EntityKind] = EntityKind.subdomain
    target_kind: ClassVar[EntityKind] = EntityKind.subdomain
    source_field: ClassVar[str] = "source_subdomain_id"
    target_field: ClassVar[str] = "target_subdomain_id"

    source_subdomain_id: str
    target_subdomain_id: str
    bridge_type: str = "data_flow"
    description: str | None = None
    strength: int = Field(default=5, ge=1, le=10)
    is_critical: bool = False

    @property
    def directed(self) -> bool:
        return False

    def edge_label(self) -> str | None:
        return self.bridge_type

    def parent_links(self) -> list[tuple[EntityKind, str, Edge]]:
        """Both anchoring subdomains, joined by the bridge edge itself."""
        edge = self.to_edge()
        return [
            (EntityKind.subdomain, self.source_subdomain_id, edge),
            (EntityKind.subdomain, self.target_subdomain_id, edge),
        ]


class MCPDependency(RelationRecord):
    """source MCP depends on target MCP."""

    relation_kind: ClassVar[RelationKind] = RelationKind.mcp_dependency
    edge_kind: ClassVar[EdgeKind] = EdgeKind.mcp_dependency
    source_kind: ClassVar[EntityKind] = EntityKind.mcp
    target_kind: ClassVar[EntityKind] = EntityKind.mcp
    source_field: ClassVar[str] = "source_mcp_id"
    target_field: ClassVar[str] = "target_mcp_id"

    source_mcp_id: str
    target_mcp_id: str
    dependency_type: DependencyType = DependencyType.requires
    description: str | None = None
    strength: int = Field(default=5, ge=1, le=10)
    is_critical: bool = False

    def edge_label(self) -> str | None:
        return self.dependency_type.value


class AgentCollaboration(RelationRecord):
    relation_kind: ClassVar[RelationKind] = RelationKind.agent_collaboration
    edge_kind: ClassVar[EdgeKind] = EdgeKind.agent_collaboration
    source_kind: ClassVar[EntityKind] = EntityKind.agent
    target_kind: ClassVar[EntityKind] = EntityKind.agent
    source_field: ClassVar[str] = "source_agent_id"
    target_field: ClassVar[str] = "target_agent_id"

    source_agent_id: str
    target_agent_id: str
    collaboration_type: str = "coordination"
    strength: int = Field(default=5, ge=1, le=10)
    bidirectional: bool = False

    @property
    def directed(self) -> bool:
        return not self.bidirectional

    def edge_label(self) -> str | None:
        return self.collaboration_type


class WorkflowMCP(RelationRecord):
    """workflow is powered by an MCP."""

    relation_kind: ClassVar[RelationKind] = RelationKind.workflow_mcp
    edge_kind: ClassVar[EdgeKind] = EdgeKind.workflow_link
    source_kind: ClassVar[EntityKind] = EntityKind.workflow
    target_kind: ClassVar[EntityKind] = EntityKind.mcp
    source_field: ClassVar[str] = "workflow_id"
    target_field: ClassVar[str] = "mcp_id"

    workflow_id: str
    mcp_id: str

    def edge_label(self) -> str | None:
        return "powered_by"


class WorkflowAgent(RelationRecord):
    """workflow is executed by an agent."""

    relation_kind: ClassVar[RelationKind] = RelationKind.workflow_agent
    edge_kind: ClassVar[EdgeKind] = EdgeKind.workflow_link
    source_kind: ClassVar[EntityKind] = EntityKind.workflow
    target_kind: ClassVar[EntityKind] = EntityKind.agent
    source_field: ClassVar[str] = "workflow_id"
    target_field: ClassVar[str] = "agent_id"

    workflow_id: str
    agent_id: str
    role: str | None = None

    def edge_label(self) -> str | None:
        return self.role or "executed_by"


# =============================================================================
# Lookup tables
# =============================================================================

ENTITY_MODELS: dict[EntityKind, type[CatalogRecord]] = {
    EntityKind.domain: Domain,
    EntityKind.subdomain: Subdomain,
    EntityKind.mcp: MCP,
    EntityKind.tool: Tool,
    EntityKind.agent_category: AgentCategory,
    EntityKind.agent: Agent,
    EntityKind.workflow: Workflow,
    EntityKind.bridge: CrossDomainBridge,
}

RELATION_MODELS: dict[RelationKind, type[RelationRecord]] = {
    RelationKind.bridge: CrossDomainBridge,
    RelationKind.mcp_dependency: MCPDependency,
    RelationKind.agent_collaboration: AgentCollaboration,
    RelationKind.workflow_mcp: WorkflowMCP,
    RelationKind.workflow_agent: WorkflowAgent,
}

# parent kind -> (child kind, foreign key field on the child)
CHILD_LINKS: dict[EntityKind, list[tuple[EntityKind, str]]] = {
    EntityKind.domain: [(EntityKind.subdomain, "domain_id")],
    EntityKind.subdomain: [(EntityKind.mcp, "subdomain_id"), (EntityKind.workflow, "subdomain_id")],
    EntityKind.mcp: [(EntityKind.tool, "mcp_id"), (EntityKind.agent, "mcp_id")],
    EntityKind.agent_category: [(EntityKind.agent, "category_id")],
}

# relation kinds whose rows can touch an entity of the given kind
ENTITY_RELATIONS: dict[EntityKind, list[RelationKind]] = {
    EntityKind.subdomain: [RelationKind.bridge],
    EntityKind.mcp: [RelationKind.mcp_dependency, RelationKind.workflow_mcp],
    EntityKind.agent: [RelationKind.agent_collaboration, RelationKind.workflow_agent],
    EntityKind.workflow: [RelationKind.workflow_mcp, RelationKind.workflow_agent],
}

EDGE_RELATIONS: dict[EdgeKind, list[RelationKind]] = {
    EdgeKind.bridge: [RelationKind.bridge],
    EdgeKind.mcp_dependency: [RelationKind.mcp_dependency],
    EdgeKind.agent_collaboration: [RelationKind.agent_collaboration],
    EdgeKind.workflow_link: [RelationKind.workflow_mcp, RelationKind.workflow_agent],
}


def parse_entity(kind: EntityKind | str, data: dict[str, Any]) -> CatalogRecord:
    """Validate raw catalog data into the record class for kind."""
    return ENTITY_MODELS[EntityKind.parse(kind)].model_validate(data)


def parse_relation(kind: RelationKind | str, data: dict[str, Any]) -> RelationRecord:
    return RELATION_MODELS[RelationKind.parse(kind)].model_validate(data)
