"""Data models for opsgraph."""

from opsgraph.models.audit import AuditAction, AuditEntry
from opsgraph.models.check_result import (
    Action,
    BlockType,
    CheckResult,
    HardBlock,
    OverrideResult,
    SoftBlock,
)
from opsgraph.models.entities import (
    CHILD_LINKS,
    ENTITY_MODELS,
    ENTITY_RELATIONS,
    EDGE_RELATIONS,
    MCP,
    RELATION_MODELS,
    Agent,
    AgentCategory,
    AgentCollaboration,
    BuildStatus,
    CatalogRecord,
    CrossDomainBridge,
    DependencyType,
    Domain,
    MCPDependency,
    RelationKind,
    RelationRecord,
    Subdomain,
    Tool,
    Workflow,
    WorkflowAgent,
    WorkflowMCP,
    WorkflowStatus,
    parse_entity,
    parse_relation,
)
from opsgraph.models.graph import Edge, EdgeKind, GraphData, Node, Path, Subgraph
from opsgraph.models.impact import (
    AffectedDomain,
    BridgeSuggestion,
    CriticalMCP,
    DependencyChain,
    DomainConnectionMatrix,
    ImpactAnalysis,
)
from opsgraph.models.refs import EntityKind, EntityRef

__all__ = [
    "Action",
    "AffectedDomain",
    "Agent",
    "AgentCategory",
    "AgentCollaboration",
    "AuditAction",
    "AuditEntry",
    "BlockType",
    "BridgeSuggestion",
    "BuildStatus",
    "CHILD_LINKS",
    "CatalogRecord",
    "CheckResult",
    "CriticalMCP",
    "CrossDomainBridge",
    "DependencyChain",
    "DependencyType",
    "Domain",
    "DomainConnectionMatrix",
    "EDGE_RELATIONS",
    "ENTITY_MODELS",
    "ENTITY_RELATIONS",
    "Edge",
    "EdgeKind",
    "EntityKind",
    "EntityRef",
    "GraphData",
    "HardBlock",
    "ImpactAnalysis",
    "MCP",
    "MCPDependency",
    "Node",
    "OverrideResult",
    "Path",
    "RELATION_MODELS",
    "RelationKind",
    "RelationRecord",
    "SoftBlock",
    "Subdomain",
    "Subgraph",
    "Tool",
    "Workflow",
    "WorkflowAgent",
    "WorkflowMCP",
    "WorkflowStatus",
    "parse_entity",
    "parse_relation",
]
