"""Cross-domain analysis results."""

from pydantic import BaseModel

from opsgraph.models.entities import CrossDomainBridge, MCPDependency
from opsgraph.models.graph import Node
from opsgraph.models.refs import EntityRef


class AffectedDomain(BaseModel):
    id: str
    name: str
    icon: str | None = None
    color: str | None = None
    bridge_count: int = 0  # bridge and dependency edges reaching this domain


class ImpactAnalysis(BaseModel):
    """Which domains a subdomain reaches through bridges and MCP dependencies."""

    subdomain: EntityRef
    affected_domains: list[AffectedDomain] = []
    bridges: list[CrossDomainBridge] = []
    mcp_dependencies: list[MCPDependency] = []
    total_impact: int = 0


class CriticalMCP(BaseModel):
    node: Node
    domain: str | None = None
    incoming: int = 0
    outgoing: int = 0
    score: int = 0


class DependencyChain(BaseModel):
    """Direct dependents and dependencies of one MCP."""

    mcp: EntityRef
    dependents: list[EntityRef] = []  # MCPs that depend on this one
    dependencies: list[EntityRef] = []  # MCPs this one depends on
    total: int = 0


class BridgeSuggestion(BaseModel):
    source_subdomain_id: str
    target_subdomain_id: str
    reason: str
    confidence: float


class DomainConnectionMatrix(BaseModel):
    """Bridge counts between every pair of domains."""

    domains: list[EntityRef] = []
    matrix: dict[str, dict[str, int]] = {}
