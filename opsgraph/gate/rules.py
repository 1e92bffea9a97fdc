"""
Hard and soft block rules.

Each rule looks at the entity's materialized neighbourhood and returns a
block or None. Rules never short-circuit one another: the gate runs every
rule in list order and keeps everything that fires.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from opsgraph.config import AnalysisConfig
from opsgraph.models.check_result import Action, HardBlock, SoftBlock
from opsgraph.models.entities import CatalogRecord
from opsgraph.models.graph import EdgeKind, Node, Subgraph
from opsgraph.models.refs import EntityKind, EntityRef

# hops the rules look out from the entity (domain -> subdomain -> mcp -> tool)
RULE_DEPTH = 3


@dataclass
class RuleContext:
    """Everything a rule may look at for one check."""

    record: CatalogRecord
    action: Action
    graph: Subgraph
    config: AnalysisConfig
    proposed_changes: dict[str, Any] = field(default_factory=dict)

    @property
    def kind(self) -> EntityKind:
        return self.record.kind

    @property
    def entity_id(self) -> str:
        return self.record.id

    def is_delete(self, kind: EntityKind) -> bool:
        return self.kind == kind and self.action == Action.delete

    @property
    def new_status(self) -> str | None:
        """Status requested by an edit or status change, if any."""
        if self.action == Action.delete:
            return None
        status = self.proposed_changes.get("status")
        return getattr(status, "value", status)

    def is_downgrade(self) -> bool:
        built = self.config.built_status
        return (
            self.kind in (EntityKind.mcp, EntityKind.tool)
            and self.record.status_value == built
            and self.new_status is not None
            and self.new_status != built
        )

    # -- neighbourhood helpers --

    def children(self, node_id: str, kind: EntityKind) -> list[Node]:
        return [n for n in self.graph.children(node_id, kind) if _live(n)]

    def sources(self, node_id: str, edge_kind: EdgeKind, kind: EntityKind | None = None) -> list[Node]:
        """Live nodes with an edge of edge_kind pointing at node_id."""
        nodes = []
        for edge in self.graph.incoming(node_id, edge_kind):
            node = self.graph.node(edge.source_id)
            if node is not None and _live(node) and (kind is None or node.kind == kind):
                nodes.append(node)
        return nodes

    def agents_using(self, mcp_id: str) -> list[Node]:
        return self.sources(mcp_id, EdgeKind.usage, EntityKind.agent)

    def workflows_using(self, node_id: str) -> list[Node]:
        return self.sources(node_id, EdgeKind.workflow_link, EntityKind.workflow)

    def is_active_workflow(self, node: Node) -> bool:
        return node.status in self.config.active_workflow_statuses

    def critical_dependents(self, mcp_id: str) -> list[Node]:
        """Non-planned MCPs that depend on mcp_id through a critical dependency."""
        dependents = []
        for edge in self.graph.incoming(mcp_id, EdgeKind.mcp_dependency):
            source = self.graph.node(edge.source_id)
            if source is None or not _live(source) or source.status == "planned":
                continue
            if edge.critical or edge.label in self.config.critical_dependency_types:
                dependents.append(source)
        return dependents

    def active_consumers(self, mcp_id: str) -> list[Node]:
        """Consumers that assume the MCP is live."""
        consumers = [a for a in self.agents_using(mcp_id) if _is_active_agent(a)]
        consumers += [w for w in self.workflows_using(mcp_id) if self.is_active_workflow(w)]
        consumers += self.critical_dependents(mcp_id)
        return _unique(consumers)

    def parent_mcp_id(self) -> str | None:
        return getattr(self.record, "mcp_id", None)

    def unresolved_links(self) -> list[EntityRef]:
        """Missing records one edge away from the entity or its parent MCP."""
        anchors = {self.entity_id, self.parent_mcp_id()}
        linked = set()
        for anchor in anchors - {None}:
            for edge in self.graph.touching(anchor):
                linked.add(edge.other(anchor))
        return [ref for ref in self.graph.missing if ref.id in linked]


def _live(node: Node) -> bool:
    return not node.properties.get("missing", False)


def _is_active_agent(node: Node) -> bool:
    return bool(node.properties.get("active", False))


def _unique(nodes: list[Node]) -> list[Node]:
    seen = set()
    result = []
    for node in nodes:
        if node.id not in seen:
            seen.add(node.id)
            result.append(node)
    return result


def _refs(nodes: list[Node]) -> list[EntityRef]:
    return [node.ref() for node in _unique(nodes)]


def _names(nodes: list[Node], limit: int = 3) -> str:
    names = [node.name for node in _unique(nodes)]
    if len(names) > limit:
        return ", ".join(names[:limit]) + f" and {len(names) - limit} more"
    return ", ".join(names)


# =============================================================================
# Hard rules
# =============================================================================


def built_tool_delete(ctx: RuleContext) -> HardBlock | None:
    if not ctx.is_delete(EntityKind.tool) or ctx.record.status_value != ctx.config.built_status:
        return None
    return HardBlock(
        rule_id="H1_BUILT_TOOL_DELETE",
        reason="Production tool cannot be deleted",
        message="This tool is marked as BUILT, meaning production code may depend on it.",
        affected_entities=[ctx.record.ref()],
    )


def active_agent_delete(ctx: RuleContext) -> HardBlock | None:
    if not ctx.is_delete(EntityKind.agent) or not ctx.record.is_running:
        return None
    return HardBlock(
        rule_id="H2_ACTIVE_AGENT_DELETE",
        reason="Agent has active instances",
        message=(
            f"This agent has {ctx.record.active_instances} active instances. "
            "Stop all instances before deletion."
        ),
        affected_entities=[ctx.record.ref()],
    )


def mcp_has_built_tools(ctx: RuleContext) -> HardBlock | None:
    if not ctx.is_delete(EntityKind.mcp):
        return None
    built = [
        t for t in ctx.children(ctx.entity_id, EntityKind.tool)
        if t.status == ctx.config.built_status
    ]
    if not built:
        return None
    return HardBlock(
        rule_id="H3_MCP_HAS_BUILT_TOOLS",
        reason="MCP contains production tools",
        message=f"This MCP contains {len(built)} built tools that cannot be deleted.",
        affected_entities=_refs(built),
    )


def critical_mcp_dependency(ctx: RuleContext) -> HardBlock | None:
    if not ctx.is_delete(EntityKind.mcp):
        return None
    dependents = ctx.critical_dependents(ctx.entity_id)
    if not dependents:
        return None
    return HardBlock(
        rule_id="H4_CRITICAL_MCP_DEPENDENCY",
        reason="Critical dependency exists",
        message=f"{_names(dependents)} has a CRITICAL dependency on this MCP.",
        affected_entities=_refs(dependents),
    )


def in_progress_workflow_delete(ctx: RuleContext) -> HardBlock | None:
    if not ctx.is_delete(EntityKind.workflow) or ctx.record.status_value != "in-progress":
        return None
    return HardBlock(
        rule_id="H5_IN_PROGRESS_WORKFLOW_DELETE",
        reason="Workflow is in progress",
        message="Active workflows cannot be deleted. Complete or archive first.",
        affected_entities=[ctx.record.ref()],
    )


def completed_workflow_delete(ctx: RuleContext) -> HardBlock | None:
    if not ctx.is_delete(EntityKind.workflow) or ctx.record.status_value != "completed":
        return None
    return HardBlock(
        rule_id="H6_COMPLETED_WORKFLOW_DELETE",
        reason="Completed workflow has audit trail",
        message="Completed workflows are archived for compliance. Use archive instead.",
        affected_entities=[ctx.record.ref()],
    )


def critical_bridge_delete(ctx: RuleContext) -> HardBlock | None:
    if not ctx.is_delete(EntityKind.bridge) or not ctx.record.is_critical:
        return None
    return HardBlock(
        rule_id="H7_CRITICAL_BRIDGE_DELETE",
        reason="Critical cross-domain bridge",
        message="This is marked as a critical integration point. Removal requires special approval.",
        affected_entities=[ctx.record.ref()],
    )


def domain_has_built_content(ctx: RuleContext) -> HardBlock | None:
    if not ctx.is_delete(EntityKind.domain):
        return None
    built_tools: list[Node] = []
    mcps_with_built = 0
    for subdomain in ctx.children(ctx.entity_id, EntityKind.subdomain):
        for mcp in ctx.children(subdomain.id, EntityKind.mcp):
            built = [
                t for t in ctx.children(mcp.id, EntityKind.tool)
                if t.status == ctx.config.built_status
            ]
            if built:
                mcps_with_built += 1
                built_tools.extend(built)
    if not built_tools:
        return None
    return HardBlock(
        rule_id="H8_DOMAIN_HAS_BUILT_CONTENT",
        reason="Domain contains production content",
        message=(
            f"Cannot delete domain with {len(built_tools)} built tools "
            f"across {mcps_with_built} MCPs."
        ),
        affected_entities=[ctx.record.ref(), *_refs(built_tools)],
    )


def mcp_has_active_consumers(ctx: RuleContext) -> HardBlock | None:
    if not ctx.is_delete(EntityKind.mcp):
        return None
    agents = [a for a in ctx.agents_using(ctx.entity_id) if _is_active_agent(a)]
    workflows = [w for w in ctx.workflows_using(ctx.entity_id) if ctx.is_active_workflow(w)]
    if not agents and not workflows:
        return None
    parts = []
    if agents:
        parts.append(f"{len(agents)} active agent(s) ({_names(agents)}) use it as their primary MCP")
    if workflows:
        parts.append(f"{len(workflows)} in-progress workflow(s) ({_names(workflows)}) run on it")
    return HardBlock(
        rule_id="H9_MCP_HAS_ACTIVE_CONSUMERS",
        reason="MCP is required by active consumers",
        message="; ".join(parts) + ". Relink or retire them first.",
        affected_entities=_refs(agents + workflows),
    )


def category_has_active_agents(ctx: RuleContext) -> HardBlock | None:
    if not ctx.is_delete(EntityKind.agent_category):
        return None
    active = [a for a in ctx.children(ctx.entity_id, EntityKind.agent) if _is_active_agent(a)]
    if not active:
        return None
    return HardBlock(
        rule_id="H10_CATEGORY_HAS_ACTIVE_AGENTS",
        reason="Category has active agents",
        message=f"{len(active)} active agent(s) belong to this category: {_names(active)}.",
        affected_entities=_refs(active),
    )


def status_downgrade_with_active_consumers(ctx: RuleContext) -> HardBlock | None:
    if not ctx.is_downgrade():
        return None
    mcp_id = ctx.entity_id if ctx.kind == EntityKind.mcp else ctx.parent_mcp_id()
    if mcp_id is None or mcp_id not in ctx.graph:
        return None
    consumers = ctx.active_consumers(mcp_id)
    if not consumers:
        return None
    return HardBlock(
        rule_id="H11_STATUS_DOWNGRADE_WITH_ACTIVE_CONSUMERS",
        reason="Active consumers assume this is built",
        message=(
            f"Moving from {ctx.config.built_status} to {ctx.new_status} would break "
            f"{len(consumers)} active consumer(s): {_names(consumers)}."
        ),
        affected_entities=_refs(consumers),
    )


def subdomain_has_critical_bridges(ctx: RuleContext) -> HardBlock | None:
    if not ctx.is_delete(EntityKind.subdomain):
        return None
    edges = [e for e in ctx.graph.touching(ctx.entity_id, EdgeKind.bridge) if e.critical]
    if not edges:
        return None
    others = [ctx.graph.nodes[e.other(ctx.entity_id)] for e in edges]
    return HardBlock(
        rule_id="H12_SUBDOMAIN_HAS_CRITICAL_BRIDGES",
        reason="Subdomain anchors critical bridges",
        message=f"{len(edges)} critical bridge(s) connect this subdomain to {_names(others)}.",
        affected_entities=_refs(others),
    )


# =============================================================================
# Soft rules
# =============================================================================


def unresolved_reference(ctx: RuleContext) -> SoftBlock | None:
    missing = ctx.unresolved_links()
    if not missing:
        return None
    return SoftBlock(
        rule_id="S0_UNRESOLVED_REFERENCE",
        warning="Some related records could not be found",
        impact=(
            f"{len(missing)} referenced record(s) are missing, "
            "so the dependency picture may be incomplete"
        ),
        affected_entities=missing,
    )


def in_progress_tool_delete(ctx: RuleContext) -> SoftBlock | None:
    if not ctx.is_delete(EntityKind.tool) or ctx.record.status_value != "in-progress":
        return None
    return SoftBlock(
        rule_id="S1_IN_PROGRESS_TOOL_DELETE",
        warning="Tool is currently being developed",
        impact="Development work will be lost",
        affected_entities=[ctx.record.ref()],
    )


def mcp_has_dependents(ctx: RuleContext) -> SoftBlock | None:
    if not ctx.is_delete(EntityKind.mcp):
        return None
    critical = {n.id for n in ctx.critical_dependents(ctx.entity_id)}
    dependents = [
        n for n in ctx.sources(ctx.entity_id, EdgeKind.mcp_dependency, EntityKind.mcp)
        if n.id not in critical
    ]
    if not dependents:
        return None
    return SoftBlock(
        rule_id="S2_MCP_HAS_DEPENDENTS",
        warning="Other MCPs depend on this",
        impact=f"{len(_unique(dependents))} MCPs will lose their dependency",
        affected_entities=_refs(dependents),
    )


def agent_has_collaborations(ctx: RuleContext) -> SoftBlock | None:
    if not ctx.is_delete(EntityKind.agent):
        return None
    edges = ctx.graph.touching(ctx.entity_id, EdgeKind.agent_collaboration)
    if not edges:
        return None
    partners = [ctx.graph.nodes[e.other(ctx.entity_id)] for e in edges]
    return SoftBlock(
        rule_id="S3_AGENT_HAS_COLLABORATIONS",
        warning="Agent has collaboration relationships",
        impact=f"{len(edges)} collaboration links will be broken",
        affected_entities=_refs(partners),
    )


def planned_workflow_delete(ctx: RuleContext) -> SoftBlock | None:
    if not ctx.is_delete(EntityKind.workflow) or ctx.record.status_value != "planned":
        return None
    return SoftBlock(
        rule_id="S4_PLANNED_WORKFLOW_DELETE",
        warning="Planned workflow will be removed",
        impact="Planning documentation will be lost",
        affected_entities=[ctx.record.ref()],
    )


def agent_used_by_workflow(ctx: RuleContext) -> SoftBlock | None:
    if not ctx.is_delete(EntityKind.agent):
        return None
    workflows = ctx.workflows_using(ctx.entity_id)
    if not workflows:
        return None
    return SoftBlock(
        rule_id="S5_AGENT_USED_BY_WORKFLOW",
        warning="Agent is assigned to workflows",
        impact=f"{len(workflows)} workflows will need agent reassignment",
        affected_entities=_refs(workflows),
    )


def mcp_used_by_workflow(ctx: RuleContext) -> SoftBlock | None:
    if not ctx.is_delete(EntityKind.mcp):
        return None
    workflows = [w for w in ctx.workflows_using(ctx.entity_id) if not ctx.is_active_workflow(w)]
    if not workflows:
        return None
    return SoftBlock(
        rule_id="S6_MCP_USED_BY_WORKFLOW",
        warning="MCP is linked to workflows",
        impact=f"{len(workflows)} workflows will lose MCP assignment",
        affected_entities=_refs(workflows),
    )


def subdomain_has_content(ctx: RuleContext) -> SoftBlock | None:
    if not ctx.is_delete(EntityKind.subdomain):
        return None
    mcps = ctx.children(ctx.entity_id, EntityKind.mcp)
    workflows = ctx.children(ctx.entity_id, EntityKind.workflow)
    if not mcps and not workflows:
        return None
    return SoftBlock(
        rule_id="S7_SUBDOMAIN_HAS_CONTENT",
        warning="Subdomain contains content",
        impact=f"{len(mcps)} MCPs and {len(workflows)} workflows will be deleted",
        affected_entities=_refs(mcps + workflows),
    )


def status_downgrade(ctx: RuleContext) -> SoftBlock | None:
    if not ctx.is_downgrade():
        return None
    return SoftBlock(
        rule_id="S8_STATUS_DOWNGRADE",
        warning="Downgrading production status",
        impact="This may affect systems expecting this to be production-ready",
        affected_entities=[ctx.record.ref()],
    )


def domain_has_content(ctx: RuleContext) -> SoftBlock | None:
    if not ctx.is_delete(EntityKind.domain):
        return None
    subdomains = ctx.children(ctx.entity_id, EntityKind.subdomain)
    if not subdomains:
        return None
    return SoftBlock(
        rule_id="S9_DOMAIN_HAS_CONTENT",
        warning="Domain contains subdomains",
        impact=f"{len(subdomains)} subdomains and everything below them will be deleted",
        affected_entities=_refs(subdomains),
    )


def mcp_has_inactive_agents(ctx: RuleContext) -> SoftBlock | None:
    if not ctx.is_delete(EntityKind.mcp):
        return None
    agents = [a for a in ctx.agents_using(ctx.entity_id) if not _is_active_agent(a)]
    if not agents:
        return None
    return SoftBlock(
        rule_id="S10_MCP_HAS_INACTIVE_AGENTS",
        warning="Inactive agents use this as their primary MCP",
        impact=f"{len(agents)} agents will lose their primary MCP",
        affected_entities=_refs(agents),
    )


def subdomain_has_bridges(ctx: RuleContext) -> SoftBlock | None:
    if not ctx.is_delete(EntityKind.subdomain):
        return None
    edges = [e for e in ctx.graph.touching(ctx.entity_id, EdgeKind.bridge) if not e.critical]
    if not edges:
        return None
    others = [ctx.graph.nodes[e.other(ctx.entity_id)] for e in edges]
    return SoftBlock(
        rule_id="S11_SUBDOMAIN_HAS_BRIDGES",
        warning="Subdomain has cross-domain bridges",
        impact=f"{len(edges)} bridges to {_names(others)} will be removed",
        affected_entities=_refs(others),
    )


# fields whose change alters what other records rely on
_CONTRACT_FIELDS = {
    "name", "code", "bridge_type", "dependency_type",
    "source_subdomain_id", "target_subdomain_id",
}


def contract_change(ctx: RuleContext) -> SoftBlock | None:
    if ctx.action == Action.delete:
        return None
    contract = _CONTRACT_FIELDS | set(ctx.record.parent_fields)
    changed = sorted(
        name for name, value in ctx.proposed_changes.items()
        if name in contract and getattr(ctx.record, name, None) != value
    )
    if not changed:
        return None

    if ctx.kind == EntityKind.bridge:
        related = [
            ctx.graph.nodes[i] for i in (ctx.record.source_id, ctx.record.target_id)
            if i in ctx.graph
        ]
    else:
        own_links = {edge.id for _, _, edge in ctx.record.parent_links()}
        related = [
            ctx.graph.nodes[e.other(ctx.entity_id)]
            for e in ctx.graph.touching(ctx.entity_id)
            if e.id not in own_links and e.other(ctx.entity_id) in ctx.graph
        ]
    if not related:
        return None
    return SoftBlock(
        rule_id="S12_CONTRACT_CHANGE",
        warning=f"Changing {', '.join(changed)} alters a contract other records rely on",
        impact=f"{len(_unique(related))} related records may need to be updated",
        affected_entities=_refs(related),
    )


def bridge_delete(ctx: RuleContext) -> SoftBlock | None:
    if not ctx.is_delete(EntityKind.bridge) or ctx.record.is_critical:
        return None
    return SoftBlock(
        rule_id="S13_BRIDGE_DELETE",
        warning="Cross-domain bridge will be removed",
        impact="Data or process flow between the two subdomains will no longer be tracked",
        affected_entities=[ctx.record.ref()],
    )


def category_has_agents(ctx: RuleContext) -> SoftBlock | None:
    if not ctx.is_delete(EntityKind.agent_category):
        return None
    inactive = [a for a in ctx.children(ctx.entity_id, EntityKind.agent) if not _is_active_agent(a)]
    if not inactive:
        return None
    return SoftBlock(
        rule_id="S14_CATEGORY_HAS_AGENTS",
        warning="Category still holds agents",
        impact=f"{len(inactive)} inactive agents will be deleted with the category",
        affected_entities=_refs(inactive),
    )


HARD_RULES: list[Callable[[RuleContext], HardBlock | None]] = [
    built_tool_delete,
    active_agent_delete,
    mcp_has_built_tools,
    critical_mcp_dependency,
    in_progress_workflow_delete,
    completed_workflow_delete,
    critical_bridge_delete,
    domain_has_built_content,
    mcp_has_active_consumers,
    category_has_active_agents,
    status_downgrade_with_active_consumers,
    subdomain_has_critical_bridges,
]

SOFT_RULES: list[Callable[[RuleContext], SoftBlock | None]] = [
    unresolved_reference,
    in_progress_tool_delete,
    mcp_has_dependents,
    agent_has_collaborations,
    planned_workflow_delete,
    agent_used_by_workflow,
    mcp_used_by_workflow,
    subdomain_has_content,
    status_downgrade,
    domain_has_content,
    mcp_has_inactive_agents,
    subdomain_has_bridges,
    contract_change,
    bridge_delete,
    category_has_agents,
]
