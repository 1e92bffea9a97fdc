"""
OpsGraphService: the one object callers talk to.

Wires the entity store, dependency gate, analysis functions, explanation
service and audit sink together. Decisions are computed first; auditing
happens afterwards and never changes the decision.
"""

import logging
from typing import Any

from opsgraph.adapters.sinks import AuditSink, record_audit
from opsgraph.analysis.chain import dependency_chain
from opsgraph.analysis.criticality import rank_critical_mcps
from opsgraph.analysis.graph_builder import build_path_graph, build_subgraph
from opsgraph.analysis.impact import analyze_impact, domain_connection_matrix
from opsgraph.analysis.path_finder import find_path
from opsgraph.analysis.suggestions import suggest_bridges
from opsgraph.config import AnalysisConfig
from opsgraph.errors import ValidationError
from opsgraph.gate.explanation import ExplanationService
from opsgraph.gate.gate import DependencyGate
from opsgraph.models.audit import AuditAction, AuditEntry
from opsgraph.models.check_result import Action, BlockType, CheckResult, OverrideResult
from opsgraph.models.graph import GraphData, Path
from opsgraph.models.impact import (
    BridgeSuggestion,
    CriticalMCP,
    DependencyChain,
    DomainConnectionMatrix,
    ImpactAnalysis,
)
from opsgraph.models.refs import EntityKind
from opsgraph.store.base import EntityStore
from opsgraph.utils.identifiers import generate_audit_id, utc_timestamp

logger = logging.getLogger(__name__)

MAX_GRAPH_DEPTH = 5

# audit action recorded when an unblocked mutation is committed
_COMMIT_ACTIONS = {
    Action.delete: AuditAction.delete,
    Action.edit: AuditAction.update,
    Action.status_change: AuditAction.status_change,
}


class OpsGraphService:
    def __init__(
        self,
        store: EntityStore,
        config: AnalysisConfig | None = None,
        audit_sink: AuditSink | None = None,
        explainer: ExplanationService | None = None,
    ) -> None:
        self.store = store
        self.config = config or AnalysisConfig()
        self.gate = DependencyGate(store, self.config)
        self.audit_sink = audit_sink
        self.explainer = explainer or ExplanationService(timeout=self.config.explanation_timeout)

    # =========================================================================
    # Gate
    # =========================================================================

    def check_action(
        self,
        entity_type: EntityKind | str,
        entity_id: str,
        action: Action | str,
        proposed_changes: dict[str, Any] | None = None,
        actor: str | None = None,
        reason: str | None = None,
    ) -> CheckResult:
        """Run the gate and report hard blocks to the audit sink."""
        result = self.gate.check_action(entity_type, entity_id, action, proposed_changes)
        if result.block_type == BlockType.hard:
            self._audit(result, AuditAction.hard_block, actor=actor, reason=reason)
        return result

    def check_delete(self, entity_type: EntityKind | str, entity_id: str) -> CheckResult:
        return self.check_action(entity_type, entity_id, Action.delete)

    def check_edit(
        self, entity_type: EntityKind | str, entity_id: str, proposed_changes: dict[str, Any]
    ) -> CheckResult:
        return self.check_action(entity_type, entity_id, Action.edit, proposed_changes)

    def check_status_change(
        self, entity_type: EntityKind | str, entity_id: str, new_status: str
    ) -> CheckResult:
        return self.check_action(
            entity_type, entity_id, Action.status_change, {"status": new_status}
        )

    def proceed_with_soft_block(
        self,
        entity_type: EntityKind | str,
        entity_id: str,
        action: Action | str,
        reason: str,
        actor: str,
        proposed_changes: dict[str, Any] | None = None,
    ) -> OverrideResult:
        """Commit a mutation that is at most soft-blocked.

        The reason is checked before anything else, then the full check is
        re-run against the current store. A hard block at that point ends
        the attempt without touching the store.

        Raises:
            ValidationError: reason too short or actor missing
            EntityNotFound: the entity does not exist
        """
        reason = (reason or "").strip()
        minimum = self.config.min_reason_length
        if len(reason) < minimum:
            raise ValidationError(
                f"Reason must be at least {minimum} characters to override soft block"
            )
        if not actor or not actor.strip():
            raise ValidationError("Actor is required to override soft block")

        result = self.check_action(
            entity_type, entity_id, action, proposed_changes, actor=actor, reason=reason
        )
        if result.hard_blocks:
            return OverrideResult(
                success=False,
                error="Hard blocks detected. Cannot proceed with override.",
                check_result=result,
            )

        self.store.apply_action(
            result.entity.type, entity_id, result.action, result.proposed_changes
        )
        audit_action = (
            AuditAction.soft_block_override
            if result.block_type == BlockType.soft
            else _COMMIT_ACTIONS[result.action]
        )
        entry = self._audit(result, audit_action, actor=actor, reason=reason)
        logger.info(
            "override by %s on %s %s: %s", actor, result.entity.type.value, entity_id, reason
        )
        return OverrideResult(success=True, audit_id=entry.audit_id, check_result=result)

    async def explain(self, result: CheckResult) -> str:
        return await self.explainer.explain(result)

    def _audit(
        self,
        result: CheckResult,
        action: AuditAction,
        actor: str | None = None,
        reason: str | None = None,
    ) -> AuditEntry:
        entry = AuditEntry(
            audit_id=generate_audit_id(),
            created_at=utc_timestamp(),
            entity_type=result.entity.type,
            entity_id=result.entity.id,
            entity_name=result.entity.name,
            action=action,
            actor=actor,
            reason=reason,
            block_type=result.block_type,
            rule_ids=result.active_rules,
            affected_entities=result.affected_entities,
            dependency_context={
                "action": result.action.value,
                "proposed_changes": result.proposed_changes,
                "node_count": len(result.dependency_graph.nodes),
                "edge_count": len(result.dependency_graph.edges),
            },
        )
        record_audit(self.audit_sink, entry)
        return entry

    # =========================================================================
    # Analysis
    # =========================================================================

    def dependency_graph(
        self, entity_type: EntityKind | str, entity_id: str, depth: int = 2
    ) -> GraphData:
        if depth < 1 or depth > MAX_GRAPH_DEPTH:
            raise ValidationError(f"depth must be between 1 and {MAX_GRAPH_DEPTH}")
        kind = EntityKind.parse(entity_type)
        return build_subgraph(self.store, (kind, entity_id), depth=depth).to_graph_data()

    def analyze_impact(self, subdomain_id: str) -> ImpactAnalysis:
        return analyze_impact(self.store, subdomain_id)

    def find_path(self, source_id: str, target_id: str) -> Path | None:
        graph = build_path_graph(self.store)
        return find_path(
            graph, source_id, target_id, stable_order=self.config.stable_path_order
        )

    def rank_critical_mcps(self, limit: int | None = None) -> list[CriticalMCP]:
        return rank_critical_mcps(self.store, self.config, limit=limit)

    def dependency_chain(self, mcp_id: str) -> DependencyChain:
        return dependency_chain(self.store, mcp_id)

    def suggest_bridges(self) -> list[BridgeSuggestion]:
        return suggest_bridges(self.store)

    def domain_connection_matrix(self) -> DomainConnectionMatrix:
        return domain_connection_matrix(self.store)
