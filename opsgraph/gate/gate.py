"""
Dependency Gate: decides whether a catalog mutation may go ahead.

Checks are synchronous and side-effect free. Recording the decision
(audit) is the caller's post-decision step, see OpsGraphService.
"""

import logging
from typing import Any

from opsgraph.analysis.graph_builder import build_subgraph
from opsgraph.config import AnalysisConfig
from opsgraph.errors import ValidationError
from opsgraph.gate.rules import HARD_RULES, RULE_DEPTH, SOFT_RULES, RuleContext
from opsgraph.models.check_result import Action, CheckResult, HardBlock, SoftBlock
from opsgraph.models.refs import EntityKind
from opsgraph.store.base import EntityStore, merge_changes, require_entity

logger = logging.getLogger(__name__)


def parse_action(value: Action | str) -> Action:
    if isinstance(value, Action):
        return value
    try:
        return Action(str(value).strip().lower())
    except ValueError:
        valid = ", ".join(action.value for action in Action)
        raise ValidationError(f"Invalid action: {value!r}. Must be one of: {valid}") from None


class DependencyGate:
    """Evaluates hard and soft block rules against an entity's neighbourhood."""

    def __init__(self, store: EntityStore, config: AnalysisConfig | None = None) -> None:
        self.store = store
        self.config = config or AnalysisConfig()

    def check_action(
        self,
        entity_type: EntityKind | str,
        entity_id: str,
        action: Action | str,
        proposed_changes: dict[str, Any] | None = None,
    ) -> CheckResult:
        """Run every rule for one proposed mutation.

        Raises:
            ValidationError: unknown entity type or action, or changes that
                would not produce a valid record
            EntityNotFound: the entity does not exist
        """
        kind = EntityKind.parse(entity_type)
        action = parse_action(action)
        record = require_entity(self.store, kind, entity_id)

        changes = dict(proposed_changes or {})
        if action == Action.status_change and "status" not in changes:
            raise ValidationError("status_change requires a new status")
        if action != Action.delete:
            # reject changes the store would refuse before judging them
            merge_changes(record, changes)

        depth = max(self.config.neighborhood_depth, RULE_DEPTH)
        graph = build_subgraph(self.store, (kind, entity_id), depth=depth)
        ctx = RuleContext(
            record=record,
            action=action,
            graph=graph,
            config=self.config,
            proposed_changes=changes,
        )

        hard_blocks: list[HardBlock] = []
        for rule in HARD_RULES:
            block = rule(ctx)
            if block is not None:
                hard_blocks.append(block)
        soft_blocks: list[SoftBlock] = []
        for rule in SOFT_RULES:
            block = rule(ctx)
            if block is not None:
                soft_blocks.append(block)

        result = CheckResult.from_blocks(
            entity=record.ref(),
            action=action,
            hard_blocks=hard_blocks,
            soft_blocks=soft_blocks,
            dependency_graph=graph.to_graph_data(),
            proposed_changes=changes or None,
        )
        logger.info(
            "%s %s %s -> %s %s",
            action.value, kind.value, entity_id, result.block_type.value, result.active_rules,
        )
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
