"""
Dependency gate decisions.

A CheckResult is built through CheckResult.from_blocks so that the
allowed flag and block type always agree with the collected blocks.
"""

from enum import Enum
from typing import Any, Self

from pydantic import BaseModel, model_validator

from opsgraph.models.graph import GraphData
from opsgraph.models.refs import EntityRef


class Action(str, Enum):
    delete = "delete"
    edit = "edit"
    status_change = "status_change"


class BlockType(str, Enum):
    """Decision severity, ordered none < soft < hard."""

    none = "none"
    soft = "soft"
    hard = "hard"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]


_SEVERITY = {BlockType.none: 0, BlockType.soft: 1, BlockType.hard: 2}


class HardBlock(BaseModel):
    """A fatal dependency violation. There is no override path."""

    model_config = {"extra": "forbid"}

    rule_id: str
    reason: str
    message: str
    affected_entities: list[EntityRef] = []


class SoftBlock(BaseModel):
    """A warning that may be overridden with a written justification."""

    model_config = {"extra": "forbid"}

    rule_id: str
    warning: str
    impact: str
    affected_entities: list[EntityRef] = []
    requires_reason: bool = True


class CheckResult(BaseModel):
    model_config = {"extra": "forbid"}

    entity: EntityRef
    action: Action
    allowed: bool
    block_type: BlockType
    hard_blocks: list[HardBlock] = []
    soft_blocks: list[SoftBlock] = []
    dependency_graph: GraphData = GraphData()
    proposed_changes: dict[str, Any] | None = None

    @classmethod
    def from_blocks(
        cls,
        entity: EntityRef,
        action: Action,
        hard_blocks: list[HardBlock],
        soft_blocks: list[SoftBlock],
        dependency_graph: GraphData,
        proposed_changes: dict[str, Any] | None = None,
    ) -> "CheckResult":
        """Derive allowed/block_type from the blocks; hard dominates soft."""
        if hard_blocks:
            block_type = BlockType.hard
        elif soft_blocks:
            block_type = BlockType.soft
        else:
            block_type = BlockType.none
        return cls(
            entity=entity,
            action=action,
            allowed=block_type == BlockType.none,
            block_type=block_type,
            hard_blocks=hard_blocks,
            soft_blocks=soft_blocks,
            dependency_graph=dependency_graph,
            proposed_changes=proposed_changes,
        )

    @model_validator(mode="after")
    def validate_decision(self) -> Self:
        """Reject results whose flags contradict their blocks."""
        if self.hard_blocks and self.block_type != BlockType.hard:
            raise ValueError("results with hard blocks must have block_type 'hard'")
        if not self.hard_blocks and self.soft_blocks and self.block_type != BlockType.soft:
            raise ValueError("results with only soft blocks must have block_type 'soft'")
        if not self.hard_blocks and not self.soft_blocks and self.block_type != BlockType.none:
            raise ValueError("results without blocks must have block_type 'none'")
        if self.allowed != (self.block_type == BlockType.none):
            raise ValueError("allowed must be true exactly when block_type is 'none'")

        node_ids = self.dependency_graph.node_ids()
        for block in [*self.hard_blocks, *self.soft_blocks]:
            for ref in block.affected_entities:
                if ref.id not in node_ids:
                    raise ValueError(
                        f"{block.rule_id} references {ref.id} which is not in the dependency graph"
                    )
        return self

    @property
    def active_rules(self) -> list[str]:
        """Rule ids that fired, hard blocks first, in evaluation order."""
        return [b.rule_id for b in self.hard_blocks] + [b.rule_id for b in self.soft_blocks]

    @property
    def affected_entities(self) -> list[EntityRef]:
        seen = set()
        refs = []
        for block in [*self.hard_blocks, *self.soft_blocks]:
            for ref in block.affected_entities:
                if ref.id not in seen:
                    seen.add(ref.id)
                    refs.append(ref)
        return refs


class OverrideResult(BaseModel):
    """Outcome of proceeding past soft blocks."""

    success: bool
    audit_id: str | None = None
    error: str | None = None
    check_result: CheckResult
