"""Audit entries written after gate decisions."""

from enum import Enum
from typing import Any

from pydantic import BaseModel

from opsgraph.models.check_result import BlockType
from opsgraph.models.refs import EntityKind, EntityRef


class AuditAction(str, Enum):
    soft_block_override = "soft_block_override"
    hard_block = "hard_block"
    delete = "delete"
    update = "update"
    status_change = "status_change"


class AuditEntry(BaseModel):
    """A record of a hard-blocked attempt or a justified override."""

    model_config = {"extra": "forbid"}

    audit_id: str
    created_at: str
    entity_type: EntityKind
    entity_id: str
    entity_name: str
    action: AuditAction
    actor: str | None = None
    reason: str | None = None
    block_type: BlockType
    rule_ids: list[str] = []
    affected_entities: list[EntityRef] = []
    dependency_context: dict[str, Any] = {}
