"""In-memory entity store used by tests and scripts."""

import logging
from typing import Any

from opsgraph.errors import ValidationError
from opsgraph.models.check_result import Action
from opsgraph.models.entities import (
    CHILD_LINKS,
    CatalogRecord,
    CrossDomainBridge,
    RelationKind,
    RelationRecord,
)
from opsgraph.models.refs import EntityKind
from opsgraph.store.base import (
    collect_delete_plan,
    merge_changes,
    require_entity,
    touching_relations,
)

logger = logging.getLogger(__name__)


class InMemoryEntityStore:
    """Dict-backed store. Iteration order is insertion order."""

    def __init__(self) -> None:
        self._entities: dict[EntityKind, dict[str, CatalogRecord]] = {
            kind: {} for kind in EntityKind if kind != EntityKind.bridge
        }
        self._relations: dict[RelationKind, dict[str, RelationRecord]] = {
            kind: {} for kind in RelationKind
        }

    # -- writes used to load a catalog --

    def put_entity(self, record: CatalogRecord) -> CatalogRecord:
        if isinstance(record, CrossDomainBridge):
            self._relations[RelationKind.bridge][record.id] = record
        else:
            self._entities[record.kind][record.id] = record
        return record

    def put_relation(self, record: RelationRecord) -> RelationRecord:
        self._relations[record.relation_kind][record.id] = record
        return record

    def add(self, *records: CatalogRecord | RelationRecord) -> None:
        """Put any mix of entities and relations."""
        for record in records:
            if isinstance(record, CatalogRecord):
                self.put_entity(record)
            else:
                self.put_relation(record)

    def delete_relation(self, kind: RelationKind, relation_id: str) -> bool:
        return self._relations[kind].pop(relation_id, None) is not None

    # -- EntityStore --

    def get_entity(self, kind: EntityKind, entity_id: str) -> CatalogRecord | None:
        if kind == EntityKind.bridge:
            return self._relations[RelationKind.bridge].get(entity_id)
        return self._entities[kind].get(entity_id)

    def list_entities(self, kind: EntityKind) -> list[CatalogRecord]:
        if kind == EntityKind.bridge:
            return list(self._relations[RelationKind.bridge].values())
        return list(self._entities[kind].values())

    def list_relations(
        self,
        kind: RelationKind,
        *,
        source_id: str | None = None,
        target_id: str | None = None,
    ) -> list[RelationRecord]:
        return [
            row for row in self._relations[kind].values()
            if (source_id is None or row.source_id == source_id)
            and (target_id is None or row.target_id == target_id)
        ]

    def list_children(self, parent_kind: EntityKind, parent_id: str) -> list[CatalogRecord]:
        children = []
        for child_kind, field_name in CHILD_LINKS.get(parent_kind, []):
            children.extend(
                record for record in self._entities[child_kind].values()
                if getattr(record, field_name) == parent_id
            )
        return children

    def apply_action(
        self,
        kind: EntityKind,
        entity_id: str,
        action: Action,
        changes: dict[str, Any] | None = None,
    ) -> None:
        record = require_entity(self, kind, entity_id)

        if action == Action.delete:
            doomed, detach = collect_delete_plan(self, kind, entity_id)
            for child, field_name in detach:
                self.put_entity(child.model_copy(update={field_name: None}))
            for doomed_kind, doomed_id in doomed:
                for row in touching_relations(self, doomed_kind, doomed_id):
                    self.delete_relation(row.relation_kind, row.id)
                if doomed_kind == EntityKind.bridge:
                    self.delete_relation(RelationKind.bridge, doomed_id)
                else:
                    self._entities[doomed_kind].pop(doomed_id, None)
            logger.info("deleted %s %s (%d records)", kind.value, entity_id, len(doomed))
            return

        if action == Action.status_change and not (changes or {}).get("status"):
            raise ValidationError("status_change requires a 'status' in changes")
        self.put_entity(merge_changes(record, changes))
        logger.info("applied %s to %s %s", action.value, kind.value, entity_id)
