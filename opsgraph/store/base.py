"""
Entity store protocol and the mutation helpers shared by implementations.

The analysis layer only reads through this protocol. apply_action is the
single write path and is used once an override has been accepted.
"""

from typing import Any, Protocol

import pydantic

from opsgraph.errors import EntityNotFound, ValidationError
from opsgraph.models.check_result import Action
from opsgraph.models.entities import (
    CHILD_LINKS,
    ENTITY_MODELS,
    ENTITY_RELATIONS,
    CatalogRecord,
    RelationKind,
    RelationRecord,
)
from opsgraph.models.refs import EntityKind


class EntityStore(Protocol):
    """Read access to the catalog plus one commit hook."""

    def get_entity(self, kind: EntityKind, entity_id: str) -> CatalogRecord | None:
        ...

    def list_entities(self, kind: EntityKind) -> list[CatalogRecord]:
        ...

    def list_relations(
        self,
        kind: RelationKind,
        *,
        source_id: str | None = None,
        target_id: str | None = None,
    ) -> list[RelationRecord]:
        ...

    def list_children(self, parent_kind: EntityKind, parent_id: str) -> list[CatalogRecord]:
        ...

    def apply_action(
        self,
        kind: EntityKind,
        entity_id: str,
        action: Action,
        changes: dict[str, Any] | None = None,
    ) -> None:
        ...


def merge_changes(record: CatalogRecord, changes: dict[str, Any] | None) -> CatalogRecord:
    """Return a re-validated copy of record with changes applied.

    The id is immutable; pydantic errors surface as ValidationError.
    """
    changes = dict(changes or {})
    if "id" in changes and changes["id"] != record.id:
        raise ValidationError("Entity id cannot be changed")
    data = record.model_dump()
    data.update(changes)
    try:
        return type(record).model_validate(data)
    except pydantic.ValidationError as e:
        raise ValidationError(f"Invalid changes for {record.kind.value} {record.id}: {e}") from e


def collect_delete_plan(
    store: EntityStore, kind: EntityKind, entity_id: str
) -> tuple[list[tuple[EntityKind, str]], list[tuple[CatalogRecord, str]]]:
    """Work out what a delete touches.

    Returns (entities to delete, depth first with the target last) and
    (child records whose optional foreign key must be cleared). Required
    foreign keys cascade; optional ones, like an agent's primary MCP, are
    detached.
    """
    doomed: list[tuple[EntityKind, str]] = []
    detach: list[tuple[CatalogRecord, str]] = []

    def visit(current_kind: EntityKind, current_id: str) -> None:
        for child_kind, field_name in CHILD_LINKS.get(current_kind, []):
            model = ENTITY_MODELS[child_kind]
            required = model.model_fields[field_name].is_required()
            for child in store.list_children(current_kind, current_id):
                if child.kind != child_kind or getattr(child, field_name) != current_id:
                    continue
                if required:
                    visit(child_kind, child.id)
                else:
                    detach.append((child, field_name))
        if (current_kind, current_id) not in doomed:
            doomed.append((current_kind, current_id))

    visit(kind, entity_id)
    # a detached record that is itself being deleted needs no update
    doomed_set = set(doomed)
    detach = [(child, f) for child, f in detach if (child.kind, child.id) not in doomed_set]
    return doomed, detach


def touching_relations(
    store: EntityStore, kind: EntityKind, entity_id: str
) -> list[RelationRecord]:
    """Relation rows with entity_id on either side."""
    rows: dict[tuple[RelationKind, str], RelationRecord] = {}
    for relation_kind in ENTITY_RELATIONS.get(kind, []):
        for row in store.list_relations(relation_kind, source_id=entity_id):
            rows[(relation_kind, row.id)] = row
        for row in store.list_relations(relation_kind, target_id=entity_id):
            rows[(relation_kind, row.id)] = row
    return list(rows.values())


def require_entity(store: EntityStore, kind: EntityKind, entity_id: str) -> CatalogRecord:
    record = store.get_entity(kind, entity_id)
    if record is None:
        raise EntityNotFound(kind, entity_id)
    return record
