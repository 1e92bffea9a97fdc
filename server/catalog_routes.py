"""API routes for loading catalog records.

A minimal upsert/read surface so a catalog can be seeded and inspected.
Deletes and edits go through the dependency gate instead.
"""

from typing import Any

import pydantic
from fastapi import APIRouter, Depends, HTTPException

from opsgraph.errors import ValidationError
from opsgraph.models.entities import RelationKind, parse_entity, parse_relation
from opsgraph.models.refs import EntityKind
from opsgraph.service import OpsGraphService
from server.state import get_service

router = APIRouter()


@router.get("/catalog/{kind}")
def list_entities(kind: str, service: OpsGraphService = Depends(get_service)) -> list[dict]:
    """list all records of one kind."""
    entity_kind = EntityKind.parse(kind)
    return [record.model_dump(mode="json") for record in service.store.list_entities(entity_kind)]


@router.get("/catalog/{kind}/{entity_id}")
def get_entity(kind: str, entity_id: str, service: OpsGraphService = Depends(get_service)) -> dict:
    entity_kind = EntityKind.parse(kind)
    record = service.store.get_entity(entity_kind, entity_id)
    if record is None:
        raise HTTPException(
            status_code=404, detail=f"Entity not found: {entity_kind.value} {entity_id}"
        )
    return record.model_dump(mode="json")


@router.put("/catalog/{kind}/{entity_id}")
def upsert_entity(
    kind: str,
    entity_id: str,
    body: dict[str, Any],
    service: OpsGraphService = Depends(get_service),
) -> dict:
    """create or replace a record. The path id wins over any id in the body."""
    try:
        record = parse_entity(kind, {**body, "id": entity_id})
    except pydantic.ValidationError as e:
        raise ValidationError(f"Invalid {kind} record: {e}") from e
    service.store.put_entity(record)
    return record.model_dump(mode="json")


@router.get("/relations/{kind}")
def list_relations(
    kind: str,
    source_id: str | None = None,
    target_id: str | None = None,
    service: OpsGraphService = Depends(get_service),
) -> list[dict]:
    relation_kind = RelationKind.parse(kind)
    rows = service.store.list_relations(relation_kind, source_id=source_id, target_id=target_id)
    return [row.model_dump(mode="json") for row in rows]


@router.put("/relations/{kind}/{relation_id}")
def upsert_relation(
    kind: str,
    relation_id: str,
    body: dict[str, Any],
    service: OpsGraphService = Depends(get_service),
) -> dict:
    try:
        record = parse_relation(kind, {**body, "id": relation_id})
    except pydantic.ValidationError as e:
        raise ValidationError(f"Invalid {kind} relation: {e}") from e
    service.store.put_relation(record)
    return record.model_dump(mode="json")
