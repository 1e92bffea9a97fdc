"""API routes for reading the audit log."""

from fastapi import APIRouter, Depends, HTTPException

from opsgraph.models.audit import AuditEntry
from server.state import get_audit_sink

router = APIRouter()


@router.get("/audit")
def list_audit(
    entity_id: str | None = None,
    limit: int = 100,
    sink=Depends(get_audit_sink),
) -> list[AuditEntry]:
    """list audit entries, newest first."""
    if sink is None or not hasattr(sink, "list_entries"):
        raise HTTPException(status_code=501, detail="Audit log is not queryable")
    return sink.list_entries(entity_id=entity_id, limit=limit)
