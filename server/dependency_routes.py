"""API routes for the dependency gate.

Check endpoints only compute decisions. proceed-with-soft-block is the one
endpoint that mutates the catalog, and only after re-running the check.
"""

from typing import Any

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from opsgraph.models.check_result import CheckResult, OverrideResult
from opsgraph.models.graph import GraphData
from opsgraph.service import OpsGraphService
from server.state import get_service

router = APIRouter()


class CheckDeleteRequest(BaseModel):
    """request body for a delete check."""

    entity_type: str
    entity_id: str


class CheckEditRequest(BaseModel):
    entity_type: str
    entity_id: str
    proposed_changes: dict[str, Any] = {}


class CheckStatusChangeRequest(BaseModel):
    entity_type: str
    entity_id: str
    new_status: str


class ProceedRequest(BaseModel):
    """request body for overriding soft blocks."""

    entity_type: str
    entity_id: str
    action: str
    reason: str
    actor: str
    proposed_changes: dict[str, Any] | None = None


class ExplainRequest(BaseModel):
    entity_type: str
    entity_id: str
    action: str = "delete"
    proposed_changes: dict[str, Any] | None = None


class ExplainResponse(BaseModel):
    check_result: CheckResult
    explanation: str
    llm_enabled: bool


@router.post("/dependencies/check-delete")
def check_delete(
    request: CheckDeleteRequest, service: OpsGraphService = Depends(get_service)
) -> CheckResult:
    """check whether an entity can be deleted."""
    return service.check_delete(request.entity_type, request.entity_id)


@router.post("/dependencies/check-edit")
def check_edit(
    request: CheckEditRequest, service: OpsGraphService = Depends(get_service)
) -> CheckResult:
    return service.check_edit(request.entity_type, request.entity_id, request.proposed_changes)


@router.post("/dependencies/check-status-change")
def check_status_change(
    request: CheckStatusChangeRequest, service: OpsGraphService = Depends(get_service)
) -> CheckResult:
    return service.check_status_change(request.entity_type, request.entity_id, request.new_status)


@router.post("/dependencies/proceed-with-soft-block", response_model=OverrideResult)
def proceed_with_soft_block(
    request: ProceedRequest, service: OpsGraphService = Depends(get_service)
):
    """commit a soft-blocked mutation with a justification.

    Returns 400 with the override result when the re-check finds a hard block.
    """
    result = service.proceed_with_soft_block(
        request.entity_type,
        request.entity_id,
        request.action,
        request.reason,
        request.actor,
        request.proposed_changes,
    )
    if not result.success:
        return JSONResponse(status_code=400, content=result.model_dump(mode="json"))
    return result


@router.post("/dependencies/explain")
async def explain(
    request: ExplainRequest, service: OpsGraphService = Depends(get_service)
) -> ExplainResponse:
    """check an action and explain the decision in prose."""
    result = await run_in_threadpool(
        service.check_action,
        request.entity_type,
        request.entity_id,
        request.action,
        request.proposed_changes,
    )
    text = await service.explain(result)
    return ExplainResponse(
        check_result=result, explanation=text, llm_enabled=service.explainer.enabled
    )


@router.get("/dependencies/graph/{entity_type}/{entity_id}")
def dependency_graph(
    entity_type: str,
    entity_id: str,
    depth: int = 2,
    service: OpsGraphService = Depends(get_service),
) -> GraphData:
    """neighbourhood graph of an entity, depth 1 to 5."""
    return service.dependency_graph(entity_type, entity_id, depth)
