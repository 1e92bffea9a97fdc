"""API routes for cross-domain analysis."""

from fastapi import APIRouter, Depends

from opsgraph.models.graph import Path
from opsgraph.models.impact import (
    BridgeSuggestion,
    CriticalMCP,
    DependencyChain,
    DomainConnectionMatrix,
    ImpactAnalysis,
)
from opsgraph.service import OpsGraphService
from server.state import get_service

router = APIRouter()


@router.get("/cross-domain/impact/{subdomain_id}")
def impact(subdomain_id: str, service: OpsGraphService = Depends(get_service)) -> ImpactAnalysis:
    """domains reached by a subdomain's bridges and MCP dependencies."""
    return service.analyze_impact(subdomain_id)


@router.get("/cross-domain/path")
def path(
    source_id: str, target_id: str, service: OpsGraphService = Depends(get_service)
) -> Path | None:
    """shortest bridge/dependency path between two subdomains, null if none."""
    return service.find_path(source_id, target_id)


@router.get("/cross-domain/critical-mcps")
def critical_mcps(
    limit: int | None = None, service: OpsGraphService = Depends(get_service)
) -> list[CriticalMCP]:
    return service.rank_critical_mcps(limit=limit)


@router.get("/cross-domain/mcps/{mcp_id}/chain")
def chain(mcp_id: str, service: OpsGraphService = Depends(get_service)) -> DependencyChain:
    return service.dependency_chain(mcp_id)


@router.get("/cross-domain/suggestions")
def suggestions(service: OpsGraphService = Depends(get_service)) -> list[BridgeSuggestion]:
    """bridges suggested by workflows that span domains."""
    return service.suggest_bridges()


@router.get("/cross-domain/matrix")
def matrix(service: OpsGraphService = Depends(get_service)) -> DomainConnectionMatrix:
    return service.domain_connection_matrix()
