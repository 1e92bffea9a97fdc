"""Gate client SDK for calling the opsgraph server from other services.

A catalog editor asks before it mutates:
result = client.check_delete("mcp", "mcp-crew-roster")
"""

from __future__ import annotations

from typing import Any

import httpx

from opsgraph.errors import EntityNotFound, ValidationError
from opsgraph.models.check_result import Action, CheckResult, OverrideResult
from opsgraph.models.graph import GraphData, Path
from opsgraph.models.impact import (
    BridgeSuggestion,
    CriticalMCP,
    DependencyChain,
    DomainConnectionMatrix,
    ImpactAnalysis,
)
from opsgraph.models.refs import EntityKind


class GateClientError(Exception):
    """Raised when the server cannot be reached or fails."""
    pass


class GateClient:
    """Thin httpx wrapper around the dependency and cross-domain API."""

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Args:
            base_url: Base URL of the opsgraph server
            timeout: HTTP request timeout in seconds
            transport: optional httpx transport, mainly for tests
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        allow_400: bool = False,
    ) -> Any:
        url = f"{self.base_url}/api{path}"
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.request(method, url, json=json, params=params)
        except httpx.RequestError as e:
            raise GateClientError(
                f"Failed to connect to server at {self.base_url}: {e}"
            ) from e

        if response.status_code == 404:
            detail = _detail(response)
            raise EntityNotFound(*_not_found_parts(detail, path))
        if response.status_code == 400 and not allow_400:
            raise ValidationError(_detail(response))
        if response.status_code >= 500:
            raise GateClientError(
                f"Server error {response.status_code} for {method} {path}: {_detail(response)}"
            )
        if response.status_code > 400:
            raise GateClientError(f"Unexpected status {response.status_code}: {_detail(response)}")
        return response.json()

    # -- dependency gate --

    def check_delete(self, entity_type: EntityKind | str, entity_id: str) -> CheckResult:
        data = self._request(
            "POST", "/dependencies/check-delete",
            json={"entity_type": _kind(entity_type), "entity_id": entity_id},
        )
        return CheckResult.model_validate(data)

    def check_edit(
        self, entity_type: EntityKind | str, entity_id: str, proposed_changes: dict[str, Any]
    ) -> CheckResult:
        data = self._request(
            "POST", "/dependencies/check-edit",
            json={
                "entity_type": _kind(entity_type),
                "entity_id": entity_id,
                "proposed_changes": proposed_changes,
            },
        )
        return CheckResult.model_validate(data)

    def check_status_change(
        self, entity_type: EntityKind | str, entity_id: str, new_status: str
    ) -> CheckResult:
        data = self._request(
            "POST", "/dependencies/check-status-change",
            json={"entity_type": _kind(entity_type), "entity_id": entity_id, "new_status": new_status},
        )
        return CheckResult.model_validate(data)

    def proceed_with_soft_block(
        self,
        entity_type: EntityKind | str,
        entity_id: str,
        action: Action | str,
        reason: str,
        actor: str,
        proposed_changes: dict[str, Any] | None = None,
    ) -> OverrideResult:
        """Commit past soft blocks.

        A hard block comes back as OverrideResult(success=False), not an error.
        """
        data = self._request(
            "POST", "/dependencies/proceed-with-soft-block",
            json={
                "entity_type": _kind(entity_type),
                "entity_id": entity_id,
                "action": getattr(action, "value", action),
                "reason": reason,
                "actor": actor,
                "proposed_changes": proposed_changes,
            },
            allow_400=True,
        )
        if isinstance(data, dict) and "check_result" in data:
            return OverrideResult.model_validate(data)
        raise ValidationError(data.get("detail") if isinstance(data, dict) else str(data))

    def explain(
        self,
        entity_type: EntityKind | str,
        entity_id: str,
        action: Action | str = Action.delete,
        proposed_changes: dict[str, Any] | None = None,
    ) -> str:
        data = self._request(
            "POST", "/dependencies/explain",
            json={
                "entity_type": _kind(entity_type),
                "entity_id": entity_id,
                "action": getattr(action, "value", action),
                "proposed_changes": proposed_changes,
            },
        )
        return data["explanation"]

    def dependency_graph(
        self, entity_type: EntityKind | str, entity_id: str, depth: int = 2
    ) -> GraphData:
        data = self._request(
            "GET", f"/dependencies/graph/{_kind(entity_type)}/{entity_id}",
            params={"depth": depth},
        )
        return GraphData.model_validate(data)

    # -- cross-domain analysis --

    def analyze_impact(self, subdomain_id: str) -> ImpactAnalysis:
        data = self._request("GET", f"/cross-domain/impact/{subdomain_id}")
        return ImpactAnalysis.model_validate(data)

    def find_path(self, source_id: str, target_id: str) -> Path | None:
        data = self._request(
            "GET", "/cross-domain/path",
            params={"source_id": source_id, "target_id": target_id},
        )
        if data is None:
            return None
        return Path.model_validate(data)

    def critical_mcps(self, limit: int | None = None) -> list[CriticalMCP]:
        params = {"limit": limit} if limit is not None else None
        data = self._request("GET", "/cross-domain/critical-mcps", params=params)
        return [CriticalMCP.model_validate(item) for item in data]

    def dependency_chain(self, mcp_id: str) -> DependencyChain:
        data = self._request("GET", f"/cross-domain/mcps/{mcp_id}/chain")
        return DependencyChain.model_validate(data)

    def suggest_bridges(self) -> list[BridgeSuggestion]:
        data = self._request("GET", "/cross-domain/suggestions")
        return [BridgeSuggestion.model_validate(item) for item in data]

    def domain_connection_matrix(self) -> DomainConnectionMatrix:
        data = self._request("GET", "/cross-domain/matrix")
        return DomainConnectionMatrix.model_validate(data)


def _kind(entity_type: EntityKind | str) -> str:
    return getattr(entity_type, "value", entity_type)


def _detail(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text
    if isinstance(data, dict) and "detail" in data:
        return str(data["detail"])
    return str(data)


def _not_found_parts(detail: str, path: str) -> tuple[str, str]:
    """Recover (type, id) from 'Entity not found: <type> <id>' details."""
    prefix = "Entity not found: "
    if detail.startswith(prefix):
        parts = detail[len(prefix):].split(" ", 1)
        if len(parts) == 2:
            return parts[0], parts[1]
    return "resource", path
