"""Tests for the gate client SDK against a mocked transport."""

import json

import httpx
import pytest

from opsgraph.errors import EntityNotFound, ValidationError
from opsgraph.models.check_result import BlockType
from opsgraph.sdk.client import GateClient, GateClientError


def _handler_for(service):
    """Answer client requests the way the server routes do."""

    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        body = json.loads(request.content) if request.content else {}
        try:
            if path == "/api/dependencies/check-delete":
                result = service.check_delete(body["entity_type"], body["entity_id"])
                return httpx.Response(200, json=result.model_dump(mode="json"))
            if path == "/api/dependencies/proceed-with-soft-block":
                result = service.proceed_with_soft_block(
                    body["entity_type"], body["entity_id"], body["action"],
                    body["reason"], body["actor"], body.get("proposed_changes"),
                )
                status = 200 if result.success else 400
                return httpx.Response(status, json=result.model_dump(mode="json"))
            if path == "/api/cross-domain/impact/sd-ioc":
                return httpx.Response(200, json=service.analyze_impact("sd-ioc").model_dump(mode="json"))
            if path == "/api/cross-domain/path":
                found = service.find_path(
                    request.url.params["source_id"], request.url.params["target_id"]
                )
                payload = found.model_dump(mode="json") if found else None
                return httpx.Response(
                    200, content=json.dumps(payload), headers={"content-type": "application/json"}
                )
            if path == "/api/cross-domain/critical-mcps":
                limit = int(request.url.params["limit"])
                ranked = service.rank_critical_mcps(limit=limit)
                return httpx.Response(200, json=[item.model_dump(mode="json") for item in ranked])
            if path == "/api/cross-domain/suggestions":
                suggestions = service.suggest_bridges()
                return httpx.Response(200, json=[item.model_dump(mode="json") for item in suggestions])
            if path == "/api/cross-domain/matrix":
                return httpx.Response(200, json=service.domain_connection_matrix().model_dump(mode="json"))
        except EntityNotFound as e:
            return httpx.Response(404, json={"detail": str(e)})
        except ValidationError as e:
            return httpx.Response(400, json={"detail": str(e)})
        return httpx.Response(500, json={"detail": "boom"})

    return handler


@pytest.fixture
def client(service) -> GateClient:
    return GateClient(base_url="http://gate.test/", transport=httpx.MockTransport(_handler_for(service)))


class TestGateClient:
    def test_check_delete(self, client):
        result = client.check_delete("mcp", "mcp-ioc")
        assert result.block_type == BlockType.hard
        assert result.active_rules[0] == "H9_MCP_HAS_ACTIVE_CONSUMERS"

    def test_not_found(self, client):
        with pytest.raises(EntityNotFound) as exc_info:
            client.check_delete("mcp", "mcp-nope")
        assert exc_info.value.entity_type == "mcp"
        assert exc_info.value.entity_id == "mcp-nope"

    def test_bad_input(self, client):
        with pytest.raises(ValidationError):
            client.check_delete("gizmo", "mcp-ioc")

    def test_override_success(self, client, catalog):
        result = client.proceed_with_soft_block(
            "mcp", "mcp-legacy", "delete", "migrating to new MCP version", "ops.lead"
        )
        assert result.success is True
        assert result.audit_id

    def test_override_hard_block_is_result(self, client):
        """A hard block comes back as an unsuccessful result, not an exception."""
        result = client.proceed_with_soft_block(
            "mcp", "mcp-ioc", "delete", "migrating to new MCP version", "ops.lead"
        )
        assert result.success is False
        assert result.check_result.block_type == BlockType.hard

    def test_override_short_reason(self, client):
        with pytest.raises(ValidationError):
            client.proceed_with_soft_block("mcp", "mcp-legacy", "delete", "short", "ops.lead")

    def test_analysis_calls(self, client):
        assert client.analyze_impact("sd-ioc").total_impact == 4
        assert client.find_path("sd-care", "sd-ramp").distance == 2
        assert client.find_path("sd-isolated", "sd-ioc") is None
        assert [item.node.id for item in client.critical_mcps(limit=1)] == ["mcp-ioc"]

    def test_suggestions_and_matrix(self, client):
        suggestions = client.suggest_bridges()
        assert suggestions[0].target_subdomain_id == "sd-roster"
        assert client.domain_connection_matrix().matrix["flight-ops"]["crew"] == 1

    def test_server_error(self, client):
        with pytest.raises(GateClientError):
            client.dependency_chain("mcp-ioc")

    def test_connection_error(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = GateClient(transport=httpx.MockTransport(refuse))
        with pytest.raises(GateClientError) as exc_info:
            client.check_delete("mcp", "mcp-ioc")
        assert "Failed to connect" in str(exc_info.value)
