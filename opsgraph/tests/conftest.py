"""Shared fixtures: a small airline operations catalog held in memory."""

import pytest

from opsgraph.adapters.sinks import ListAuditSink
from opsgraph.models.entities import (
    MCP,
    Agent,
    AgentCategory,
    AgentCollaboration,
    CrossDomainBridge,
    Domain,
    MCPDependency,
    Subdomain,
    Tool,
    Workflow,
    WorkflowAgent,
    WorkflowMCP,
)
from opsgraph.service import OpsGraphService
from opsgraph.store.memory import InMemoryEntityStore


def build_catalog() -> InMemoryEntityStore:
    """
    Domains and subdomains:
        flight-ops: sd-planning, sd-ioc
        crew:       sd-roster
        customer:   sd-care
        ground:     sd-ramp, sd-isolated (no relations)

    Bridges: sd-planning -> sd-roster (critical), sd-ioc -> sd-care, sd-ioc -> sd-ramp
    MCP dependencies: ioc requires plan, plan requires weather,
        rebook requires ioc, ioc enhances roster
    """
    store = InMemoryEntityStore()
    store.add(
        Domain(id="flight-ops", name="Flight Operations", icon="plane", color="#1f6feb"),
        Domain(id="crew", name="Crew Management", icon="users"),
        Domain(id="customer", name="Customer Service"),
        Domain(id="ground", name="Ground Operations"),
        Subdomain(id="sd-planning", domain_id="flight-ops", name="Flight Planning"),
        Subdomain(id="sd-ioc", domain_id="flight-ops", name="Operations Control"),
        Subdomain(id="sd-roster", domain_id="crew", name="Crew Rostering"),
        Subdomain(id="sd-care", domain_id="customer", name="Disruption Care"),
        Subdomain(id="sd-ramp", domain_id="ground", name="Ramp Handling"),
        Subdomain(id="sd-isolated", domain_id="ground", name="Cargo Storage"),
        MCP(id="mcp-plan", subdomain_id="sd-planning", name="Flight Plan MCP", status="built"),
        MCP(id="mcp-weather", subdomain_id="sd-planning", name="Weather MCP", status="built"),
        MCP(id="mcp-ioc", subdomain_id="sd-ioc", name="IOC MCP", status="in-progress"),
        MCP(id="mcp-roster", subdomain_id="sd-roster", name="Roster MCP", status="built"),
        MCP(id="mcp-rebook", subdomain_id="sd-care", name="Rebooking MCP", status="planned"),
        MCP(id="mcp-legacy", subdomain_id="sd-ramp", name="Legacy Ramp MCP", status="planned"),
        MCP(id="mcp-orphan", subdomain_id="sd-ramp", name="Ramp Telemetry MCP", status="built"),
        Tool(id="tool-fuel", mcp_id="mcp-plan", name="calculate_fuel", status="built"),
        Tool(id="tool-delay", mcp_id="mcp-ioc", name="assign_delay_code", status="in-progress"),
        Tool(id="tool-metar", mcp_id="mcp-weather", name="get_metar", status="planned"),
        AgentCategory(id="OPS", name="Operations Agents"),
        AgentCategory(id="CX", name="Customer Agents"),
        Agent(
            id="agent-dispatch", code="OPS-001", name="Dispatch Assistant",
            category_id="OPS", mcp_id="mcp-plan", active=True, active_instances=2,
        ),
        Agent(
            id="agent-ioc", code="OPS-002", name="Disruption Coordinator",
            category_id="OPS", mcp_id="mcp-ioc", active=True, active_instances=0,
        ),
        Agent(
            id="agent-rebooker", code="CX-001", name="Rebooking Agent",
            category_id="CX", mcp_id="mcp-rebook", active=False,
        ),
        Workflow(id="wf-irops", subdomain_id="sd-ioc", name="IRROPS Recovery", status="in-progress"),
        Workflow(id="wf-legacy", subdomain_id="sd-ramp", name="Legacy Turn", status="planned"),
        Workflow(id="wf-care", subdomain_id="sd-care", name="Passenger Care", status="completed"),
        CrossDomainBridge(
            id="br-plan-roster", name="Schedule to roster",
            source_subdomain_id="sd-planning", target_subdomain_id="sd-roster",
            strength=9, is_critical=True,
        ),
        CrossDomainBridge(
            id="br-ioc-care", name="Disruption to care",
            source_subdomain_id="sd-ioc", target_subdomain_id="sd-care",
            bridge_type="process", strength=6,
        ),
        CrossDomainBridge(
            id="br-ioc-ramp", name="Delay feed to ramp",
            source_subdomain_id="sd-ioc", target_subdomain_id="sd-ramp", strength=4,
        ),
        MCPDependency(
            id="dep-ioc-plan", source_mcp_id="mcp-ioc", target_mcp_id="mcp-plan",
            dependency_type="requires", strength=9,
        ),
        MCPDependency(
            id="dep-plan-weather", source_mcp_id="mcp-plan", target_mcp_id="mcp-weather",
            dependency_type="requires", strength=8,
        ),
        MCPDependency(
            id="dep-rebook-ioc", source_mcp_id="mcp-rebook", target_mcp_id="mcp-ioc",
            dependency_type="requires", strength=7,
        ),
        MCPDependency(
            id="dep-ioc-roster", source_mcp_id="mcp-ioc", target_mcp_id="mcp-roster",
            dependency_type="enhances", strength=5,
        ),
        AgentCollaboration(
            id="collab-ioc-rebook", source_agent_id="agent-ioc",
            target_agent_id="agent-rebooker", bidirectional=True,
        ),
        WorkflowMCP(workflow_id="wf-irops", mcp_id="mcp-ioc"),
        WorkflowMCP(workflow_id="wf-irops", mcp_id="mcp-roster"),
        WorkflowMCP(workflow_id="wf-legacy", mcp_id="mcp-legacy"),
        WorkflowMCP(workflow_id="wf-care", mcp_id="mcp-rebook"),
        WorkflowAgent(workflow_id="wf-irops", agent_id="agent-ioc", role="coordinator"),
        WorkflowAgent(workflow_id="wf-care", agent_id="agent-rebooker"),
    )
    return store


@pytest.fixture
def catalog() -> InMemoryEntityStore:
    return build_catalog()


@pytest.fixture
def audit_sink() -> ListAuditSink:
    return ListAuditSink()


@pytest.fixture
def service(catalog, audit_sink) -> OpsGraphService:
    return OpsGraphService(catalog, audit_sink=audit_sink)
