"""seed a sample airline operations catalog through the opsgraph api."""

import os

import httpx

from opsgraph.utils.identifiers import pair_id

BASE_URL = os.getenv("OPSGRAPH_API_URL", "http://localhost:8000/api")

DOMAINS = [
    {"id": "flight-ops", "name": "Flight Operations", "icon": "plane", "color": "#1f6feb"},
    {"id": "crew", "name": "Crew Management", "icon": "users", "color": "#8957e5"},
    {"id": "ground-ops", "name": "Ground Operations", "icon": "truck", "color": "#d29922"},
    {"id": "maintenance", "name": "Maintenance & Engineering", "icon": "wrench", "color": "#da3633"},
    {"id": "customer", "name": "Customer Service", "icon": "headset", "color": "#2ea043"},
]

SUBDOMAINS = [
    {"id": "flight-planning", "domain_id": "flight-ops", "name": "Flight Planning"},
    {"id": "ops-control", "domain_id": "flight-ops", "name": "Operations Control"},
    {"id": "crew-scheduling", "domain_id": "crew", "name": "Crew Scheduling"},
    {"id": "crew-tracking", "domain_id": "crew", "name": "Crew Tracking"},
    {"id": "turnaround", "domain_id": "ground-ops", "name": "Aircraft Turnaround"},
    {"id": "line-maintenance", "domain_id": "maintenance", "name": "Line Maintenance"},
    {"id": "disruption-care", "domain_id": "customer", "name": "Disruption Care"},
]

MCPS = [
    {"id": "mcp-flight-plan", "subdomain_id": "flight-planning", "name": "Flight Plan MCP",
     "status": "built", "owner": "flight-ops-platform", "target_quarter": "2025-Q1"},
    {"id": "mcp-weather", "subdomain_id": "flight-planning", "name": "Weather Briefing MCP",
     "status": "built"},
    {"id": "mcp-ioc", "subdomain_id": "ops-control", "name": "IOC Disruption MCP",
     "status": "in-progress", "target_quarter": "2025-Q3"},
    {"id": "mcp-crew-roster", "subdomain_id": "crew-scheduling", "name": "Crew Roster MCP",
     "status": "built"},
    {"id": "mcp-crew-legality", "subdomain_id": "crew-tracking", "name": "Crew Legality MCP",
     "status": "in-progress"},
    {"id": "mcp-turn-tracker", "subdomain_id": "turnaround", "name": "Turn Tracker MCP",
     "status": "planned", "target_quarter": "2026-Q1"},
    {"id": "mcp-mel", "subdomain_id": "line-maintenance", "name": "MEL Deferral MCP",
     "status": "built"},
    {"id": "mcp-rebooking", "subdomain_id": "disruption-care", "name": "Rebooking MCP",
     "status": "planned"},
]

TOOLS = [
    {"id": "tool-file-plan", "mcp_id": "mcp-flight-plan", "name": "file_flight_plan", "status": "built"},
    {"id": "tool-fuel-calc", "mcp_id": "mcp-flight-plan", "name": "calculate_fuel", "status": "built"},
    {"id": "tool-metar", "mcp_id": "mcp-weather", "name": "get_metar", "status": "built"},
    {"id": "tool-delay-code", "mcp_id": "mcp-ioc", "name": "assign_delay_code", "status": "in-progress"},
    {"id": "tool-roster-lookup", "mcp_id": "mcp-crew-roster", "name": "lookup_roster", "status": "built"},
    {"id": "tool-fdp-check", "mcp_id": "mcp-crew-legality", "name": "check_fdp_limits", "status": "in-progress"},
    {"id": "tool-mel-lookup", "mcp_id": "mcp-mel", "name": "lookup_mel_item", "status": "built"},
    {"id": "tool-rebook", "mcp_id": "mcp-rebooking", "name": "rebook_passenger", "status": "planned"},
]

AGENT_CATEGORIES = [
    {"id": "OPS", "name": "Operations Agents"},
    {"id": "CREW", "name": "Crew Agents"},
    {"id": "CX", "name": "Customer Agents"},
]

AGENTS = [
    {"id": "agent-dispatcher", "code": "OPS-001", "name": "Dispatch Assistant",
     "category_id": "OPS", "mcp_id": "mcp-flight-plan", "active": True, "active_instances": 2,
     "autonomy_level": 2},
    {"id": "agent-ioc", "code": "OPS-002", "name": "Disruption Coordinator",
     "category_id": "OPS", "mcp_id": "mcp-ioc", "active": True, "active_instances": 0},
    {"id": "agent-crew-recovery", "code": "CREW-001", "name": "Crew Recovery Agent",
     "category_id": "CREW", "mcp_id": "mcp-crew-roster", "active": True, "active_instances": 1},
    {"id": "agent-rebooker", "code": "CX-001", "name": "Rebooking Agent",
     "category_id": "CX", "mcp_id": "mcp-rebooking", "active": False},
]

WORKFLOWS = [
    {"id": "wf-irops", "subdomain_id": "ops-control", "name": "IRROPS Recovery", "status": "in-progress"},
    {"id": "wf-aog", "subdomain_id": "line-maintenance", "name": "AOG Response", "status": "planned"},
    {"id": "wf-pax-care", "subdomain_id": "disruption-care", "name": "Passenger Care", "status": "draft"},
]

RELATIONS = {
    "bridge": [
        {"id": "br-plan-crew", "source_subdomain_id": "flight-planning",
         "target_subdomain_id": "crew-scheduling", "bridge_type": "data_flow",
         "name": "Schedule to roster", "strength": 9, "is_critical": True},
        {"id": "br-ioc-care", "source_subdomain_id": "ops-control",
         "target_subdomain_id": "disruption-care", "bridge_type": "process",
         "name": "Disruption to passenger care", "strength": 7},
        {"id": "br-ioc-turn", "source_subdomain_id": "ops-control",
         "target_subdomain_id": "turnaround", "bridge_type": "data_flow",
         "name": "Delay feed to ramp", "strength": 5},
        {"id": "br-mx-ioc", "source_subdomain_id": "line-maintenance",
         "target_subdomain_id": "ops-control", "bridge_type": "resource",
         "name": "Aircraft availability", "strength": 8, "is_critical": True},
    ],
    "mcp_dependency": [
        {"id": "dep-ioc-plan", "source_mcp_id": "mcp-ioc", "target_mcp_id": "mcp-flight-plan",
         "dependency_type": "requires", "strength": 9},
        {"id": "dep-plan-weather", "source_mcp_id": "mcp-flight-plan", "target_mcp_id": "mcp-weather",
         "dependency_type": "requires", "strength": 8},
        {"id": "dep-legality-roster", "source_mcp_id": "mcp-crew-legality",
         "target_mcp_id": "mcp-crew-roster", "dependency_type": "feeds_data", "strength": 6},
        {"id": "dep-ioc-roster", "source_mcp_id": "mcp-ioc", "target_mcp_id": "mcp-crew-roster",
         "dependency_type": "enhances", "strength": 5},
        {"id": "dep-rebook-ioc", "source_mcp_id": "mcp-rebooking", "target_mcp_id": "mcp-ioc",
         "dependency_type": "requires", "strength": 7},
    ],
    "agent_collaboration": [
        {"id": "collab-ioc-crew", "source_agent_id": "agent-ioc",
         "target_agent_id": "agent-crew-recovery", "collaboration_type": "coordination",
         "strength": 8, "bidirectional": True},
        {"id": "collab-ioc-rebook", "source_agent_id": "agent-ioc",
         "target_agent_id": "agent-rebooker", "collaboration_type": "delegation", "strength": 6},
    ],
    "workflow_mcp": [
        {"workflow_id": "wf-irops", "mcp_id": "mcp-ioc"},
        {"workflow_id": "wf-irops", "mcp_id": "mcp-crew-roster"},
        {"workflow_id": "wf-aog", "mcp_id": "mcp-mel"},
        {"workflow_id": "wf-aog", "mcp_id": "mcp-turn-tracker"},
        {"workflow_id": "wf-pax-care", "mcp_id": "mcp-rebooking"},
    ],
    "workflow_agent": [
        {"workflow_id": "wf-irops", "agent_id": "agent-ioc", "role": "coordinator"},
        {"workflow_id": "wf-irops", "agent_id": "agent-crew-recovery"},
        {"workflow_id": "wf-pax-care", "agent_id": "agent-rebooker"},
    ],
}


def put_entity(client: httpx.Client, kind: str, record: dict) -> None:
    response = client.put(f"{BASE_URL}/catalog/{kind}/{record['id']}", json=record)
    response.raise_for_status()


def put_relation(client: httpx.Client, kind: str, record: dict) -> None:
    # junction rows are keyed by their endpoints
    relation_id = record.get("id") or pair_id(
        record["workflow_id"], record.get("mcp_id") or record["agent_id"]
    )
    response = client.put(f"{BASE_URL}/relations/{kind}/{relation_id}", json=record)
    response.raise_for_status()


def main() -> None:
    with httpx.Client(timeout=10.0) as client:
        for kind, records in [
            ("domain", DOMAINS),
            ("subdomain", SUBDOMAINS),
            ("mcp", MCPS),
            ("tool", TOOLS),
            ("agent_category", AGENT_CATEGORIES),
            ("agent", AGENTS),
            ("workflow", WORKFLOWS),
        ]:
            for record in records:
                put_entity(client, kind, record)
            print(f"seeded {len(records)} {kind} records")

        for kind, records in RELATIONS.items():
            for record in records:
                put_relation(client, kind, record)
            print(f"seeded {len(records)} {kind} relations")


if __name__ == "__main__":
    main()
