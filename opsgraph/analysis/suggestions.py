"""Bridge suggestions mined from workflow co-occurrence."""

from opsgraph.models.entities import MCP, RelationKind, Subdomain
from opsgraph.models.impact import BridgeSuggestion
from opsgraph.models.refs import EntityKind
from opsgraph.store.base import EntityStore

SUGGESTION_CONFIDENCE = 0.7


def suggest_bridges(store: EntityStore) -> list[BridgeSuggestion]:
    """Suggest bridges between subdomains whose MCPs power the same workflow.

    Only pairs in different domains are suggested. Pairs that are already
    bridged, in either direction, are skipped, and each pair is suggested
    once, for the first workflow it was seen in.
    """
    mcps = {m.id: m for m in store.list_entities(EntityKind.mcp) if isinstance(m, MCP)}
    subdomains = {
        s.id: s for s in store.list_entities(EntityKind.subdomain) if isinstance(s, Subdomain)
    }

    seen = {
        frozenset((bridge.source_id, bridge.target_id))
        for bridge in store.list_relations(RelationKind.bridge)
    }
    suggestions = []
    for workflow in store.list_entities(EntityKind.workflow):
        members: list[Subdomain] = []
        for link in store.list_relations(RelationKind.workflow_mcp, source_id=workflow.id):
            mcp = mcps.get(link.target_id)
            subdomain = subdomains.get(mcp.subdomain_id) if mcp else None
            if subdomain is not None:
                members.append(subdomain)

        for i, left in enumerate(members):
            for right in members[i + 1:]:
                if left.domain_id == right.domain_id:
                    continue
                pair = frozenset((left.id, right.id))
                if pair in seen:
                    continue
                seen.add(pair)
                suggestions.append(
                    BridgeSuggestion(
                        source_subdomain_id=left.id,
                        target_subdomain_id=right.id,
                        reason=f"Co-occur in workflow: {workflow.name}",
                        confidence=SUGGESTION_CONFIDENCE,
                    )
                )
    return suggestions
