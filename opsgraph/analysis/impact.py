"""
Impact Analyzer: which domains a subdomain reaches.

Bridges and MCP dependency rows are followed one hop out of the subject
subdomain; every distinct domain on the far side counts once toward
total_impact.
"""

import logging

from opsgraph.models.entities import (
    MCP,
    CrossDomainBridge,
    Domain,
    MCPDependency,
    RelationKind,
    Subdomain,
)
from opsgraph.models.impact import AffectedDomain, DomainConnectionMatrix, ImpactAnalysis
from opsgraph.models.refs import EntityKind
from opsgraph.store.base import EntityStore, require_entity

logger = logging.getLogger(__name__)


class _DomainResolver:
    """Memoized subdomain -> domain lookups for one analysis call."""

    def __init__(self, store: EntityStore) -> None:
        self.store = store
        self._subdomains: dict[str, Subdomain | None] = {}
        self._domains: dict[str, Domain | None] = {}

    def subdomain(self, subdomain_id: str) -> Subdomain | None:
        if subdomain_id not in self._subdomains:
            self._subdomains[subdomain_id] = self.store.get_entity(
                EntityKind.subdomain, subdomain_id
            )
        return self._subdomains[subdomain_id]

    def domain_of(self, subdomain_id: str) -> Domain | None:
        subdomain = self.subdomain(subdomain_id)
        if subdomain is None:
            logger.warning("subdomain %s referenced but not found", subdomain_id)
            return None
        if subdomain.domain_id not in self._domains:
            self._domains[subdomain.domain_id] = self.store.get_entity(
                EntityKind.domain, subdomain.domain_id
            )
        return self._domains[subdomain.domain_id]


def analyze_impact(store: EntityStore, subdomain_id: str) -> ImpactAnalysis:
    """Aggregate the domains touched by a subdomain's bridges and MCP dependencies.

    Each bridge or dependency row counts once toward its far-side domain's
    bridge_count. Rows between two MCPs of the subject subdomain are
    ignored.

    Raises:
        EntityNotFound: if the subdomain does not exist
    """
    subject = require_entity(store, EntityKind.subdomain, subdomain_id)
    resolver = _DomainResolver(store)

    outgoing = store.list_relations(RelationKind.bridge, source_id=subdomain_id)
    incoming = store.list_relations(RelationKind.bridge, target_id=subdomain_id)

    mcp_ids = [
        child.id for child in store.list_children(EntityKind.subdomain, subdomain_id)
        if child.kind == EntityKind.mcp
    ]
    own_mcps = set(mcp_ids)
    dependencies: dict[str, MCPDependency] = {}
    for mcp_id in mcp_ids:
        for row in store.list_relations(RelationKind.mcp_dependency, source_id=mcp_id):
            dependencies.setdefault(row.id, row)
    for mcp_id in mcp_ids:
        for row in store.list_relations(RelationKind.mcp_dependency, target_id=mcp_id):
            dependencies.setdefault(row.id, row)

    affected: dict[str, AffectedDomain] = {}

    def register(domain: Domain | None) -> None:
        if domain is None:
            return
        if domain.id not in affected:
            affected[domain.id] = AffectedDomain(
                id=domain.id, name=domain.name, icon=domain.icon, color=domain.color
            )
        affected[domain.id].bridge_count += 1

    for bridge in outgoing:
        register(resolver.domain_of(bridge.target_id))
    for bridge in incoming:
        register(resolver.domain_of(bridge.source_id))

    for row in dependencies.values():
        if row.source_id in own_mcps and row.target_id in own_mcps:
            continue
        other_id = row.target_id if row.source_id in own_mcps else row.source_id
        other = store.get_entity(EntityKind.mcp, other_id)
        if not isinstance(other, MCP):
            logger.warning("dependency %s references missing mcp %s", row.id, other_id)
            continue
        register(resolver.domain_of(other.subdomain_id))

    bridges: list[CrossDomainBridge] = [*outgoing, *incoming]
    return ImpactAnalysis(
        subdomain=subject.ref(),
        affected_domains=list(affected.values()),
        bridges=bridges,
        mcp_dependencies=list(dependencies.values()),
        total_impact=len(affected),
    )


def domain_connection_matrix(store: EntityStore) -> DomainConnectionMatrix:
    """Count bridges from each domain to each other domain.

    matrix[source_domain_id][target_domain_id] follows bridge direction.
    Domains are ordered by name.
    """
    domains = sorted(store.list_entities(EntityKind.domain), key=lambda d: d.name)
    matrix = {d.id: {other.id: 0 for other in domains} for d in domains}
    resolver = _DomainResolver(store)

    for bridge in store.list_relations(RelationKind.bridge):
        source = resolver.domain_of(bridge.source_id)
        target = resolver.domain_of(bridge.target_id)
        if source is None or target is None:
            continue
        if source.id in matrix and target.id in matrix[source.id]:
            matrix[source.id][target.id] += 1

    return DomainConnectionMatrix(domains=[d.ref() for d in domains], matrix=matrix)
