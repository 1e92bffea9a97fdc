"""Direct dependency chain of a single MCP."""

from opsgraph.models.entities import RelationKind
from opsgraph.models.impact import DependencyChain
from opsgraph.models.refs import EntityKind, EntityRef
from opsgraph.store.base import EntityStore, require_entity


def dependency_chain(store: EntityStore, mcp_id: str) -> DependencyChain:
    """List the MCPs that depend on mcp_id and the MCPs it depends on.

    Endpoints missing from the store are still listed, named by id.
    """
    mcp = require_entity(store, EntityKind.mcp, mcp_id)

    def ref(entity_id: str) -> EntityRef:
        record = store.get_entity(EntityKind.mcp, entity_id)
        if record is None:
            return EntityRef(id=entity_id, type=EntityKind.mcp, name=entity_id)
        return record.ref()

    dependents = [
        ref(row.source_id)
        for row in store.list_relations(RelationKind.mcp_dependency, target_id=mcp_id)
    ]
    dependencies = [
        ref(row.target_id)
        for row in store.list_relations(RelationKind.mcp_dependency, source_id=mcp_id)
    ]
    return DependencyChain(
        mcp=mcp.ref(),
        dependents=dependents,
        dependencies=dependencies,
        total=len(dependents) + len(dependencies),
    )
