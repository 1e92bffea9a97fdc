"""Tests for catalog records, graph types and the CheckResult decision rules."""

import pydantic
import pytest

from opsgraph.errors import ValidationError
from opsgraph.models.check_result import (
    Action,
    BlockType,
    CheckResult,
    HardBlock,
    SoftBlock,
)
from opsgraph.models.entities import (
    Agent,
    AgentCollaboration,
    CrossDomainBridge,
    MCPDependency,
    RelationKind,
    Tool,
    WorkflowAgent,
    WorkflowMCP,
    parse_entity,
    parse_relation,
)
from opsgraph.models.graph import EdgeKind, GraphData, Node
from opsgraph.models.refs import EntityKind, EntityRef
from opsgraph.utils.identifiers import pair_id


class TestCheckResultDecision:
    """allowed and block_type always follow from the blocks."""

    def _make_graph(self, *ids: str) -> GraphData:
        return GraphData(nodes=[Node(id=i, kind=EntityKind.mcp, name=i) for i in ids])

    def _ref(self, entity_id: str) -> EntityRef:
        return EntityRef(id=entity_id, type=EntityKind.mcp, name=entity_id)

    def _hard(self, *ids: str) -> HardBlock:
        return HardBlock(
            rule_id="H9_MCP_HAS_ACTIVE_CONSUMERS",
            reason="in use",
            message="in use",
            affected_entities=[self._ref(i) for i in ids],
        )

    def _soft(self, *ids: str) -> SoftBlock:
        return SoftBlock(
            rule_id="S2_MCP_HAS_DEPENDENTS",
            warning="depended on",
            impact="dependents lose a dependency",
            affected_entities=[self._ref(i) for i in ids],
        )

    def test_no_blocks_is_allowed(self):
        """No blocks means allowed with block_type none."""
        result = CheckResult.from_blocks(
            self._ref("m1"), Action.delete, [], [], self._make_graph("m1")
        )
        assert result.allowed is True
        assert result.block_type == BlockType.none

    def test_soft_only_is_soft(self):
        """Only soft blocks gives a soft, disallowed result."""
        result = CheckResult.from_blocks(
            self._ref("m1"), Action.delete, [], [self._soft("m2")], self._make_graph("m1", "m2")
        )
        assert result.allowed is False
        assert result.block_type == BlockType.soft

    def test_hard_dominates_soft(self):
        """Any hard block makes the result hard, soft blocks are kept."""
        result = CheckResult.from_blocks(
            self._ref("m1"),
            Action.delete,
            [self._hard("m2")],
            [self._soft("m3")],
            self._make_graph("m1", "m2", "m3"),
        )
        assert result.block_type == BlockType.hard
        assert result.allowed is False
        assert result.active_rules == ["H9_MCP_HAS_ACTIVE_CONSUMERS", "S2_MCP_HAS_DEPENDENTS"]

    def test_rejects_allowed_with_hard_block(self):
        """A hand-built result cannot claim allowed while carrying hard blocks."""
        with pytest.raises(pydantic.ValidationError) as exc_info:
            CheckResult(
                entity=self._ref("m1"),
                action=Action.delete,
                allowed=True,
                block_type=BlockType.hard,
                hard_blocks=[self._hard("m1")],
                dependency_graph=self._make_graph("m1"),
            )
        assert "allowed" in str(exc_info.value)

    def test_rejects_wrong_block_type(self):
        """Soft blocks alone cannot be reported as hard."""
        with pytest.raises(pydantic.ValidationError):
            CheckResult(
                entity=self._ref("m1"),
                action=Action.delete,
                allowed=False,
                block_type=BlockType.hard,
                soft_blocks=[self._soft("m1")],
                dependency_graph=self._make_graph("m1"),
            )

    def test_affected_entities_must_be_in_graph(self):
        """Every referenced entity must appear in the dependency graph."""
        with pytest.raises(pydantic.ValidationError) as exc_info:
            CheckResult.from_blocks(
                self._ref("m1"), Action.delete, [self._hard("ghost")], [], self._make_graph("m1")
            )
        assert "ghost" in str(exc_info.value)

    def test_affected_entities_deduplicated(self):
        """affected_entities lists each entity once across all blocks."""
        result = CheckResult.from_blocks(
            self._ref("m1"),
            Action.delete,
            [self._hard("m2")],
            [self._soft("m2", "m3")],
            self._make_graph("m1", "m2", "m3"),
        )
        assert [ref.id for ref in result.affected_entities] == ["m2", "m3"]

    def test_severity_order(self):
        """none < soft < hard."""
        assert BlockType.none.severity < BlockType.soft.severity < BlockType.hard.severity


class TestEntityKind:
    def test_parse_is_case_insensitive(self):
        """Wire names are accepted in any case."""
        assert EntityKind.parse("MCP") == EntityKind.mcp
        assert EntityKind.parse(" agent_category ") == EntityKind.agent_category

    def test_parse_unknown_kind(self):
        """Unknown kinds raise ValidationError listing the valid ones."""
        with pytest.raises(ValidationError) as exc_info:
            EntityKind.parse("gizmo")
        assert "mcp" in str(exc_info.value)

    def test_relation_kind_parse(self):
        assert RelationKind.parse("Workflow_MCP") == RelationKind.workflow_mcp
        with pytest.raises(ValidationError):
            RelationKind.parse("friendship")


class TestRecords:
    """Records and their projections into nodes and edges."""

    def test_junction_rows_get_pair_ids(self):
        """Workflow junction rows without an id are keyed by their endpoints."""
        link = WorkflowMCP(workflow_id="wf-1", mcp_id="mcp-1")
        assert link.id == pair_id("wf-1", "mcp-1") == "wf-1:mcp-1"
        assert WorkflowAgent(workflow_id="wf-1", agent_id="a-1").id == "wf-1:a-1"

    def test_explicit_id_is_kept(self):
        link = WorkflowMCP(id="custom", workflow_id="wf-1", mcp_id="mcp-1")
        assert link.id == "custom"

    def test_bridge_edge_is_undirected(self):
        """Bridges become undirected edges carrying strength and criticality."""
        bridge = CrossDomainBridge(
            id="br-1", name="Roster feed",
            source_subdomain_id="sd-a", target_subdomain_id="sd-b",
            strength=8, is_critical=True,
        )
        edge = bridge.to_edge()
        assert edge.kind == EdgeKind.bridge
        assert edge.directed is False
        assert edge.weight == 8
        assert edge.critical is True
        assert edge.label == "data_flow"

    def test_dependency_edge_is_directed(self):
        """An MCP dependency points from the dependent to its dependency."""
        edge = MCPDependency(
            id="d-1", source_mcp_id="mcp-a", target_mcp_id="mcp-b", dependency_type="feeds_data"
        ).to_edge()
        assert edge.directed is True
        assert (edge.source_id, edge.target_id) == ("mcp-a", "mcp-b")
        assert edge.label == "feeds_data"

    def test_bidirectional_collaboration(self):
        collab = AgentCollaboration(
            id="c-1", source_agent_id="a", target_agent_id="b", bidirectional=True
        )
        assert collab.to_edge().directed is False

    def test_agent_links(self):
        """An agent belongs to its category and uses its primary MCP."""
        agent = Agent(id="a-1", code="OPS-1", name="Dispatcher", category_id="OPS", mcp_id="mcp-1")
        links = {(kind, parent_id): edge for kind, parent_id, edge in agent.parent_links()}
        usage = links[(EntityKind.mcp, "mcp-1")]
        belongs = links[(EntityKind.agent_category, "OPS")]
        assert usage.kind == EdgeKind.usage
        assert (usage.source_id, usage.target_id) == ("a-1", "mcp-1")
        assert belongs.label == "belongs_to"

    def test_agent_without_mcp_has_no_usage_link(self):
        agent = Agent(id="a-1", code="OPS-1", name="Dispatcher", category_id="OPS")
        assert [kind for kind, _, _ in agent.parent_links()] == [EntityKind.agent_category]

    def test_is_running(self):
        """Only active agents with live instances are running."""
        assert Agent(
            id="a", code="c", name="n", category_id="OPS", active=True, active_instances=1
        ).is_running
        assert not Agent(
            id="a", code="c", name="n", category_id="OPS", active=False, active_instances=3
        ).is_running
        assert not Agent(id="a", code="c", name="n", category_id="OPS").is_running

    def test_parse_entity(self):
        record = parse_entity("tool", {"id": "t-1", "name": "get_metar", "mcp_id": "mcp-1"})
        assert isinstance(record, Tool)
        assert record.status_value == "planned"

    def test_parse_entity_rejects_unknown_fields(self):
        with pytest.raises(pydantic.ValidationError):
            parse_entity("tool", {"id": "t-1", "name": "x", "mcp_id": "m", "colour": "red"})

    def test_parse_entity_rejects_bad_status(self):
        with pytest.raises(pydantic.ValidationError):
            parse_entity("mcp", {"id": "m", "name": "x", "subdomain_id": "s", "status": "shipped"})

    def test_parse_relation(self):
        row = parse_relation("mcp_dependency", {
            "id": "d-1", "source_mcp_id": "a", "target_mcp_id": "b",
        })
        assert isinstance(row, MCPDependency)
        assert row.dependency_type.value == "requires"

    def test_strength_bounds(self):
        """Strength is 1 to 10."""
        with pytest.raises(pydantic.ValidationError):
            MCPDependency(id="d", source_mcp_id="a", target_mcp_id="b", strength=11)
