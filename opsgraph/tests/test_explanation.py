"""Tests for decision explanations and the LLM fallback."""

import asyncio

import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel

from opsgraph.gate.explanation import ExplanationService, format_explanation
from opsgraph.gate.gate import DependencyGate


class SlowLLM:
    """Chat model stand-in that never answers in time."""

    async def ainvoke(self, messages):
        await asyncio.sleep(5)
        return "too late"


class FailingLLM:
    async def ainvoke(self, messages):
        raise RuntimeError("rate limited")


@pytest.fixture
def gate(catalog) -> DependencyGate:
    return DependencyGate(catalog)


class TestFormatExplanation:
    def test_hard_and_soft_sections(self, gate):
        """Hard blocks list their message, warnings list warning and impact."""
        text = format_explanation(gate.check_delete("mcp", "mcp-ioc"))
        lines = text.splitlines()
        assert lines[0] == 'Action: delete on mcp "IOC MCP"'
        assert "BLOCKED - Cannot proceed" in lines
        assert "Hard Blocks:" in lines
        assert any(line.startswith("  • H9_MCP_HAS_ACTIVE_CONSUMERS: ") for line in lines)
        assert "Warnings:" in lines
        assert "  • S2_MCP_HAS_DEPENDENTS: Other MCPs depend on this" in lines
        assert "    Impact: 1 MCPs will lose their dependency" in lines

    def test_soft_outcome(self, gate):
        text = format_explanation(gate.check_delete("mcp", "mcp-legacy"))
        assert "WARNING - Requires justification" in text
        assert "Hard Blocks:" not in text

    def test_allowed_outcome(self, gate):
        text = format_explanation(gate.check_delete("mcp", "mcp-orphan"))
        assert text.splitlines()[-1] == "ALLOWED"
        assert "Warnings:" not in text

    def test_deterministic(self, gate):
        result = gate.check_delete("subdomain", "sd-ioc")
        assert format_explanation(result) == format_explanation(result)


class TestExplanationService:
    def test_fallback_without_llm(self, gate):
        """Without a model the deterministic text is returned."""
        result = gate.check_delete("mcp", "mcp-ioc")
        service = ExplanationService()
        assert service.enabled is False
        assert asyncio.run(service.explain(result)) == format_explanation(result)

    def test_llm_answer_used(self, gate):
        llm = FakeListChatModel(responses=["Relink the disruption coordinator first."])
        service = ExplanationService(llm=llm)
        text = asyncio.run(service.explain(gate.check_delete("mcp", "mcp-ioc")))
        assert service.enabled is True
        assert text == "Relink the disruption coordinator first."

    def test_timeout_falls_back(self, gate):
        result = gate.check_delete("mcp", "mcp-ioc")
        service = ExplanationService(llm=SlowLLM(), timeout=0.05)
        assert asyncio.run(service.explain(result)) == format_explanation(result)

    def test_llm_error_falls_back(self, gate):
        result = gate.check_delete("mcp", "mcp-legacy")
        service = ExplanationService(llm=FailingLLM())
        assert asyncio.run(service.explain(result)) == format_explanation(result)

    def test_blank_answer_falls_back(self, gate):
        result = gate.check_delete("mcp", "mcp-legacy")
        service = ExplanationService(llm=FakeListChatModel(responses=["   "]))
        assert asyncio.run(service.explain(result)) == format_explanation(result)

    def test_from_env_without_key(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        assert ExplanationService.from_env().enabled is False
