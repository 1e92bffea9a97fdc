"""
Turning gate decisions into text.

format_explanation is the deterministic rendering. ExplanationService asks
a chat model for a friendlier version and falls back to the deterministic
text whenever the model is missing, slow or failing.
"""

import asyncio
import logging
import os
from typing import Any

from langchain_core.messages import HumanMessage, SystemMessage

from opsgraph.config import AnalysisConfig
from opsgraph.models.check_result import BlockType, CheckResult

logger = logging.getLogger(__name__)

OUTCOME_LINES = {
    BlockType.hard: "BLOCKED - Cannot proceed",
    BlockType.soft: "WARNING - Requires justification",
    BlockType.none: "ALLOWED",
}

SYSTEM_PROMPT = (
    "You are an airline operations expert reviewing changes to a catalog of "
    "operational domains, MCP servers, tools, agents and workflows. Explain "
    "the dependency check below to an operations engineer: what is blocked or "
    "at risk, why it matters operationally, and what to do next. Be concrete "
    "and keep the answer under 300 words."
)


def format_explanation(result: CheckResult) -> str:
    """Render a CheckResult as plain text. Same input, same output."""
    lines = [
        f'Action: {result.action.value} on {result.entity.type.value} "{result.entity.name}"',
        "",
        OUTCOME_LINES[result.block_type],
        "",
    ]

    if result.hard_blocks:
        lines.append("Hard Blocks:")
        for block in result.hard_blocks:
            lines.append(f"  • {block.rule_id}: {block.message}")
        lines.append("")

    if result.soft_blocks:
        lines.append("Warnings:")
        for block in result.soft_blocks:
            lines.append(f"  • {block.rule_id}: {block.warning}")
            lines.append(f"    Impact: {block.impact}")

    return "\n".join(lines).rstrip("\n")


def _build_prompt(result: CheckResult) -> str:
    affected = ", ".join(
        f"{ref.type.value} {ref.name}" for ref in result.affected_entities
    ) or "none"
    return (
        f"{format_explanation(result)}\n\n"
        f"Affected entities: {affected}\n"
        f"Related records in the dependency graph: {len(result.dependency_graph.nodes)}"
    )


class ExplanationService:
    """Optional LLM explanations with a deterministic fallback.

    llm is any LangChain chat model (anything with an async ainvoke).
    explain never raises.
    """

    def __init__(self, llm: Any | None = None, timeout: float = 15.0) -> None:
        self.llm = llm
        self.timeout = timeout

    @classmethod
    def from_env(cls, config: AnalysisConfig | None = None) -> "ExplanationService":
        """Build with ChatOpenAI when OPENAI_API_KEY is set, else fallback only."""
        config = config or AnalysisConfig()
        api_key = os.getenv("OPENAI_API_KEY")
        if not api_key:
            logger.info("OPENAI_API_KEY not set, explanations use the fallback formatter")
            return cls(llm=None, timeout=config.explanation_timeout)

        from langchain_openai import ChatOpenAI

        llm = ChatOpenAI(
            model=config.explanation_model,
            temperature=0,
            api_key=api_key,
            timeout=config.explanation_timeout,
        )
        return cls(llm=llm, timeout=config.explanation_timeout)

    @property
    def enabled(self) -> bool:
        return self.llm is not None

    async def explain(self, result: CheckResult) -> str:
        if self.llm is None:
            return format_explanation(result)

        messages = [SystemMessage(content=SYSTEM_PROMPT), HumanMessage(content=_build_prompt(result))]
        try:
            response = await asyncio.wait_for(self.llm.ainvoke(messages), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning("explanation timed out after %.1fs, using fallback", self.timeout)
            return format_explanation(result)
        except Exception as e:
            logger.warning("explanation failed (%s), using fallback", e)
            return format_explanation(result)

        content = getattr(response, "content", response)
        if not isinstance(content, str) or not content.strip():
            logger.warning("explanation returned no text, using fallback")
            return format_explanation(result)
        return content.strip()
