"""Dependency gate: rules, decisions and explanations."""

from opsgraph.gate.explanation import ExplanationService, format_explanation
from opsgraph.gate.gate import DependencyGate, parse_action
from opsgraph.gate.rules import HARD_RULES, SOFT_RULES, RuleContext

__all__ = [
    "DependencyGate",
    "ExplanationService",
    "HARD_RULES",
    "RuleContext",
    "SOFT_RULES",
    "format_explanation",
    "parse_action",
]
