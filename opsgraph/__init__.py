"""
opsgraph: dependency and impact analysis for an airline operations catalog.

Builds per-request graphs over domains, subdomains, MCPs, tools, agents and
workflows, and gates catalog mutations with hard and soft blocks.
"""

from opsgraph.config import AnalysisConfig
from opsgraph.errors import EntityNotFound, OpsGraphError, UpstreamUnavailable, ValidationError
from opsgraph.service import OpsGraphService

__version__ = "0.1.0"

__all__ = [
    "AnalysisConfig",
    "EntityNotFound",
    "OpsGraphError",
    "OpsGraphService",
    "UpstreamUnavailable",
    "ValidationError",
]
