"""Graph analysis: building, path finding, scoring and impact."""

from opsgraph.analysis.chain import dependency_chain
from opsgraph.analysis.criticality import rank_critical_mcps, score_criticality
from opsgraph.analysis.graph_builder import build_path_graph, build_subgraph
from opsgraph.analysis.impact import analyze_impact, domain_connection_matrix
from opsgraph.analysis.path_finder import find_path
from opsgraph.analysis.suggestions import suggest_bridges

__all__ = [
    "analyze_impact",
    "build_path_graph",
    "build_subgraph",
    "dependency_chain",
    "domain_connection_matrix",
    "find_path",
    "rank_critical_mcps",
    "score_criticality",
    "suggest_bridges",
]
