"""Analysis configuration loaded from the environment."""

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from opsgraph.errors import ValidationError


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer, got {raw!r}") from None


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValidationError(f"{name} must be a number, got {raw!r}") from None


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class AnalysisConfig:
    """Weights and thresholds used by the scorer, gate and explainer."""

    incoming_weight: int = 2
    outgoing_weight: int = 1
    min_reason_length: int = 10
    neighborhood_depth: int = 3
    stable_path_order: bool = False
    explanation_timeout: float = 15.0
    explanation_model: str = "gpt-4o-mini"

    # rule thresholds
    built_status: str = "built"
    critical_dependency_types: frozenset[str] = field(
        default_factory=lambda: frozenset({"requires"})
    )
    active_workflow_statuses: frozenset[str] = field(
        default_factory=lambda: frozenset({"in-progress"})
    )

    @classmethod
    def from_env(cls) -> "AnalysisConfig":
        load_dotenv()  # load environment variables from .env file
        return cls(
            incoming_weight=_env_int("OPSGRAPH_INCOMING_WEIGHT", 2),
            outgoing_weight=_env_int("OPSGRAPH_OUTGOING_WEIGHT", 1),
            min_reason_length=_env_int("OPSGRAPH_MIN_REASON_LENGTH", 10),
            neighborhood_depth=_env_int("OPSGRAPH_NEIGHBORHOOD_DEPTH", 3),
            stable_path_order=_env_bool("OPSGRAPH_STABLE_PATH_ORDER", False),
            explanation_timeout=_env_float("OPSGRAPH_EXPLANATION_TIMEOUT", 15.0),
            explanation_model=os.getenv("OPSGRAPH_EXPLANATION_MODEL", "gpt-4o-mini"),
        )
