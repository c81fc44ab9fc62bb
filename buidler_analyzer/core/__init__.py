"""Core domain layer - no HTTP dependencies."""
from .models import (
    EntityKind,
    EntityRef,
    RepoMetrics,
    ScoreBreakdown,
    ScoredRepo,
    AggregateAnalysis,
)
from .scoring_core import compute_score_breakdown, compute_aggregate, score_repo
from .url_core import parse_github_url, classify_entity

__all__ = [
    # Models
    "EntityKind",
    "EntityRef",
    "RepoMetrics",
    "ScoreBreakdown",
    "ScoredRepo",
    "AggregateAnalysis",
    # Functions
    "compute_score_breakdown",
    "compute_aggregate",
    "score_repo",
    "parse_github_url",
    "classify_entity",
]
