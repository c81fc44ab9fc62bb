"""Score computation Core layer - repository and aggregate formulas (Pure Python)."""
from __future__ import annotations

import math
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional, Sequence

from buidler_analyzer.common.config import ACTIVE_WINDOW_DAYS, TOP_REPO_LIMIT
from .models import (
    AggregateAnalysis,
    RepoMetrics,
    ScoreBreakdown,
    ScoredRepo,
    parse_github_datetime,
)

# 1. Constants (Weights)

STAR_MAX_SCORE = 70
STAR_FULL_AT = 100

COMMIT_MAX_SCORE = 15
COMMITS_PER_POINT = 10

FORK_MAX_SCORE = 15
FORK_FULL_AT = 50

TOTAL_MAX_SCORE = 100

# 2. Per-repository scores


def clamp(x: float, lo: float, hi: float) -> float:
    if x < lo:
        return lo
    if x > hi:
        return hi
    return x


def compute_star_score(stars: int) -> float:
    """70 points at 100 stars, linear below."""
    return round(clamp(stars / STAR_FULL_AT * STAR_MAX_SCORE, 0, STAR_MAX_SCORE), 2)


def compute_commit_frequency_score(sampled_commits: int) -> float:
    """One point per 10 sampled commits, capped at 15."""
    return round(clamp(sampled_commits / COMMITS_PER_POINT, 0, COMMIT_MAX_SCORE), 2)


def compute_fork_score(forks: int) -> float:
    """15 points at 50 forks, linear below."""
    return round(clamp(forks / FORK_FULL_AT * FORK_MAX_SCORE, 0, FORK_MAX_SCORE), 2)


def compute_score_breakdown(stars: int, forks: int, sampled_commits: int) -> ScoreBreakdown:
    star_score = compute_star_score(stars)
    commit_score = compute_commit_frequency_score(sampled_commits)
    fork_score = compute_fork_score(forks)
    # Summed from the rounded parts so the reported total always matches them.
    total = round(min(star_score + commit_score + fork_score, TOTAL_MAX_SCORE), 2)
    return ScoreBreakdown(
        star_score=star_score,
        commit_frequency_score=commit_score,
        fork_score=fork_score,
        total_score=total,
    )


def score_repo(metrics: RepoMetrics) -> ScoredRepo:
    breakdown = compute_score_breakdown(
        metrics.star_count, metrics.fork_count, metrics.commit_count
    )
    return ScoredRepo(metrics=metrics, breakdown=breakdown)


# 3. Aggregate (user / organization)


def is_active(metrics: RepoMetrics, now: Optional[datetime] = None) -> bool:
    """Updated within the last ACTIVE_WINDOW_DAYS."""
    updated = parse_github_datetime(metrics.updated_at)
    if updated is None:
        return False
    now = now or datetime.now(timezone.utc)
    return now - updated <= timedelta(days=ACTIVE_WINDOW_DAYS)


def compute_average_score(scored: Sequence[ScoredRepo]) -> float:
    if not scored:
        return 0.0
    return round(sum(s.score for s in scored) / len(scored), 2)


def compute_activity_rate(active_count: int, source_count: int) -> int:
    """Percentage of source repos that are active; 0 when there are none.

    Halves round up (1 of 8 is 13), not to even.
    """
    if source_count <= 0:
        return 0
    return math.floor(active_count * 100 / source_count + 0.5)


def collect_top_languages(repos: Iterable[RepoMetrics]) -> List[str]:
    """Distinct languages, most common first (ties by name)."""
    counts = Counter(r.language for r in repos if r.language)
    return [lang for lang, _ in sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))]


def rank_repositories(scored: Iterable[ScoredRepo], limit: int = TOP_REPO_LIMIT) -> List[ScoredRepo]:
    """Highest score first, forks excluded. Ties keep the input order."""
    ranked = sorted(
        (s for s in scored if not s.metrics.is_fork),
        key=lambda s: s.score,
        reverse=True,
    )
    return ranked[:limit]


def compute_aggregate(
    repos: Sequence[RepoMetrics],
    now: Optional[datetime] = None,
) -> AggregateAnalysis:
    """Score every source repository and aggregate.

    `repos` is the full fetched listing, forks included; forks only count
    towards total_fork_repos.
    """
    now = now or datetime.now(timezone.utc)
    sources = [r for r in repos if not r.is_fork]
    fork_count = len(repos) - len(sources)

    scored = [score_repo(r) for r in sources]
    active_count = sum(1 for r in sources if is_active(r, now))

    return AggregateAnalysis(
        average_score=compute_average_score(scored),
        activity_rate=compute_activity_rate(active_count, len(sources)),
        total_repos=len(sources),
        total_source_repos=len(sources),
        total_fork_repos=fork_count,
        active_repo_count=active_count,
        top_languages=collect_top_languages(sources),
        top_repositories=rank_repositories(scored),
    )
