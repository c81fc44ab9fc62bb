"""Core domain models - no HTTP or framework dependencies."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class EntityKind(str, Enum):
    USER = "User"
    ORGANIZATION = "Organization"
    REPOSITORY = "Repository"


@dataclass(frozen=True)
class EntityRef:
    """A classified GitHub entity (immutable)."""
    kind: EntityKind
    primary_name: str
    repo_name: Optional[str] = None


@dataclass(frozen=True)
class RepoMetrics:
    """Raw per-repository metrics as reported by GitHub."""
    name: str
    owner: str
    description: Optional[str]
    star_count: int
    fork_count: int
    commit_count: int  # first page of commits only, capped at 100
    language: Optional[str]
    is_fork: bool
    is_archived: bool
    created_at: Optional[str]
    updated_at: Optional[str]
    topics: Tuple[str, ...] = ()

    @classmethod
    def from_github(cls, data: Dict[str, Any], commit_count: int = 0) -> "RepoMetrics":
        owner = (data.get("owner") or {}).get("login", "")
        return cls(
            name=data.get("name", ""),
            owner=owner,
            description=data.get("description"),
            star_count=data.get("stargazers_count") or 0,
            fork_count=data.get("forks_count") or 0,
            commit_count=commit_count,
            language=data.get("language"),
            is_fork=bool(data.get("fork", False)),
            is_archived=bool(data.get("archived", False)),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
            topics=tuple(data.get("topics") or ()),
        )


@dataclass(frozen=True)
class ScoreBreakdown:
    star_score: float
    commit_frequency_score: float
    fork_score: float
    total_score: float


@dataclass(frozen=True)
class ScoredRepo:
    metrics: RepoMetrics
    breakdown: ScoreBreakdown
    contributors_count: Optional[int] = None

    @property
    def score(self) -> float:
        return self.breakdown.total_score


@dataclass
class AggregateAnalysis:
    """Scores aggregated over every source (non-fork) repository of an owner."""
    average_score: float
    activity_rate: int
    total_repos: int
    total_source_repos: int
    total_fork_repos: int
    active_repo_count: int
    top_languages: List[str] = field(default_factory=list)
    top_repositories: List[ScoredRepo] = field(default_factory=list)


def parse_github_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 timestamp as returned by GitHub ("...Z").

    Naive values are taken as UTC.
    """
    if not value:
        return None
    try:
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
