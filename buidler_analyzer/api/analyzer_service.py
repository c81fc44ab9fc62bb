"""
Analysis paths behind the HTTP routes.

Each function takes a request-scoped GitHubClient, fetches what it needs
(independent fetches fanned out in parallel), scores, and returns a response
schema. Upstream failures propagate as GitHubError.
"""
from __future__ import annotations

import dataclasses
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from buidler_analyzer.common.config import ACTIVE_WINDOW_DAYS
from buidler_analyzer.common.github_client import GitHubClient
from buidler_analyzer.common.parallel import DEFAULT_MAX_WORKERS, map_parallel, run_parallel
from buidler_analyzer.core.models import (
    AggregateAnalysis,
    EntityKind,
    RepoMetrics,
    ScoredRepo,
    parse_github_datetime,
)
from buidler_analyzer.core.scoring_core import compute_aggregate, score_repo
from buidler_analyzer.core.url_core import classify_entity, parse_github_url

from .schemas import (
    GitHubAnalysisResponse,
    OrgAnalysis,
    OrgAnalysisResponse,
    OrgRawData,
    RepoAnalysisDetails,
    RepoAnalysisResponse,
    RepoDetails,
    ScoreDetails,
    UserAnalysis,
    UserAnalysisResponse,
    UserRawData,
)

logger = logging.getLogger(__name__)

NO_DESCRIPTION = "No description available"
MIN_SOURCE_REPOS = 3


def _repo_coordinates(repo: Dict[str, Any], default_owner: str) -> tuple[str, str]:
    owner = (repo.get("owner") or {}).get("login") or default_owner
    return owner, repo["name"]


def _to_repo_details(scored: ScoredRepo) -> RepoDetails:
    m = scored.metrics
    b = scored.breakdown
    return RepoDetails(
        name=m.name,
        description=m.description or NO_DESCRIPTION,
        stars=m.star_count,
        forks=m.fork_count,
        commits=m.commit_count,
        language=m.language,
        is_archived=m.is_archived,
        created_at=m.created_at,
        updated_at=m.updated_at,
        is_fork=m.is_fork,
        topics=list(m.topics),
        score=b.total_score,
        details=ScoreDetails(
            star_score=b.star_score,
            commit_frequency_score=b.commit_frequency_score,
            fork_score=b.fork_score,
        ),
        contributors_count=scored.contributors_count,
    )


def aggregate_repositories(
    client: GitHubClient,
    owner: str,
    repos: List[Dict[str, Any]],
    max_workers: int = DEFAULT_MAX_WORKERS,
    now: Optional[datetime] = None,
) -> AggregateAnalysis:
    """Sample commits for every public source repo in parallel, then aggregate.

    Private repositories are dropped first: an authenticated listing can
    include them, and they are neither counted nor ranked.
    """
    hidden = sum(1 for r in repos if r.get("private"))
    if hidden:
        logger.debug("Skipping %d private repositories of %s", hidden, owner)
        repos = [r for r in repos if not r.get("private")]

    sources = [r for r in repos if not r.get("fork")]
    forks = [r for r in repos if r.get("fork")]

    commit_counts = map_parallel(
        lambda r: client.count_commits(*_repo_coordinates(r, owner)),
        sources,
        max_workers=max_workers,
    )

    metrics = [RepoMetrics.from_github(r, c) for r, c in zip(sources, commit_counts)]
    metrics.extend(RepoMetrics.from_github(r) for r in forks)

    aggregate = compute_aggregate(metrics, now=now)
    logger.info(
        "Aggregated %s: %d source, %d forks, average %.2f",
        owner, aggregate.total_source_repos, aggregate.total_fork_repos, aggregate.average_score,
    )
    return aggregate


def analyze_repository(
    client: GitHubClient,
    owner: str,
    repo: str,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> RepoAnalysisResponse:
    results = run_parallel(
        {
            "repo": lambda: client.get_repo(owner, repo),
            "commits": lambda: client.count_commits(owner, repo),
        },
        max_workers=max_workers,
    )
    metrics = RepoMetrics.from_github(results["repo"], results["commits"])
    scored = score_repo(metrics)
    b = scored.breakdown
    logger.info("Scored %s/%s: %.2f", owner, repo, b.total_score)

    return RepoAnalysisResponse(
        repo_name=metrics.name or repo,
        owner=metrics.owner or owner,
        total_score=b.total_score,
        details=RepoAnalysisDetails(
            stars=metrics.star_count,
            forks=metrics.fork_count,
            commits=metrics.commit_count,
            star_score=b.star_score,
            commit_frequency_score=b.commit_frequency_score,
            fork_score=b.fork_score,
        ),
        description=metrics.description,
        language=metrics.language,
        is_fork=metrics.is_fork,
        is_archived=metrics.is_archived,
        created_at=metrics.created_at,
        updated_at=metrics.updated_at,
    )


def analyze_organization(
    client: GitHubClient,
    org: str,
    max_workers: int = DEFAULT_MAX_WORKERS,
    now: Optional[datetime] = None,
) -> OrgAnalysisResponse:
    results = run_parallel(
        {
            "org": lambda: client.get_org(org),
            "repos": lambda: client.list_org_repos(org),
        },
        max_workers=max_workers,
    )
    org_data = results["org"]
    login = org_data.get("login") or org
    aggregate = aggregate_repositories(client, login, results["repos"], max_workers, now)

    return OrgAnalysisResponse(
        analysis=OrgAnalysis(
            score=aggregate.average_score,
            activity_rate=aggregate.activity_rate,
            total_repos=aggregate.total_repos,
            total_source_repos=aggregate.total_source_repos,
            total_fork_repos=aggregate.total_fork_repos,
            active_repos=aggregate.active_repo_count,
            top_languages=aggregate.top_languages,
        ),
        raw_data=OrgRawData(
            organization_name=login,
            display_name=org_data.get("name") or login,
            description=org_data.get("description") or NO_DESCRIPTION,
            public_repos=org_data.get("public_repos") or 0,
            email=org_data.get("email"),
            blog=org_data.get("blog"),
            location=org_data.get("location"),
            twitter_username=org_data.get("twitter_username"),
            followers=org_data.get("followers") or 0,
            created_at=org_data.get("created_at"),
            updated_at=org_data.get("updated_at"),
            top_repositories=[_to_repo_details(s) for s in aggregate.top_repositories],
        ),
    )


def find_last_push(events: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """First PushEvent in the feed (GitHub lists newest first)."""
    return next((e for e in events if e.get("type") == "PushEvent"), None)


def analyze_user(
    client: GitHubClient,
    username: str,
    max_workers: int = DEFAULT_MAX_WORKERS,
    profile: Optional[Dict[str, Any]] = None,
    now: Optional[datetime] = None,
) -> UserAnalysisResponse:
    """Analyze a user account.

    `profile` lets the URL dispatcher hand over the profile it already
    fetched for classification.
    """
    now = now or datetime.now(timezone.utc)
    tasks = {
        "social": lambda: client.get_social_accounts(username),
        "events": lambda: client.get_events(username),
        "repos": lambda: client.list_user_repos(username),
    }
    if profile is None:
        tasks["profile"] = lambda: client.get_user(username)
    results = run_parallel(tasks, max_workers=max_workers)
    user = profile if profile is not None else results["profile"]
    login = user.get("login") or username

    aggregate = aggregate_repositories(client, login, results["repos"], max_workers, now)

    contributor_counts = map_parallel(
        lambda s: client.count_contributors(s.metrics.owner or login, s.metrics.name),
        aggregate.top_repositories,
        max_workers=max_workers,
    )
    top_repositories = [
        dataclasses.replace(s, contributors_count=n)
        for s, n in zip(aggregate.top_repositories, contributor_counts)
    ]

    social_accounts = results["social"]
    last_push = find_last_push(results["events"])
    last_commit_time = last_push.get("created_at") if last_push else None
    last_commit_at = parse_github_datetime(last_commit_time)
    if last_commit_at is None:
        last_commit_recent = None
    else:
        last_commit_recent = now - last_commit_at <= timedelta(days=ACTIVE_WINDOW_DAYS)

    return UserAnalysisResponse(
        analysis=UserAnalysis(
            score=aggregate.average_score,
            activity_rate=aggregate.activity_rate,
            followers_bigger_than_one=(user.get("followers") or 0) >= 1,
            has_social_accounts=len(social_accounts) > 0,
            has_public_email=bool(user.get("email")),
            last_commit_in_last_month=last_commit_recent,
            source_public_repos=aggregate.total_source_repos >= MIN_SOURCE_REPOS,
        ),
        raw_data=UserRawData(
            username=login,
            name=user.get("name"),
            bio=user.get("bio"),
            public_repos=user.get("public_repos") or 0,
            followers=user.get("followers") or 0,
            following=user.get("following") or 0,
            created_at=user.get("created_at"),
            social_accounts=social_accounts,
            user_email=user.get("email"),
            last_commit_time=last_commit_time,
            top_languages=aggregate.top_languages,
            top_repositories=[_to_repo_details(s) for s in top_repositories],
            average_score=aggregate.average_score,
            activity_rate=aggregate.activity_rate,
            total_repos=aggregate.total_repos,
            total_source_repos=aggregate.total_source_repos,
            total_fork_repos=aggregate.total_fork_repos,
            active_repos=aggregate.active_repo_count,
        ),
    )


def analyze_github_url(
    client: GitHubClient,
    url: Optional[str],
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> GitHubAnalysisResponse:
    """Classify a GitHub URL and run the matching analysis in-process.

    Raises InvalidURLError before any upstream call when the URL does not
    parse.
    """
    primary_name, repo_name = parse_github_url(url)

    if repo_name:
        entity = classify_entity(primary_name, repo_name)
        logger.info("Dispatching %s/%s as %s", primary_name, repo_name, entity.kind.value)
        data = analyze_repository(client, primary_name, repo_name, max_workers)
        return GitHubAnalysisResponse(type=entity.kind.value, data=data)

    profile = client.get_user(primary_name)
    entity = classify_entity(primary_name, None, profile)
    logger.info("Dispatching %s as %s", primary_name, entity.kind.value)

    if entity.kind is EntityKind.ORGANIZATION:
        data = analyze_organization(client, profile.get("login") or primary_name, max_workers)
    else:
        data = analyze_user(client, primary_name, max_workers, profile=profile)
    return GitHubAnalysisResponse(type=entity.kind.value, data=data)
