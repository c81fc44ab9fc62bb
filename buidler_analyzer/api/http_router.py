"""
HTTP API router.

Four GET analysis endpoints plus a health check. Routes are plain `def`
functions: FastAPI runs them in its thread pool, and the upstream fan-out
happens on a per-call thread pool inside the service functions.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from fastapi import APIRouter, Depends, Query, Request

from buidler_analyzer.common.config import Settings
from buidler_analyzer.common.errors import (
    AnalysisFailedError,
    MissingParameterError,
    ValidationError,
)
from buidler_analyzer.common.github_client import GitHubClient

from .analyzer_service import (
    analyze_github_url,
    analyze_organization,
    analyze_repository,
    analyze_user,
)
from .schemas import (
    ErrorResponse,
    GitHubAnalysisResponse,
    HealthCheckResponse,
    OrgAnalysisResponse,
    RepoAnalysisResponse,
    UserAnalysisResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["analyzer"])

SERVICE_NAME = "buidler-analyzer"

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Missing or invalid parameters"},
    500: {"model": ErrorResponse, "description": "Configuration or upstream failure"},
}


# ============================================================
# Dependencies
# ============================================================

def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_github_client(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> Iterator[GitHubClient]:
    """Request-scoped client; raises ConfigError when no token is configured."""
    with GitHubClient(settings, request.app.state.session_factory) as client:
        yield client


@contextmanager
def opaque_failure(message: str) -> Iterator[None]:
    """Turn any non-validation failure into an opaque AnalysisFailedError."""
    try:
        yield
    except ValidationError:
        raise
    except Exception as e:
        raise AnalysisFailedError(message, cause=e) from e


def _clean(value: Optional[str]) -> str:
    return (value or "").strip()


# ============================================================
# Routes
# ============================================================

@router.get("/analyze_repo", response_model=RepoAnalysisResponse, responses=ERROR_RESPONSES)
def analyze_repo_endpoint(
    owner: Optional[str] = Query(None, description="Repository owner", examples=["denoland"]),
    repo: Optional[str] = Query(None, description="Repository name", examples=["deno"]),
    client: GitHubClient = Depends(get_github_client),
    settings: Settings = Depends(get_settings),
) -> RepoAnalysisResponse:
    """Score a single repository."""
    owner, repo = _clean(owner), _clean(repo)
    if not owner or not repo:
        raise MissingParameterError("Owner and repo parameters are required", "owner", "repo")

    with opaque_failure("Failed to analyze repository"):
        return analyze_repository(client, owner, repo, settings.max_workers)


@router.get("/analyze_user", response_model=UserAnalysisResponse, responses=ERROR_RESPONSES)
def analyze_user_endpoint(
    username: Optional[str] = Query(None, description="GitHub username"),
    client: GitHubClient = Depends(get_github_client),
    settings: Settings = Depends(get_settings),
) -> UserAnalysisResponse:
    """Profile checks plus aggregate score over the user's source repositories."""
    username = _clean(username)
    if not username:
        raise MissingParameterError("Username parameter is required", "username")

    with opaque_failure("Failed to analyze user"):
        return analyze_user(client, username, settings.max_workers)


@router.get("/analyze_org", response_model=OrgAnalysisResponse, responses=ERROR_RESPONSES)
def analyze_org_endpoint(
    org: Optional[str] = Query(None, description="GitHub organization login"),
    client: GitHubClient = Depends(get_github_client),
    settings: Settings = Depends(get_settings),
) -> OrgAnalysisResponse:
    """Aggregate score over the organization's source repositories."""
    org = _clean(org)
    if not org:
        raise MissingParameterError("Organization name parameter is required", "org")

    with opaque_failure("Failed to analyze organization"):
        return analyze_organization(client, org, settings.max_workers)


@router.get("/analyze_github", response_model=GitHubAnalysisResponse, responses=ERROR_RESPONSES)
def analyze_github_endpoint(
    url: Optional[str] = Query(None, description="GitHub user, organization or repository URL"),
    client: GitHubClient = Depends(get_github_client),
    settings: Settings = Depends(get_settings),
) -> GitHubAnalysisResponse:
    """
    Classify a GitHub URL and run the matching analysis.

    An empty `url` is treated as an invalid URL, an absent one as missing.
    """
    if url is None:
        raise MissingParameterError("GitHub URL parameter is required", "url")

    with opaque_failure("Failed to analyze GitHub URL"):
        return analyze_github_url(client, url, settings.max_workers)


@router.get("/health", response_model=HealthCheckResponse)
def health_check() -> HealthCheckResponse:
    return HealthCheckResponse(status="ok", service=SERVICE_NAME)
