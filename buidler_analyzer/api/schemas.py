"""
API response schemas.

Field names are snake_case in Python and camelCase on the wire; `raw_data`
keeps its snake_case key.
"""
from __future__ import annotations

from typing import Any, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ScoreDetails(CamelModel):
    star_score: float = Field(..., ge=0, le=70)
    commit_frequency_score: float = Field(..., ge=0, le=15)
    fork_score: float = Field(..., ge=0, le=15)


class RepoDetails(CamelModel):
    """One scored repository inside a user/organization ranking."""
    name: str
    description: str = Field(..., description="Repository description or a placeholder")
    stars: int = Field(..., ge=0)
    forks: int = Field(..., ge=0)
    commits: int = Field(..., ge=0, description="Commits on the first page (max 100)")
    language: Optional[str] = None
    is_archived: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    is_fork: bool = False
    topics: list[str] = Field(default_factory=list)
    score: float = Field(..., ge=0, le=100)
    details: ScoreDetails
    contributors_count: Optional[int] = Field(None, ge=0)


class RepoAnalysisDetails(CamelModel):
    stars: int = Field(..., ge=0)
    forks: int = Field(..., ge=0)
    commits: int = Field(..., ge=0)
    star_score: float = Field(..., ge=0, le=70)
    commit_frequency_score: float = Field(..., ge=0, le=15)
    fork_score: float = Field(..., ge=0, le=15)


class RepoAnalysisResponse(CamelModel):
    repo_name: str
    owner: str
    total_score: float = Field(..., ge=0, le=100)
    details: RepoAnalysisDetails
    description: Optional[str] = None
    language: Optional[str] = None
    is_fork: bool = False
    is_archived: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class OrgAnalysis(CamelModel):
    score: float = Field(..., ge=0, le=100, description="Average score of source repositories")
    activity_rate: int = Field(..., ge=0, le=100)
    total_repos: int = Field(..., ge=0)
    total_source_repos: int = Field(..., ge=0)
    total_fork_repos: int = Field(..., ge=0)
    active_repos: int = Field(..., ge=0)
    top_languages: list[str]


class OrgRawData(CamelModel):
    organization_name: str
    display_name: str
    description: str
    public_repos: int = Field(..., ge=0)
    email: Optional[str] = None
    blog: Optional[str] = None
    location: Optional[str] = None
    twitter_username: Optional[str] = None
    followers: int = 0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    top_repositories: list[RepoDetails]


class OrgAnalysisResponse(CamelModel):
    analysis: OrgAnalysis
    raw_data: OrgRawData = Field(..., alias="raw_data")


class UserAnalysis(CamelModel):
    score: float = Field(..., ge=0, le=100)
    activity_rate: int = Field(..., ge=0, le=100)
    followers_bigger_than_one: bool
    has_social_accounts: bool
    has_public_email: bool
    last_commit_in_last_month: Optional[bool] = Field(
        None, description="None when the user has no recent push event"
    )
    source_public_repos: bool = Field(..., description="At least three source repositories")


class UserRawData(CamelModel):
    username: str
    name: Optional[str] = None
    bio: Optional[str] = None
    public_repos: int = Field(..., ge=0)
    followers: int = 0
    following: int = 0
    created_at: Optional[str] = None
    social_accounts: list[dict[str, Any]] = Field(default_factory=list)
    user_email: Optional[str] = None
    last_commit_time: Optional[str] = None
    top_languages: list[str]
    top_repositories: list[RepoDetails]
    average_score: float = Field(..., ge=0, le=100)
    activity_rate: int = Field(..., ge=0, le=100)
    total_repos: int = Field(..., ge=0)
    total_source_repos: int = Field(..., ge=0)
    total_fork_repos: int = Field(..., ge=0)
    active_repos: int = Field(..., ge=0)


class UserAnalysisResponse(CamelModel):
    analysis: UserAnalysis
    raw_data: UserRawData = Field(..., alias="raw_data")


class GitHubAnalysisResponse(BaseModel):
    type: Literal["User", "Organization", "Repository"]
    data: Union[RepoAnalysisResponse, UserAnalysisResponse, OrgAnalysisResponse]


class HealthCheckResponse(BaseModel):
    status: str = Field(..., examples=["ok"])
    service: str = Field(..., examples=["buidler-analyzer"])


class ErrorResponse(BaseModel):
    error: str
    kind: str
