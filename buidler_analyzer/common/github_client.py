from __future__ import annotations
from typing import Any, Callable, Dict, List, Optional
import logging

import requests

from .config import (
    COMMIT_SAMPLE_SIZE,
    CONTRIBUTOR_PAGE_SIZE,
    GITHUB_ACCEPT_HEADER,
    REPO_PAGE_SIZE,
    Settings,
)
from .errors import ConfigError, GitHubError, GitHubNotFoundError

logger = logging.getLogger(__name__)


class GitHubClient:
    """Thin wrapper over the GitHub REST API.

    One instance per inbound request. Every call either returns decoded JSON
    or raises GitHubError; nothing is cached or retried.
    """

    def __init__(
        self,
        settings: Settings,
        session_factory: Callable[[], requests.Session] = requests.Session,
    ):
        if not settings.has_token:
            raise ConfigError("GitHub API key not found", setting="GITHUB_TOKEN")
        self.base_url = settings.github_api_base.rstrip("/")
        self.timeout = settings.request_timeout
        self.session = session_factory()
        self._token = settings.github_token

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "GitHubClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _build_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"token {self._token}",
            "Accept": GITHUB_ACCEPT_HEADER,
        }

    def _request(self, path: str, params: Optional[Dict[str, Any]] = None) -> requests.Response:
        url = f"{self.base_url}{path}"
        logger.debug("GitHub GET %s params=%s", path, params)
        try:
            return self.session.get(
                url,
                headers=self._build_headers(),
                params=params,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise GitHubError(f"GitHub request failed: {e}", url=url) from e

    def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        resp = self._request(path, params)
        self._raise_for_status(resp, path)
        return self._decode(resp, path)

    @staticmethod
    def _decode(resp: requests.Response, path: str) -> Any:
        try:
            return resp.json()
        except ValueError as e:
            raise GitHubError(
                "GitHub response was not valid JSON",
                url=path,
                status_code=resp.status_code,
            ) from e

    @staticmethod
    def _raise_for_status(resp: requests.Response, path: str) -> None:
        if resp.status_code == 404:
            raise GitHubNotFoundError(path)
        if not 200 <= resp.status_code < 300:
            raise GitHubError(
                f"GitHub API responded with status {resp.status_code}",
                url=path,
                status_code=resp.status_code,
            )

    def _get_list(self, path: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        data = self._get_json(path, params)
        if not isinstance(data, list):
            raise GitHubError("Unexpected response format, expected a list", url=path)
        return data

    # Profiles

    def get_user(self, username: str) -> Dict[str, Any]:
        """User or organization profile; `type` tells the two apart."""
        return self._get_json(f"/users/{username}")

    def get_org(self, org: str) -> Dict[str, Any]:
        return self._get_json(f"/orgs/{org}")

    def get_social_accounts(self, username: str) -> List[Dict[str, Any]]:
        return self._get_list(f"/users/{username}/social_accounts")

    def get_events(self, username: str) -> List[Dict[str, Any]]:
        """Most recent public events (first page only)."""
        return self._get_list(f"/users/{username}/events")

    # Repositories

    def get_repo(self, owner: str, repo: str) -> Dict[str, Any]:
        return self._get_json(f"/repos/{owner}/{repo}")

    def list_user_repos(self, username: str) -> List[Dict[str, Any]]:
        return self._get_list(
            f"/users/{username}/repos",
            params={"per_page": REPO_PAGE_SIZE, "type": "owner"},
        )

    def list_org_repos(self, org: str) -> List[Dict[str, Any]]:
        """Public repositories only, even when the token can see more."""
        return self._get_list(
            f"/orgs/{org}/repos",
            params={"per_page": REPO_PAGE_SIZE, "type": "public"},
        )

    def count_commits(self, owner: str, repo: str) -> int:
        """Number of commits on the first page (at most COMMIT_SAMPLE_SIZE).

        This is a sample, not the full history. An empty git repository
        answers 409 and counts as zero.
        """
        return self._count_page(
            f"/repos/{owner}/{repo}/commits",
            {"per_page": COMMIT_SAMPLE_SIZE},
            empty_status=409,
        )

    def count_contributors(self, owner: str, repo: str) -> int:
        """Number of contributors on the first page; 204 means none."""
        return self._count_page(
            f"/repos/{owner}/{repo}/contributors",
            {"per_page": CONTRIBUTOR_PAGE_SIZE},
            empty_status=204,
        )

    def _count_page(self, path: str, params: Dict[str, Any], empty_status: int) -> int:
        resp = self._request(path, params)
        if resp.status_code == empty_status:
            logger.debug("%s answered %d, counting zero", path, empty_status)
            return 0
        self._raise_for_status(resp, path)
        data = self._decode(resp, path)
        if not isinstance(data, list):
            raise GitHubError(
                "Unexpected response format, expected a list",
                url=path,
                status_code=resp.status_code,
            )
        return len(data)
