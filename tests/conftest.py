"""
pytest configuration and shared fixtures.

Usage:
    # fast tests only
    pytest --skip-slow

    # everything
    pytest

The GitHub API is never contacted: routes are served from an in-memory
FakeSession plugged in through create_app(session_factory=...).
"""
import threading
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple, Union

import pytest
from fastapi.testclient import TestClient

from buidler_analyzer.common.config import Settings
from buidler_analyzer.main import create_app

API_BASE = "https://api.github.test"
NOW = datetime.now(timezone.utc).replace(microsecond=0)


def pytest_addoption(parser):
    parser.addoption(
        "--skip-slow",
        action="store_true",
        default=False,
        help="skip slow tests"
    )


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "slow: slow tests"
    )
    config.addinivalue_line(
        "markers", "integration: HTTP-level tests through the FastAPI app"
    )
    config.addinivalue_line(
        "markers", "unit: unit tests"
    )


def pytest_collection_modifyitems(config, items):
    if not config.getoption("--skip-slow"):
        return

    skip_slow = pytest.mark.skip(reason="skipped by --skip-slow")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


# === Fake upstream ===

class FakeResponse:
    def __init__(self, status_code: int = 200, body: Any = None):
        self.status_code = status_code
        self._body = body

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    def json(self) -> Any:
        if self._body is None:
            raise ValueError("No JSON body")
        return self._body


Route = Union[Tuple[int, Any], Exception]


class FakeSession:
    """Stands in for requests.Session, keyed by API path."""

    def __init__(self, routes: Optional[Dict[str, Route]] = None):
        self.routes: Dict[str, Route] = dict(routes or {})
        self.calls: List[Dict[str, Any]] = []
        self.closed = False
        self._lock = threading.Lock()

    def get(self, url, headers=None, params=None, timeout=None):
        path = url[len(API_BASE):] if url.startswith(API_BASE) else url
        with self._lock:
            self.calls.append({"path": path, "headers": headers, "params": params, "timeout": timeout})
        route = self.routes.get(path)
        if route is None:
            return FakeResponse(404, {"message": "Not Found"})
        if isinstance(route, Exception):
            raise route
        status, body = route
        return FakeResponse(status, body)

    def close(self):
        self.closed = True

    def paths(self) -> List[str]:
        return [c["path"] for c in self.calls]


def iso(dt: datetime) -> str:
    return dt.strftime("%Y-%m-%dT%H:%M:%SZ")


def make_repo(
    name: str,
    owner: str = "denoland",
    stars: int = 0,
    forks: int = 0,
    fork: bool = False,
    language: Optional[str] = "Rust",
    days_since_update: int = 1,
    description: Optional[str] = "A repository",
    archived: bool = False,
    private: bool = False,
    topics: Optional[List[str]] = None,
) -> Dict[str, Any]:
    return {
        "name": name,
        "full_name": f"{owner}/{name}",
        "owner": {"login": owner},
        "description": description,
        "fork": fork,
        "stargazers_count": stars,
        "forks_count": forks,
        "language": language,
        "archived": archived,
        "private": private,
        "topics": topics if topics is not None else [],
        "created_at": "2020-01-01T00:00:00Z",
        "updated_at": iso(NOW - timedelta(days=days_since_update)),
    }


def commits(n: int) -> Tuple[int, List[Dict[str, str]]]:
    return 200, [{"sha": f"{i:040x}"} for i in range(n)]


# === Shared fixtures ===

@pytest.fixture
def settings() -> Settings:
    return Settings(github_token="test-token", github_api_base=API_BASE, max_workers=4)


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def session_factory(fake_session):
    return lambda: fake_session


@pytest.fixture
def app(settings, session_factory):
    return create_app(settings, session_factory=session_factory)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def org_routes() -> Dict[str, Route]:
    """denoland as an organization: three source repos and one fork."""
    repos = [
        make_repo("deno", stars=1000, forks=500, language="Rust"),
        make_repo("std", stars=50, forks=10, language="TypeScript", days_since_update=90),
        make_repo("fresh", stars=10, forks=0, language="TypeScript", description=None),
        make_repo("forked-lib", stars=5000, forks=900, fork=True, language="Go"),
    ]
    return {
        "/users/denoland": (200, {"login": "denoland", "type": "Organization"}),
        "/orgs/denoland": (200, {
            "login": "denoland",
            "name": "Deno Land",
            "description": "Deno",
            "public_repos": 4,
            "followers": 100,
            "created_at": "2018-05-01T00:00:00Z",
            "updated_at": "2026-01-01T00:00:00Z",
        }),
        "/orgs/denoland/repos": (200, repos),
        "/repos/denoland/deno/commits": commits(150),
        "/repos/denoland/std/commits": commits(40),
        "/repos/denoland/fresh/commits": commits(5),
    }


@pytest.fixture
def user_routes() -> Dict[str, Route]:
    """octocat as a user with two source repos and one fork."""
    repos = [
        make_repo("hello", owner="octocat", stars=20, forks=5, language="Python"),
        make_repo(
            "world", owner="octocat", stars=200, forks=60, language="Python",
            days_since_update=60, topics=["octocat", "demo"],
        ),
        make_repo("spoon-knife", owner="octocat", fork=True, language="HTML"),
    ]
    return {
        "/users/octocat": (200, {
            "login": "octocat",
            "type": "User",
            "name": "The Octocat",
            "bio": None,
            "email": "octocat@github.com",
            "public_repos": 3,
            "followers": 10,
            "following": 0,
            "created_at": "2011-01-25T18:44:36Z",
        }),
        "/users/octocat/social_accounts": (200, [{"provider": "twitter", "url": "https://twitter.com/github"}]),
        "/users/octocat/events": (200, [
            {"type": "WatchEvent", "created_at": iso(NOW - timedelta(days=1))},
            {"type": "PushEvent", "created_at": iso(NOW - timedelta(days=3))},
        ]),
        "/users/octocat/repos": (200, repos),
        "/repos/octocat/hello/commits": commits(30),
        "/repos/octocat/world/commits": commits(100),
        "/repos/octocat/hello/contributors": (200, [{"login": "a"}, {"login": "b"}]),
        "/repos/octocat/world/contributors": (204, None),
    }
