from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional, Tuple

from dotenv import load_dotenv

load_dotenv()

GITHUB_API_BASE_DEFAULT: str = "https://api.github.com"
GITHUB_ACCEPT_HEADER: str = "application/vnd.github.v3+json"

# Single page sizes; nothing is paginated past the first page.
COMMIT_SAMPLE_SIZE: int = 100
REPO_PAGE_SIZE: int = 100
CONTRIBUTOR_PAGE_SIZE: int = 100

TOP_REPO_LIMIT: int = 10
ACTIVE_WINDOW_DAYS: int = 30


@dataclass(frozen=True)
class Settings:
    """Process-wide settings, loaded once and handed to the app factory."""
    github_token: Optional[str] = None
    github_api_base: str = GITHUB_API_BASE_DEFAULT
    host: str = "0.0.0.0"
    port: int = 8000
    request_timeout: float = 15.0
    max_workers: int = 8
    cors_origins: Tuple[str, ...] = ("*",)

    @property
    def has_token(self) -> bool:
        return bool(self.github_token)


def _split_origins(raw: str) -> Tuple[str, ...]:
    origins = tuple(o.strip() for o in raw.split(",") if o.strip())
    return origins or ("*",)


def load_settings() -> Settings:
    """Build Settings from the environment (and .env, if present)."""
    return Settings(
        github_token=os.getenv("GITHUB_TOKEN") or None,
        github_api_base=os.getenv("GITHUB_BASE_URL", GITHUB_API_BASE_DEFAULT).rstrip("/"),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        request_timeout=float(os.getenv("REQUEST_TIMEOUT", "15")),
        max_workers=int(os.getenv("FANOUT_MAX_WORKERS", "8")),
        cors_origins=_split_origins(os.getenv("CORS_ORIGINS", "*")),
    )
