"""GitHub URL parsing and entity classification."""
from __future__ import annotations

import re
from typing import Any, Dict, Optional, Tuple

from buidler_analyzer.common.errors import GitHubError, InvalidURLError
from .models import EntityKind, EntityRef

# Optional scheme and www., host github.com, one or two non-empty path
# segments, optional trailing slash. Nothing else.
GITHUB_URL_PATTERN = re.compile(
    r"^(?:https?://)?(?:www\.)?github\.com/([^/\s?#]+)(?:/([^/\s?#]+))?/?$",
    re.IGNORECASE,
)


def parse_github_url(url: Optional[str]) -> Tuple[str, Optional[str]]:
    """
    Extract (primary_name, repo_name) from a GitHub URL.

    Supported formats:
    - https://github.com/owner
    - http://github.com/owner/repo
    - github.com/owner/repo/
    - https://www.github.com/owner

    Raises:
        InvalidURLError: empty input, wrong host, no path, an empty path
            segment or more than two segments
    """
    match = GITHUB_URL_PATTERN.match((url or "").strip())
    if not match:
        raise InvalidURLError(url)
    return match.group(1), match.group(2)


def classify_entity(
    primary_name: str,
    repo_name: Optional[str],
    profile: Optional[Dict[str, Any]] = None,
) -> EntityRef:
    """Build the EntityRef for a parsed URL.

    A repository name always means a repository. Otherwise the `type` of the
    upstream profile decides between user and organization.
    """
    if repo_name:
        return EntityRef(EntityKind.REPOSITORY, primary_name, repo_name)
    if profile is None:
        raise ValueError("profile is required to classify an owner")

    owner_type = profile.get("type")
    if owner_type == EntityKind.ORGANIZATION.value:
        return EntityRef(EntityKind.ORGANIZATION, primary_name)
    if owner_type == EntityKind.USER.value:
        return EntityRef(EntityKind.USER, primary_name)
    raise GitHubError(f"Unsupported GitHub account type: {owner_type!r}")
