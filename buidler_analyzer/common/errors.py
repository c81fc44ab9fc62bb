"""
Error taxonomy shared by the client, the services and the HTTP layer.
"""
from __future__ import annotations
from typing import Any, Dict, Optional
from enum import Enum
import logging

logger = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    """Error classification."""

    # GitHub API
    GITHUB_NOT_FOUND = "github_not_found"
    GITHUB_API_ERROR = "github_api_error"

    # Configuration
    CONFIG_ERROR = "config_error"

    # Input validation
    INVALID_INPUT = "invalid_input"
    MISSING_REQUIRED_FIELD = "missing_required_field"
    INVALID_URL = "invalid_url"

    # Analysis
    ANALYSIS_FAILED = "analysis_failed"

    UNKNOWN = "unknown"
    INTERNAL_ERROR = "internal_error"


class BaseError(Exception):
    """Base class for every analyzer error."""

    def __init__(
        self,
        message: str,
        kind: ErrorKind = ErrorKind.UNKNOWN,
        http_status: int = 500,
        context: Optional[Dict[str, Any]] = None,
    ):
        """
        Args:
            message: Error message, safe to show to API clients
            kind: Error classification
            http_status: Status code used when rendered as an API response
            context: Extra details for logs only, never serialized
        """
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.http_status = http_status
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        """Render the error as an API response body."""
        return {
            "error": self.message,
            "kind": self.kind.value,
        }

    def log(self, level: str = "error"):
        log_func = getattr(logger, level, logger.error)
        log_func(
            f"{self.__class__.__name__}: {self.message}",
            extra={
                "kind": self.kind.value,
                "http_status": self.http_status,
                "context": self.context,
            }
        )


class GitHubError(BaseError):
    """Non-success response or transport failure from the GitHub API.

    Always a 500 towards our own clients; the upstream status is kept in
    context for the logs.
    """

    def __init__(
        self,
        message: str,
        kind: ErrorKind = ErrorKind.GITHUB_API_ERROR,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        **kwargs
    ):
        context = kwargs.pop("context", {})
        context.update({
            "url": url,
            "status_code": status_code,
        })
        super().__init__(
            message=message,
            kind=kind,
            http_status=500,
            context=context,
            **kwargs
        )
        self.url = url
        self.status_code = status_code


class GitHubNotFoundError(GitHubError):
    """Upstream 404."""

    def __init__(self, url: str):
        super().__init__(
            message=f"GitHub resource not found: {url}",
            kind=ErrorKind.GITHUB_NOT_FOUND,
            url=url,
            status_code=404,
        )


class ConfigError(BaseError):
    """Missing or invalid process configuration."""

    def __init__(self, message: str, setting: Optional[str] = None):
        super().__init__(
            message=message,
            kind=ErrorKind.CONFIG_ERROR,
            http_status=500,
            context={"setting": setting},
        )


class ValidationError(BaseError):
    """Request input validation error."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        kind: ErrorKind = ErrorKind.INVALID_INPUT,
        **kwargs
    ):
        context = kwargs.pop("context", {})
        context.update({"field": field})
        super().__init__(
            message=message,
            kind=kind,
            http_status=400,
            context=context,
            **kwargs
        )


class MissingParameterError(ValidationError):
    """One or more required query parameters are missing or empty."""

    def __init__(self, message: str, *fields: str):
        super().__init__(
            message=message,
            field=",".join(fields) or None,
            kind=ErrorKind.MISSING_REQUIRED_FIELD,
        )


class InvalidURLError(ValidationError):
    """The input string is not a recognizable GitHub user/org/repo URL."""

    def __init__(self, url: Optional[str]):
        super().__init__(
            message="Invalid GitHub URL",
            field="url",
            kind=ErrorKind.INVALID_URL,
            context={"url": url},
        )


class AnalysisFailedError(BaseError):
    """Opaque 500 returned by a route when its analysis could not complete."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        context: Dict[str, Any] = {}
        if cause is not None:
            context["cause"] = f"{type(cause).__name__}: {cause}"
            if isinstance(cause, BaseError):
                context.update(cause.context)
        super().__init__(
            message=message,
            kind=ErrorKind.ANALYSIS_FAILED,
            http_status=500,
            context=context,
        )
