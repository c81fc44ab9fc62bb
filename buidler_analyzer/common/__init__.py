"""
Common module: settings, errors, logging, the GitHub client and
parallel helpers.
"""

# Config
from buidler_analyzer.common.config import (
    Settings,
    load_settings,
)

# Errors
from buidler_analyzer.common.errors import (
    ErrorKind,
    BaseError,
    ConfigError,
    GitHubError,
    ValidationError,
    InvalidURLError,
)

# Logging
from buidler_analyzer.common.logging_config import setup_logging

# GitHub client
from buidler_analyzer.common.github_client import GitHubClient

# Parallel
from buidler_analyzer.common.parallel import run_parallel, map_parallel

__all__ = [
    # Config
    "Settings",
    "load_settings",
    # Errors
    "ErrorKind",
    "BaseError",
    "ConfigError",
    "GitHubError",
    "ValidationError",
    "InvalidURLError",
    # Logging
    "setup_logging",
    # GitHub
    "GitHubClient",
    # Parallel
    "run_parallel",
    "map_parallel",
]
