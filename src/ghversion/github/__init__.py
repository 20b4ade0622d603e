"""GitHub REST API integration."""

from ghversion.github.client import (
    GitHubAuthError,
    GitHubClient,
    GitHubError,
    GitHubNotFoundError,
    GitHubRateLimitError,
)
from ghversion.github.models import GitHubCommit, GitHubComparison, GitHubContent

__all__ = [
    "GitHubClient",
    "GitHubError",
    "GitHubAuthError",
    "GitHubNotFoundError",
    "GitHubRateLimitError",
    "GitHubCommit",
    "GitHubComparison",
    "GitHubContent",
]
