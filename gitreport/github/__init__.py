"""GitHub data fetchers."""

from .client import GitHubClient, GitHubError

__all__ = ["GitHubClient", "GitHubError"]
