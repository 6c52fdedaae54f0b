"""GitHub REST API client."""

from vibeship.core.github.client import GitHubClient, get_github_client_factory

__all__ = ["GitHubClient", "get_github_client_factory"]
