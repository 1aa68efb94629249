"""GitHub access for documentation sources."""

from .client import GitHubClient

__all__ = ["GitHubClient"]
