"""Git hosting platform adapters."""

from changekit.adapters.base import GitPlatformAdapter, GitPlatformError
from changekit.adapters.github import GitHubAdapter

__all__ = ["GitHubAdapter", "GitPlatformAdapter", "GitPlatformError"]
