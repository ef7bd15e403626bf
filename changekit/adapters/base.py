"""Abstract base for Git platform adapters."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List


class GitPlatformError(Exception):
    """Raised when a Git platform API call fails."""

    pass


class GitPlatformAdapter(ABC):
    """Abstract interface for Git hosting platforms."""

    @abstractmethod
    def list_commits_by_author(
        self,
        repo: str,
        author: str,
        per_page: int = 4,
    ) -> List[Dict[str, Any]]:
        """Most recent commits by author in repo (owner/name), at most per_page."""
        ...
