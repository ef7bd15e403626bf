"""First-time contributor lookup via the hosting API.

A contributor is first-time when the repository has at most
FIRST_TIME_MAX_COMMITS commits by them. The lookup is an enrichment only:
every failure degrades to False.
"""

import logging
import re
from typing import Callable

import requests

from changekit.adapters.base import GitPlatformAdapter, GitPlatformError
from changekit.adapters.github import GitHubAdapter

FIRST_TIME_MAX_COMMITS = 3

_GITHUB_SLUG_RE = re.compile(r"github\.com[/:]([^/]+)/([^/?#]+)")

LOG = logging.getLogger("changekit.services.contributors")

ContributorClassifier = Callable[[str], bool]


def parse_repo_slug(repo_url: str | None) -> str | None:
    """'owner/repo' from a GitHub repository URL, None if it is not one."""
    if not repo_url:
        return None
    match = _GITHUB_SLUG_RE.search(repo_url)
    if not match:
        return None
    owner, repo = match.groups()
    if repo.endswith(".git"):
        repo = repo[: -len(".git")]
    return f"{owner}/{repo}"


def is_first_time_contributor(
    author: str | None,
    repo_url: str | None,
    token: str | None,
    adapter: GitPlatformAdapter | None = None,
    api_url: str = "https://api.github.com",
) -> bool:
    """Whether author has at most FIRST_TIME_MAX_COMMITS commits in the repo.

    Returns False when any input is missing or the API call fails.
    """
    if not author or not repo_url or not token:
        return False
    slug = parse_repo_slug(repo_url)
    if slug is None:
        LOG.debug("Not a GitHub repository URL, skipping lookup: %s", repo_url)
        return False
    adapter = adapter or GitHubAdapter(token=token, api_url=api_url)
    try:
        commits = adapter.list_commits_by_author(slug, author, per_page=FIRST_TIME_MAX_COMMITS + 1)
    except (GitPlatformError, requests.RequestException) as e:
        LOG.warning("First-time contributor lookup failed for @%s: %s", author, e)
        return False
    return len(commits) <= FIRST_TIME_MAX_COMMITS


def make_contributor_classifier(
    repo_url: str | None,
    token: str | None,
    api_url: str = "https://api.github.com",
) -> ContributorClassifier | None:
    """One-argument classifier sharing a single adapter.

    None when there is no token or repo URL, so no lookups are attempted.
    """
    if not token or not repo_url:
        return None
    adapter = GitHubAdapter(token=token, api_url=api_url)

    def classify(author: str) -> bool:
        return is_first_time_contributor(author, repo_url, token, adapter=adapter)

    return classify
