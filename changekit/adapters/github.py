"""GitHub API adapter."""

from typing import Any, Dict, List

import requests

from changekit.adapters.base import GitPlatformAdapter, GitPlatformError

REQUEST_TIMEOUT = 30


class GitHubAdapter(GitPlatformAdapter):
    """GitHub API implementation."""

    def __init__(self, token: str, api_url: str = "https://api.github.com") -> None:
        self._api_url = api_url.rstrip("/")
        self._session = requests.Session()
        self._session.headers["Authorization"] = f"token {token}"
        self._session.headers["Accept"] = "application/vnd.github.v3+json"

    def _request(
        self,
        method: str,
        path: str,
        params: Dict[str, Any] | None = None,
    ) -> requests.Response:
        url = f"{self._api_url}{path}" if path.startswith("/") else f"{self._api_url}/{path}"
        try:
            resp = self._session.request(method, url, params=params, timeout=REQUEST_TIMEOUT)
        except requests.RequestException as e:
            raise GitPlatformError(f"{method} {url} failed: {e}") from e
        if resp.status_code >= 400:
            msg = resp.text or resp.reason or str(resp.status_code)
            try:
                msg = resp.json().get("message", msg)
            except (ValueError, AttributeError):
                pass
            raise GitPlatformError(f"{resp.status_code}: {msg}")
        return resp

    def list_commits_by_author(
        self,
        repo: str,
        author: str,
        per_page: int = 4,
    ) -> List[Dict[str, Any]]:
        resp = self._request(
            "GET",
            f"/repos/{repo}/commits",
            params={"author": author, "per_page": per_page},
        )
        try:
            data = resp.json()
        except ValueError as e:
            raise GitPlatformError(f"Invalid JSON from commits API: {e}") from e
        if not isinstance(data, list):
            raise GitPlatformError("Unexpected commits API response (not a list)")
        return data
