"""Configuration loading from YAML and environment.

Secrets (the GitHub token) are taken from environment variables or from
files (Docker secrets). Never put real tokens in config files committed to
the repo.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

MAINLINE_BRANCH = "develop"
STAGING_PREFIX = "milestone/"
CHANGESET_DIR = ".changesets"


def _read_secret(env_key: str, file_env_key: str) -> str | None:
    """Read secret from env var or from file path in env (e.g. Docker
    secrets)."""
    value = _current_env.get(env_key)
    if value:
        return value.strip()
    file_path = _current_env.get(file_env_key)
    if file_path:
        return Path(file_path).read_text().strip()
    return None


# Injected by load_config so resolvers can read env/file
_current_env: dict[str, str] = {}


class ChangesetsConfig(BaseSettings):
    """Where changesets live and how branches fold into the mainline release."""

    model_config = SettingsConfigDict(env_prefix="CHANGESETS_", extra="ignore")

    directory: str = Field(default=CHANGESET_DIR, description="Changesets dir, relative to the project root")
    mainline_branch: str = Field(default=MAINLINE_BRANCH, description="Branch that receives releases")
    staging_prefix: str = Field(
        default=STAGING_PREFIX,
        description="Branches with this prefix are folded into mainline release notes",
    )


class GitHubConfig(BaseSettings):
    """GitHub API settings (first-time contributor lookups and PR links)."""

    model_config = SettingsConfigDict(env_prefix="GITHUB_", extra="ignore")

    token: str | None = Field(default=None, description="PAT or Actions token; use env or secret file")
    api_url: str = Field(default="https://api.github.com", description="API base URL")
    repo_url: str | None = Field(default=None, description="Repository URL used for PR links")


class LoggingConfig(BaseSettings):
    """Logging settings."""

    model_config = SettingsConfigDict(env_prefix="LOGGING_", extra="ignore")

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format",
    )


class AppConfig(BaseSettings):
    """Root application config from YAML + env."""

    model_config = SettingsConfigDict(extra="ignore")

    changesets: ChangesetsConfig = Field(default_factory=ChangesetsConfig)
    github: GitHubConfig = Field(default_factory=GitHubConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def github_token_resolved(self) -> str | None:
        """Resolve GitHub token from config, env or Docker secret file."""
        t = self.github.token
        if t and not t.startswith("${"):
            return t
        return _read_secret("GITHUB_TOKEN", "GITHUB_TOKEN_FILE")

    @property
    def repo_url_resolved(self) -> str | None:
        """Resolve repository URL from config or REPO_URL env."""
        url = self.github.repo_url
        if url and not url.startswith("${"):
            return url
        return _current_env.get("REPO_URL") or None


def _substitute_env(value: Any) -> Any:
    """Replace ${VAR} and $VAR in strings with os.environ."""
    if isinstance(value, str):
        if value.startswith("${") and value.endswith("}"):
            key = value[2:-1].strip()
            return _current_env.get(key, value)
        if value.startswith("$") and not value.startswith("${"):
            key = value[1:].strip()
            return _current_env.get(key, value)
        return value
    if isinstance(value, dict):
        return {k: _substitute_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute_env(v) for v in value]
    return value


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load config from YAML file and environment.

    A missing file is not an error: defaults plus env are used.
    Secrets: GITHUB_TOKEN or GITHUB_TOKEN_FILE.
    """
    global _current_env
    import os

    _current_env = dict(os.environ)

    path = config_path or Path("changekit.yaml")
    if not path.is_file():
        return AppConfig()

    raw = yaml.safe_load(path.read_text()) or {}
    raw = _substitute_env(raw)

    return AppConfig(
        changesets=ChangesetsConfig(**(raw.get("changesets") or {})),
        github=GitHubConfig(**(raw.get("github") or {})),
        logging=LoggingConfig(**(raw.get("logging") or {})),
    )
