"""Tests for configuration loading (YAML + env)."""

from pathlib import Path

import pytest

from changekit.config import (
    AppConfig,
    ChangesetsConfig,
    GitHubConfig,
    LoggingConfig,
    load_config,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in (
        "GITHUB_TOKEN",
        "GITHUB_TOKEN_FILE",
        "GITHUB_REPO_URL",
        "GITHUB_API_URL",
        "REPO_URL",
        "CHANGESETS_DIRECTORY",
        "CHANGESETS_MAINLINE_BRANCH",
        "CHANGESETS_STAGING_PREFIX",
        "LOGGING_LEVEL",
        "LOGGING_FORMAT",
    ):
        monkeypatch.delenv(key, raising=False)


class TestDefaults:
    def test_changesets_defaults(self) -> None:
        cfg = ChangesetsConfig()
        assert cfg.directory == ".changesets"
        assert cfg.mainline_branch == "develop"
        assert cfg.staging_prefix == "milestone/"

    def test_github_defaults(self) -> None:
        cfg = GitHubConfig()
        assert cfg.token is None
        assert cfg.api_url == "https://api.github.com"
        assert cfg.repo_url is None

    def test_logging_defaults(self) -> None:
        assert LoggingConfig().level == "INFO"

    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        config = load_config(tmp_path / "nope.yaml")
        assert isinstance(config, AppConfig)
        assert config.changesets.mainline_branch == "develop"
        assert config.github_token_resolved is None
        assert config.repo_url_resolved is None


class TestLoadConfig:
    def test_yaml_values(self, tmp_path: Path) -> None:
        path = tmp_path / "changekit.yaml"
        path.write_text(
            "changesets:\n"
            "  directory: .release/changesets\n"
            "  mainline_branch: main\n"
            "  staging_prefix: release/\n"
            "github:\n"
            "  repo_url: https://github.com/owner/repo\n"
            "logging:\n"
            "  level: DEBUG\n",
            encoding="utf-8",
        )
        config = load_config(path)
        assert config.changesets.directory == ".release/changesets"
        assert config.changesets.mainline_branch == "main"
        assert config.changesets.staging_prefix == "release/"
        assert config.repo_url_resolved == "https://github.com/owner/repo"
        assert config.logging.level == "DEBUG"

    def test_env_substitution(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MY_REPO", "https://github.com/o/r")
        path = tmp_path / "changekit.yaml"
        path.write_text("github:\n  repo_url: ${MY_REPO}\n", encoding="utf-8")
        assert load_config(path).repo_url_resolved == "https://github.com/o/r"

    def test_env_overrides_defaults(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CHANGESETS_MAINLINE_BRANCH", "trunk")
        config = load_config(tmp_path / "nope.yaml")
        assert config.changesets.mainline_branch == "trunk"

    def test_repo_url_from_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("REPO_URL", "https://github.com/env/repo")
        assert load_config(tmp_path / "nope.yaml").repo_url_resolved == "https://github.com/env/repo"


class TestGitHubToken:
    def test_token_from_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GITHUB_TOKEN", "ghp_env")
        assert load_config(tmp_path / "nope.yaml").github_token_resolved == "ghp_env"

    def test_token_from_secret_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        secret = tmp_path / "token"
        secret.write_text("ghp_file\n", encoding="utf-8")
        monkeypatch.setenv("GITHUB_TOKEN_FILE", str(secret))
        assert load_config(tmp_path / "nope.yaml").github_token_resolved == "ghp_file"

    def test_unresolved_placeholder_falls_back_to_env(self, tmp_path: Path) -> None:
        path = tmp_path / "changekit.yaml"
        path.write_text("github:\n  token: ${UNSET_TOKEN_VAR}\n", encoding="utf-8")
        assert load_config(path).github_token_resolved is None
