"""Tests for the changekit CLI (add, analyze, notes, clean)."""

import json
import logging
from pathlib import Path

import pytest

from changekit.main import main


@pytest.fixture(autouse=True)
def no_github(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep CLI tests offline regardless of the caller's env."""
    for key in ("GITHUB_TOKEN", "GITHUB_TOKEN_FILE", "GITHUB_REPO_URL", "REPO_URL"):
        monkeypatch.delenv(key, raising=False)


def _run(tmp_path: Path, *args: str) -> int:
    return main(["--config", str(tmp_path / "missing.yaml"), "--project-dir", str(tmp_path), *args])


def _add(tmp_path: Path, pr: int, title: str, author: str, *extra: str) -> int:
    return _run(tmp_path, "add", "--pr", str(pr), "--title", title, "--author", author, *extra)


class TestAdd:
    def test_add_writes_changeset(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert _add(tmp_path, 10, "feat: add widget", "alice", "--body", "Adds a widget.") == 0
        name = capsys.readouterr().out.strip()
        content = (tmp_path / ".changesets" / name).read_text(encoding="utf-8")
        assert "type: feat" in content
        assert "branch: develop" in content
        assert content.rstrip().endswith("Adds a widget.")

    def test_add_breaking_flag(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert _add(tmp_path, 11, "docs: rewrite", "bob", "--breaking", "--branch", "milestone/x") == 0
        name = capsys.readouterr().out.strip()
        content = (tmp_path / ".changesets" / name).read_text(encoding="utf-8")
        assert "breaking: true" in content
        assert "branch: milestone/x" in content

    def test_add_invalid_input_fails(self, tmp_path: Path) -> None:
        """A blank author is rejected with exit code 1."""
        assert _add(tmp_path, 12, "fix: x", "  ") == 1


class TestAnalyze:
    def test_no_changesets(self, tmp_path: Path) -> None:
        assert _run(tmp_path, "analyze") == 0

    @pytest.mark.parametrize(
        "titles, code, bump",
        [
            (["fix: a", "docs: b"], 3, "patch"),
            (["fix: a", "feat: b"], 2, "minor"),
            (["feat!: a", "fix: b"], 1, "major"),
        ],
    )
    def test_exit_code_per_bump(
        self,
        tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
        titles: list[str],
        code: int,
        bump: str,
    ) -> None:
        for i, title in enumerate(titles, start=1):
            _add(tmp_path, i, title, "alice")
        capsys.readouterr()
        assert _run(tmp_path, "analyze") == code
        assert capsys.readouterr().out.strip() == bump

    def test_malformed_changeset_fails(self, tmp_path: Path) -> None:
        (tmp_path / ".changesets").mkdir()
        (tmp_path / ".changesets" / "20240101T000000-pr-1.md").write_text("---\ntitle: x\n", encoding="utf-8")
        assert _run(tmp_path, "analyze") == 1

    def test_non_utf8_changeset_fails(self, tmp_path: Path) -> None:
        (tmp_path / ".changesets").mkdir()
        (tmp_path / ".changesets" / "20240101T000000-pr-1.md").write_bytes(b"---\ntitle: \xff\n---\n")
        assert _run(tmp_path, "analyze") == 1

    def test_log_level_option(self, tmp_path: Path) -> None:
        assert _run(tmp_path, "--log-level", "debug", "analyze") == 0
        assert logging.root.level == logging.DEBUG


class TestNotes:
    def test_markdown(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        _add(tmp_path, 10, "feat: add widget", "alice")
        _add(tmp_path, 11, "fix: crash", "bob")
        capsys.readouterr()
        assert _run(tmp_path, "notes", "--repo-url", "https://github.com/owner/repo") == 0
        out = capsys.readouterr().out
        assert "### Features" in out
        assert "[#10](https://github.com/owner/repo/pull/10)" in out
        assert "- @bob" in out

    def test_json_with_branch_filter(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        _add(tmp_path, 10, "feat: add widget", "alice", "--branch", "main")
        _add(tmp_path, 11, "fix: crash", "bob")
        capsys.readouterr()
        assert _run(tmp_path, "notes", "--format", "json", "--branch", "develop") == 0
        data = json.loads(capsys.readouterr().out)
        assert data["bumpType"] == "patch"
        assert [e["pr"] for e in data["categories"]["fixes"]] == [11]
        assert data["categories"]["features"] == []

    def test_malformed_changeset_prints_no_notes(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        _add(tmp_path, 10, "feat: add widget", "alice")
        (tmp_path / ".changesets" / "29990101T000000-pr-2.md").write_text("---\n", encoding="utf-8")
        capsys.readouterr()
        assert _run(tmp_path, "notes") == 1
        assert capsys.readouterr().out == ""


class TestClean:
    def test_clean_counts(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        _add(tmp_path, 1, "fix: a", "alice")
        _add(tmp_path, 2, "fix: b", "alice")
        capsys.readouterr()
        assert _run(tmp_path, "clean") == 0
        assert capsys.readouterr().out.strip() == "2"

    def test_clean_empty(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert _run(tmp_path, "clean") == 0
        assert capsys.readouterr().out.strip() == "0"
