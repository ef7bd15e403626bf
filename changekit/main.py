"""Changekit entry point.

Commands: add (write a changeset for a PR), analyze (recommend a version
bump), notes (print release notes), clean (delete all changesets).
Usage: changekit [--config changekit.yaml] <command> [options].
"""

import argparse
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from changekit.config import AppConfig, load_config
from changekit.exceptions import ChangekitError
from changekit.logging import LEVELS, configure_logging
from changekit.services.classifier import BumpType, build_changeset, bump_type, categorize
from changekit.services.contributors import make_contributor_classifier
from changekit.services.release_notes import FORMATS, render
from changekit.services.store import create_changeset, delete_all_changesets, list_changesets

# analyze exit codes, consumed by release workflows
BUMP_EXIT_CODES = {
    BumpType.MAJOR: 1,
    BumpType.MINOR: 2,
    BumpType.PATCH: 3,
}

LOG = logging.getLogger("changekit")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI: global options, then one subcommand."""
    parser = argparse.ArgumentParser(
        prog="changekit",
        description="Changeset-based release notes and version bump recommendation",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=Path("changekit.yaml"),
        help="Path to YAML config file",
    )
    parser.add_argument(
        "--project-dir",
        type=Path,
        default=Path("."),
        help="Project root containing the changesets dir",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=list(LEVELS),
        default=None,
        help="Override logging.level from config (logs go to stderr)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    add = sub.add_parser("add", help="Write a changeset for a merged PR")
    add.add_argument("--pr", type=int, required=True, help="PR number")
    add.add_argument("--title", required=True, help="PR title, e.g. 'feat: add widget'")
    add.add_argument("--author", required=True, help="PR author login")
    add.add_argument("--body", default="", help="PR description")
    add.add_argument("--breaking", action="store_true", help="Mark as breaking change")
    add.add_argument("--branch", default=None, help="Branch the PR was merged into")

    analyze = sub.add_parser("analyze", help="Recommend a version bump (exit code 1/2/3)")
    analyze.add_argument("--branch", default=None, help="Only changesets for this branch")

    notes = sub.add_parser("notes", help="Print release notes")
    notes.add_argument("--format", choices=FORMATS, default="markdown", help="Output format")
    notes.add_argument("--repo-url", default=None, help="Repository URL for PR links")
    notes.add_argument("--token", default=None, help="GitHub token for first-time contributor lookup")
    notes.add_argument("--branch", default=None, help="Only changesets for this branch")

    sub.add_parser("clean", help="Delete all changesets")
    return parser.parse_args(argv)


def cmd_add(args: argparse.Namespace, config: AppConfig) -> int:
    record = build_changeset(
        title=args.title,
        pr=args.pr,
        author=args.author,
        body=args.body,
        breaking=args.breaking,
        branch=args.branch,
        mainline=config.changesets.mainline_branch,
    )
    name = create_changeset(args.project_dir, record, config.changesets)
    print(name)
    return 0


def cmd_analyze(args: argparse.Namespace, config: AppConfig) -> int:
    records = list_changesets(args.project_dir, args.branch, config.changesets)
    LOG.info("Found %s changesets", len(records))
    if not records:
        LOG.info("No changesets found. No version bump needed.")
        return 0
    categories = categorize(records)
    LOG.info("Breaking changes: %s", len(categories.breaking))
    LOG.info("Features: %s", len(categories.features))
    LOG.info("Fixes: %s", len(categories.fixes))
    LOG.info("Other changes: %s", len(categories.other))
    bump = bump_type(records)
    print(bump.value)
    return BUMP_EXIT_CODES[bump]


def cmd_notes(args: argparse.Namespace, config: AppConfig) -> int:
    repo_url = args.repo_url or config.repo_url_resolved
    token = args.token or config.github_token_resolved
    records = list_changesets(args.project_dir, args.branch, config.changesets)
    classifier = make_contributor_classifier(repo_url, token, config.github.api_url)
    print(render(records, args.format, repo_url=repo_url, contributor_classifier=classifier))
    return 0


def cmd_clean(args: argparse.Namespace, config: AppConfig) -> int:
    count = delete_all_changesets(args.project_dir, config.changesets)
    print(count)
    return 0


COMMANDS = {
    "add": cmd_add,
    "analyze": cmd_analyze,
    "notes": cmd_notes,
    "clean": cmd_clean,
}


def main(argv: list[str] | None = None) -> int:
    """Entry point: load config, set up logging, dispatch the command."""
    args = parse_args(argv)
    config = load_config(args.config)
    configure_logging(config.logging, args.log_level)
    try:
        return COMMANDS[args.command](args, config)
    except (ChangekitError, ValidationError) as e:
        LOG.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
