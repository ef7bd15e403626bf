"""Changeset classification and version bump recommendation.

Also builds new changesets from PR metadata: change type from the
conventional-commit prefix of the title, breaking flag from the '!:'
marker or a BREAKING CHANGE footer.
"""

import re
from enum import Enum
from typing import Iterable, List, NamedTuple

from changekit.config import MAINLINE_BRANCH
from changekit.services.store.schemas import CHANGE_TYPES, ChangesetRecord


class BumpType(str, Enum):
    """Semantic version increment recommended for a release."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"

    def __str__(self) -> str:
        return self.value


class Categories(NamedTuple):
    """Changesets partitioned for release notes; each list keeps input order."""

    breaking: List[ChangesetRecord]
    features: List[ChangesetRecord]
    fixes: List[ChangesetRecord]
    other: List[ChangesetRecord]


_KNOWN_TYPES = "|".join(t for t in CHANGE_TYPES if t != "other")

# type, optional (scope), optional '!', then ':'
_TYPE_RE = re.compile(rf"^({_KNOWN_TYPES})(\([^)]*\))?!?:")
_BREAKING_MARKER_RE = re.compile(r"^[\w-]+(\([^)]*\))?!:")
_BREAKING_TITLE_RE = re.compile(r"^BREAKING[ -]CHANGE:", re.IGNORECASE)
_BREAKING_BODY_MARKERS = ("BREAKING CHANGE:", "BREAKING-CHANGE:")
_PREFIX_RE = re.compile(r"^([\w-]+(\([^)]*\))?!?:)\s*")


def categorize(records: Iterable[ChangesetRecord]) -> Categories:
    """Partition records into breaking, features, fixes and other.

    The breaking flag wins over the type.
    """
    categories = Categories([], [], [], [])
    for record in records:
        if record.breaking:
            categories.breaking.append(record)
        elif record.type == "feat":
            categories.features.append(record)
        elif record.type == "fix":
            categories.fixes.append(record)
        else:
            categories.other.append(record)
    return categories


def bump_type(records: Iterable[ChangesetRecord]) -> BumpType:
    """major if anything breaks, minor if there is a feature, else patch."""
    records = list(records)
    if any(r.breaking for r in records):
        return BumpType.MAJOR
    if any(r.type == "feat" for r in records):
        return BumpType.MINOR
    return BumpType.PATCH


def extract_change_type(title: str) -> str:
    """Change type token from a conventional-commit title, 'other' if none."""
    match = _TYPE_RE.match(title.strip())
    return match.group(1) if match else "other"


def is_breaking_change(title: str, body: str = "", explicit: bool = False) -> bool:
    """Whether PR title/body mark a breaking change.

    Detected from an explicit flag, a 'type!:' or 'type(scope)!:' prefix,
    a title starting with BREAKING CHANGE: / BREAKING-CHANGE:, or either
    marker in the body. An exclamation mark anywhere else in the title
    does not count.
    """
    if explicit:
        return True
    title = title.strip()
    if _BREAKING_MARKER_RE.match(title) or _BREAKING_TITLE_RE.match(title):
        return True
    return any(marker in (body or "") for marker in _BREAKING_BODY_MARKERS)


def split_type_prefix(title: str) -> tuple[str, str]:
    """Split 'feat!: add x' into ('feat!:', 'add x').

    Returns ('', title) when the title has no prefix.
    """
    match = _PREFIX_RE.match(title)
    if not match:
        return "", title
    return match.group(1), title[match.end() :]


def build_changeset(
    title: str,
    pr: int,
    author: str,
    body: str = "",
    breaking: bool = False,
    branch: str | None = None,
    mainline: str = MAINLINE_BRANCH,
) -> ChangesetRecord:
    """Build a changeset record from PR metadata."""
    return ChangesetRecord(
        title=title,
        pr=pr,
        author=author,
        type=extract_change_type(title),
        breaking=is_breaking_change(title, body, explicit=breaking),
        branch=branch or mainline,
        description=body,
    )
