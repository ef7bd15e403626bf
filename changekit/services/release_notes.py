"""Release notes from changesets, as markdown or JSON.

Both formats serialize the same ReleaseNotes model, built once from the
categorized changesets and the contributor lookups.
"""

import json
import logging
import re
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Iterable, List, Sequence

from pydantic import BaseModel, Field

from changekit.services.classifier import BumpType, bump_type, categorize, split_type_prefix
from changekit.services.contributors import ContributorClassifier
from changekit.services.store.schemas import ChangesetRecord

FORMATS = ("markdown", "json")

SECTIONS = (
    ("breaking", "Breaking Changes ⚠️"),
    ("features", "Features ✨"),
    ("fixes", "Fixes 🐛"),
    ("other", "Other Changes 🔄"),
)

LOG = logging.getLogger("changekit.services.release_notes")


class NoteEntry(BaseModel):
    """One changeset line in the release notes."""

    title: str = Field(..., description="Title without the type prefix")
    prefix: str = Field(default="", description="Type prefix, e.g. 'feat:' or 'fix!:'")
    pr: int
    author: str
    description: str = ""
    branch: str | None = None

    @classmethod
    def from_record(cls, record: ChangesetRecord) -> "NoteEntry":
        prefix, rest = split_type_prefix(record.title)
        if not rest:
            # Title is only a type prefix
            prefix, rest = "", record.title
        return cls(
            title=rest,
            prefix=prefix,
            pr=record.pr,
            author=record.author,
            description=record.description,
            branch=record.branch,
        )

    def pr_ref(self, repo_url: str | None) -> str:
        if repo_url:
            return f"[#{self.pr}]({repo_url}/pull/{self.pr})"
        return f"#{self.pr}"

    def to_markdown(self, repo_url: str | None) -> str:
        prefix = f"`{self.prefix}` " if self.prefix else ""
        return f"- {prefix}**{self.title}** ({self.pr_ref(repo_url)}) - @{self.author}"

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "title": self.title,
            "pr": self.pr,
            "author": self.author,
            "description": self.description,
        }
        if self.branch is not None:
            data["branch"] = self.branch
        return data


class Contributor(BaseModel):
    """Distinct changeset author."""

    username: str
    is_first_time: bool = False


class ReleaseNotes(BaseModel):
    """Categorized changesets, bump type and contributors for one release."""

    bump_type: BumpType
    breaking: List[NoteEntry] = Field(default_factory=list)
    features: List[NoteEntry] = Field(default_factory=list)
    fixes: List[NoteEntry] = Field(default_factory=list)
    other: List[NoteEntry] = Field(default_factory=list)
    contributors: List[Contributor] = Field(default_factory=list)
    repo_url: str | None = None

    def to_markdown(self) -> str:
        """Render grouped sections and contributors; empty sections are left out."""
        lines = ["## Release Notes", "", f"**Version bump:** {self.bump_type.value}", ""]
        for key, heading in SECTIONS:
            entries: List[NoteEntry] = getattr(self, key)
            if not entries:
                continue
            lines.append(f"### {heading}")
            lines.append("")
            lines.extend(entry.to_markdown(self.repo_url) for entry in entries)
            lines.append("")
        if self.contributors:
            lines.append("## Contributors")
            lines.append("")
            lines.append("Thanks to all the contributors who made this release possible!")
            lines.append("")
            for c in self.contributors:
                if c.is_first_time:
                    lines.append(f"- @{c.username} 🎉 (First-time contributor)")
                else:
                    lines.append(f"- @{c.username}")
            lines.append("")
        return "\n".join(lines).strip() + "\n"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bumpType": self.bump_type.value,
            "categories": {key: [e.to_dict() for e in getattr(self, key)] for key, _ in SECTIONS},
            "contributors": [
                {"username": c.username, "isFirstTimeContributor": c.is_first_time} for c in self.contributors
            ],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)


def normalize_repo_url(url: str | None) -> str | None:
    """Browser URL for PR links: strips git+ and .git, maps git@github.com:."""
    if not url:
        return None
    url = url.strip()
    url = re.sub(r"^git\+", "", url)
    url = re.sub(r"^git@github\.com:", "https://github.com/", url)
    url = url.rstrip("/")
    url = re.sub(r"\.git$", "", url)
    return url or None


def distinct_authors(records: Iterable[ChangesetRecord]) -> List[str]:
    """Authors in first-seen order, each once."""
    return list(dict.fromkeys(r.author for r in records))


def _safe_lookup(classifier: ContributorClassifier, author: str) -> bool:
    try:
        return bool(classifier(author))
    except Exception as e:
        # Enrichment only; a failed lookup never blocks the notes
        LOG.warning("Contributor lookup for @%s failed: %s", author, e)
        return False


def classify_contributors(
    authors: Sequence[str],
    classifier: ContributorClassifier | None,
) -> List[Contributor]:
    """Query the classifier once per author, all in flight together; failures count as False."""
    if classifier is None or not authors:
        return [Contributor(username=a) for a in authors]
    with ThreadPoolExecutor(max_workers=len(authors)) as pool:
        flags = list(pool.map(lambda a: _safe_lookup(classifier, a), authors))
    return [Contributor(username=a, is_first_time=f) for a, f in zip(authors, flags)]


def build_release_notes(
    records: Sequence[ChangesetRecord],
    repo_url: str | None = None,
    contributor_classifier: ContributorClassifier | None = None,
) -> ReleaseNotes:
    """Categorize, compute bump type and resolve contributors."""
    categories = categorize(records)
    contributors = classify_contributors(distinct_authors(records), contributor_classifier)
    return ReleaseNotes(
        bump_type=bump_type(records),
        breaking=[NoteEntry.from_record(r) for r in categories.breaking],
        features=[NoteEntry.from_record(r) for r in categories.features],
        fixes=[NoteEntry.from_record(r) for r in categories.fixes],
        other=[NoteEntry.from_record(r) for r in categories.other],
        contributors=contributors,
        repo_url=normalize_repo_url(repo_url),
    )


def render(
    records: Sequence[ChangesetRecord],
    format: str = "markdown",
    repo_url: str | None = None,
    contributor_classifier: ContributorClassifier | None = None,
) -> str:
    """Render release notes for the given changesets.

    Raises ValueError on an unknown format.
    """
    if format not in FORMATS:
        raise ValueError(f"Unknown release notes format {format!r}, expected one of {', '.join(FORMATS)}")
    notes = build_release_notes(list(records), repo_url, contributor_classifier)
    LOG.debug(
        "Release notes: %s changesets, %s contributors, bump %s",
        len(records),
        len(notes.contributors),
        notes.bump_type.value,
    )
    if format == "json":
        return notes.to_json()
    return notes.to_markdown()
