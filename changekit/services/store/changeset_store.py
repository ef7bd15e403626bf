"""Changeset storage in .changesets/ as markdown files with a metadata block.

One file per accepted change: {timestamp}-pr-{pr}.md. Files are never
updated in place; the store only creates new files and deletes all of them
after release notes are cut.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, datetime
from pathlib import Path

from changekit.config import ChangesetsConfig
from changekit.exceptions import MalformedRecordError, StoreIOError
from changekit.services.store.codec import decode, encode
from changekit.services.store.schemas import ChangesetRecord

CHANGESET_EXTENSION = ".md"

READ_WORKERS = 8

LOG = logging.getLogger("changekit.services.store.changeset_store")


def _changesets_dir(repo_dir: Path, config: ChangesetsConfig | None) -> Path:
    cfg = config or ChangesetsConfig()
    return Path(repo_dir) / cfg.directory


def changeset_filename(pr: int, now: datetime | None = None, attempt: int = 1) -> str:
    """File name for a changeset: 20240115T103000-pr-12.md (UTC).

    attempt > 1 appends a suffix so a second record for the same PR in the
    same second gets its own file.
    """
    ts = (now or datetime.now(UTC)).strftime("%Y%m%dT%H%M%S")
    suffix = f"-{attempt}" if attempt > 1 else ""
    return f"{ts}-pr-{pr}{suffix}{CHANGESET_EXTENSION}"


def _changeset_files(base: Path) -> list[Path]:
    """Sorted changeset files; [] when the directory does not exist."""
    try:
        return sorted(p for p in base.iterdir() if p.is_file() and p.suffix == CHANGESET_EXTENSION)
    except FileNotFoundError:
        return []
    except OSError as e:
        raise StoreIOError(f"Cannot read changesets dir {base}: {e}") from e


def create_changeset(
    repo_dir: Path,
    record: ChangesetRecord,
    config: ChangesetsConfig | None = None,
    now: datetime | None = None,
) -> str:
    """Write a new changeset file and return its file name.

    Creates the changesets dir if needed. Existing files are never
    overwritten.
    """
    base = _changesets_dir(repo_dir, config)
    content = encode(record)
    try:
        base.mkdir(parents=True, exist_ok=True)
        attempt = 1
        while True:
            name = changeset_filename(record.pr, now, attempt)
            path = base / name
            try:
                fh = path.open("x", encoding="utf-8")
            except FileExistsError:
                attempt += 1
                continue
            try:
                with fh:
                    fh.write(content)
            except OSError:
                # No partial records on disk
                path.unlink(missing_ok=True)
                raise
            break
    except OSError as e:
        raise StoreIOError(f"Cannot write changeset for PR #{record.pr} in {base}: {e}") from e
    LOG.info("Created changeset %s for PR #%s", name, record.pr)
    return name


def load_changeset(path: Path) -> ChangesetRecord:
    """Read and decode one changeset file; the record carries its file name."""
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise MalformedRecordError("not valid UTF-8", path) from e
    except OSError as e:
        raise StoreIOError(f"Cannot read changeset {path}: {e}") from e
    return decode(text, path).model_copy(update={"filename": path.name})


def matches_branch(record: ChangesetRecord, branch: str, config: ChangesetsConfig | None = None) -> bool:
    """Whether a record belongs to the release for the given branch.

    Branch-less (legacy) records always match. The mainline branch also
    takes everything prepared on staging branches.
    """
    cfg = config or ChangesetsConfig()
    if record.branch is None or record.branch == branch:
        return True
    return branch == cfg.mainline_branch and record.branch.startswith(cfg.staging_prefix)


def list_changesets(
    repo_dir: Path,
    branch: str | None = None,
    config: ChangesetsConfig | None = None,
) -> list[ChangesetRecord]:
    """List changesets in file name order, optionally filtered to a branch.

    Returns [] when the changesets dir is missing. A malformed file aborts
    the listing with MalformedRecordError.
    """
    base = _changesets_dir(repo_dir, config)
    files = _changeset_files(base)
    if not files:
        return []
    with ThreadPoolExecutor(max_workers=min(READ_WORKERS, len(files))) as pool:
        records = list(pool.map(load_changeset, files))
    if branch is not None:
        records = [r for r in records if matches_branch(r, branch, config)]
    LOG.debug("Listed %s changesets from %s (branch=%s)", len(records), base, branch)
    return records


def delete_all_changesets(repo_dir: Path, config: ChangesetsConfig | None = None) -> int:
    """Delete every changeset file. Returns how many were removed."""
    base = _changesets_dir(repo_dir, config)
    files = _changeset_files(base)
    for path in files:
        try:
            path.unlink()
        except OSError as e:
            raise StoreIOError(f"Cannot delete changeset {path}: {e}") from e
    if files:
        LOG.info("Deleted %s changesets from %s", len(files), base)
    return len(files)
