"""Changeset file codec: YAML metadata block between '---' lines, then the body.

    ---
    title: 'feat: add widget'
    pr: 10
    author: alice
    type: feat
    breaking: false
    branch: develop
    ---
    Free-text description, may span lines.
"""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from changekit.exceptions import MalformedRecordError
from changekit.services.store.schemas import ChangesetRecord

DELIMITER = "---"

_BOOLEAN_STRINGS = {"true": True, "false": False}

LOG = logging.getLogger("changekit.services.store.codec")


def encode(record: ChangesetRecord) -> str:
    """Serialize a record to changeset file text."""
    meta = yaml.safe_dump(
        record.metadata(),
        default_flow_style=False,
        allow_unicode=True,
        sort_keys=False,
        width=1000,
    )
    return f"{DELIMITER}\n{meta}{DELIMITER}\n{record.description}\n"


def _split(text: str, path: Path | None) -> tuple[str, str]:
    """Return (metadata text, body text).

    Raises MalformedRecordError when there is no opening or no closing delimiter.
    """
    lines = text.lstrip("\ufeff").splitlines()
    start = 0
    while start < len(lines) and not lines[start].strip():
        start += 1
    if start >= len(lines) or lines[start].strip() != DELIMITER:
        raise MalformedRecordError("missing metadata block", path)
    for end in range(start + 1, len(lines)):
        if lines[end].rstrip() == DELIMITER:
            return "\n".join(lines[start + 1 : end]), "\n".join(lines[end + 1 :])
    raise MalformedRecordError("unterminated metadata block", path)


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def _parse_plain(meta: str, path: Path | None) -> dict[str, Any]:
    """Fallback for metadata YAML rejects, e.g. an unquoted 'title: feat: x'."""
    data: dict[str, Any] = {}
    for line in meta.splitlines():
        if not line.strip() or line.lstrip().startswith("#"):
            continue
        key, sep, value = line.partition(":")
        if not sep:
            raise MalformedRecordError(f"cannot parse metadata line {line!r}", path)
        data[key.strip()] = _unquote(value.strip())
    return data


def _parse_metadata(meta: str, path: Path | None) -> dict[str, Any]:
    try:
        data = yaml.safe_load(meta)
    except yaml.YAMLError as e:
        LOG.debug("Metadata is not valid YAML (%s), using key: value parsing", e)
        data = _parse_plain(meta, path)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise MalformedRecordError("metadata block is not a mapping", path)
    breaking = data.get("breaking")
    if isinstance(breaking, str) and breaking.strip().lower() in _BOOLEAN_STRINGS:
        data["breaking"] = _BOOLEAN_STRINGS[breaking.strip().lower()]
    return data


def decode(text: str, path: Path | None = None) -> ChangesetRecord:
    """Parse changeset file text into a record.

    Unknown keys are ignored and optional keys take defaults. Raises
    MalformedRecordError when the metadata block is unterminated or lacks
    a usable title, pr or author.
    """
    meta, body = _split(text, path)
    data = _parse_metadata(meta, path)
    # Unquoted true/false in text fields
    for key in ("title", "author", "branch", "type"):
        if isinstance(data.get(key), bool):
            data[key] = str(data[key]).lower()
    data["description"] = body.strip()
    data.pop("filename", None)
    try:
        return ChangesetRecord.model_validate(data)
    except ValidationError as e:
        raise MalformedRecordError(f"invalid metadata: {e}", path) from e
