"""Changeset storage (.changesets/)."""

from changekit.services.store.changeset_store import (
    changeset_filename,
    create_changeset,
    delete_all_changesets,
    list_changesets,
    load_changeset,
    matches_branch,
)
from changekit.services.store.codec import decode, encode
from changekit.services.store.schemas import CHANGE_TYPES, ChangesetRecord

__all__ = [
    "CHANGE_TYPES",
    "ChangesetRecord",
    "changeset_filename",
    "create_changeset",
    "decode",
    "delete_all_changesets",
    "encode",
    "list_changesets",
    "load_changeset",
    "matches_branch",
]
