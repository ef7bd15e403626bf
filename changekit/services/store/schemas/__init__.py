"""Schemas for changeset files."""

from changekit.services.store.schemas.changeset_file import CHANGE_TYPES, ChangesetRecord

__all__ = ["CHANGE_TYPES", "ChangesetRecord"]
