"""Errors raised by the changeset store and codec."""

from pathlib import Path


class ChangekitError(Exception):
    """Base for errors that abort a changekit invocation."""

    pass


class MalformedRecordError(ChangekitError):
    """Raised when a changeset file has an unterminated or unparsable metadata block."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        self.path = path
        if path is not None:
            message = f"{path}: {message}"
        super().__init__(message)


class StoreIOError(ChangekitError):
    """Raised on filesystem failures other than a missing changesets directory."""

    pass
