"""CLI logging setup.

Diagnostics go to stderr; stdout is reserved for command output (the new
changeset name, the bump type, the rendered notes), so release workflows can
pipe it straight into a file.

Level comes from --log-level, else changekit.yaml (logging.level) or env
LOGGING_LEVEL. Unknown names fall back to INFO.
"""

import logging
import sys

from changekit.config import LoggingConfig

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# HTTP client loggers, silenced unless running at DEBUG
NOISY_LOGGERS = ("urllib3",)


def _resolve_level(level: str) -> int:
    return LEVELS.get(level.upper().strip(), logging.INFO)


def configure_logging(config: LoggingConfig, level: str | None = None) -> int:
    """Point the root logger at stderr with the configured level and format.

    level overrides config.level. Returns the level applied.
    """
    resolved = _resolve_level(level or config.level)
    logging.basicConfig(
        level=resolved,
        format=config.format or DEFAULT_FORMAT,
        stream=sys.stderr,
        force=True,
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if resolved <= logging.DEBUG else logging.WARNING)
    return resolved
