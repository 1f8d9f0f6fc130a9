"""Logging setup for the CLI.

Logs go to stderr; stdout is reserved for the review (or usage/error line).
Level comes from Settings.log_level (env PR_REVIEW_LOG_LEVEL).
"""

import logging
import sys

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def resolve_level(level: str) -> int:
    """Map a level name to its logging constant, WARNING if unknown."""
    return LEVELS.get(level.upper().strip(), logging.WARNING)


def configure_logging(level: str = "WARNING") -> None:
    logging.basicConfig(
        level=resolve_level(level),
        format=DEFAULT_FORMAT,
        stream=sys.stderr,
        force=True,
    )
