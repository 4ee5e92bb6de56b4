"""squadkit: install agent personas and skills into a project's .claude directory."""

import logging

from .config import ConfigError, load_json
from .errors import (
    InvalidSelection,
    PreconditionError,
    SquadError,
    TargetNotInitialized,
    ToolUnavailable,
    ValidationError,
    format_error,
    format_suggestion,
)

__version__ = "0.3.0"

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def setup_logging(debug: bool = False) -> None:
    """Configure root logging: DEBUG with --debug, WARNING otherwise."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format=LOG_FORMAT,
        force=True,
    )


__all__ = [
    "__version__",
    "setup_logging",
    "ConfigError",
    "load_json",
    "SquadError",
    "ValidationError",
    "InvalidSelection",
    "PreconditionError",
    "TargetNotInitialized",
    "ToolUnavailable",
    "format_error",
    "format_suggestion",
]
