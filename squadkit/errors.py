"""Error types and message formatting for squadkit.

Every failure the installer reports to a user derives from SquadError. The
CLI maps each class to a distinct exit code so scripts can tell an unknown
agent apart from an uninitialized target or a missing tool.

Error Style Guide:
- User-facing errors use 'Error: ' prefix
- Field errors use structured format: '<entity> field '<field>' <issue>'
- Use present tense: 'must be', 'is required'
- Include actionable hints where helpful
"""

EXIT_SUCCESS = 0
EXIT_INVALID_ARGS = 2
EXIT_NOT_INITIALIZED = 3
EXIT_TOOL_UNAVAILABLE = 4
EXIT_CONFIG_ERROR = 5
EXIT_IO_ERROR = 6
EXIT_SYNC_FAILED = 7


class SquadError(Exception):
    """Base class for all squadkit errors."""

    exit_code = 1


class ValidationError(SquadError):
    """Bad user input: unknown agent, malformed count or settings string."""

    exit_code = EXIT_INVALID_ARGS


class InvalidSelection(ValidationError):
    """A selection that names unknown agents or misses a required choice."""

    def __init__(self, message: str, offending: str | None = None,
                 valid: list[str] | None = None):
        super().__init__(message)
        self.offending = offending
        self.valid = valid or []

    @classmethod
    def unknown_agent(cls, name: str, valid: list[str]) -> "InvalidSelection":
        return cls(
            f"unknown agent identifier '{name}'. "
            f"Valid agents: {', '.join(valid)}",
            offending=name,
            valid=valid,
        )

    @classmethod
    def core_agent(cls, name: str, valid: list[str]) -> "InvalidSelection":
        return cls(
            f"'{name}' is a core agent and is always installed; "
            "--agents takes dev and infrastructure agents only",
            offending=name,
            valid=valid,
        )


class PreconditionError(SquadError):
    """The environment or target is not in a state the operation needs."""


class TargetNotInitialized(PreconditionError):
    exit_code = EXIT_NOT_INITIALIZED

    def __init__(self, config_file):
        super().__init__(
            f"target not yet initialized: {config_file} not found"
        )
        self.config_file = config_file


class ToolUnavailable(PreconditionError):
    exit_code = EXIT_TOOL_UNAVAILABLE

    def __init__(self, tool: str, hint: str | None = None):
        message = f"required external tool unavailable: {tool}"
        if hint:
            message = f"{message} ({hint})"
        super().__init__(message)
        self.tool = tool


class AgentNotFoundError(SquadError):
    """Raised by catalog lookups for a name the catalog does not define."""

    exit_code = EXIT_INVALID_ARGS

    def __init__(self, name: str):
        super().__init__(f"unknown agent identifier '{name}'")
        self.name = name


class InstallIOError(SquadError):
    """A filesystem operation failed part-way through an installation."""

    exit_code = EXIT_IO_ERROR

    def __init__(self, path, error: OSError):
        super().__init__(f"failed to write {path}: {error}")
        self.path = path
        self.error = error


class SyncFailed(SquadError):
    exit_code = EXIT_SYNC_FAILED


def format_error(message: str) -> str:
    """Format an error message with consistent prefix.

    Examples:
        >>> format_error("file not found")
        'Error: file not found'
    """
    return f"Error: {message}"


def format_field_error(entity: str, field: str, issue: str) -> str:
    """Format a field validation error with structured format.

    Examples:
        >>> format_field_error("Agent 'dev-rails'", "skills", "must be a list or string")
        "Agent 'dev-rails' field 'skills' must be a list or string"
    """
    return f"{entity} field '{field}' {issue}"


def format_suggestion(message: str, suggestion: str) -> str:
    """Format an error message with a helpful suggestion.

    Examples:
        >>> format_suggestion("target not yet initialized", "run 'squadkit install' first")
        "Error: target not yet initialized. Hint: run 'squadkit install' first"
    """
    return f"{format_error(message)}. Hint: {suggestion}"


__all__ = [
    "EXIT_SUCCESS",
    "EXIT_INVALID_ARGS",
    "EXIT_NOT_INITIALIZED",
    "EXIT_TOOL_UNAVAILABLE",
    "EXIT_CONFIG_ERROR",
    "EXIT_IO_ERROR",
    "EXIT_SYNC_FAILED",
    "SquadError",
    "ValidationError",
    "InvalidSelection",
    "PreconditionError",
    "TargetNotInitialized",
    "ToolUnavailable",
    "AgentNotFoundError",
    "InstallIOError",
    "SyncFailed",
    "format_error",
    "format_field_error",
    "format_suggestion",
]
