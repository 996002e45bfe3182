"""
Standard exit codes for gitcsemver commands.

Following Unix/POSIX conventions for command-line tools.
"""
from typing import Optional

# Standard POSIX exit codes
SUCCESS = 0              # Successful termination
GENERAL_ERROR = 1        # General errors
USAGE_ERROR = 2          # Misuse of shell command (wrong arguments, etc.)

# Application-specific exit codes (64-113 are typically available)
NO_REPOSITORY = 64       # Path is not inside a git work tree
CONFIG_ERROR = 66        # Configuration file error
DATA_ERROR = 70          # Data format or validation error
VERSION_ERROR = 72       # No valid version for the commit
INTERRUPTED = 130        # Terminated by Ctrl+C (SIGINT)

# Exit code mappings for common exceptions
EXCEPTION_EXIT_CODES = {
    'FileNotFoundError': GENERAL_ERROR,
    'ValueError': DATA_ERROR,
    'KeyError': DATA_ERROR,
    'JSONDecodeError': DATA_ERROR,
    'TOMLDecodeError': CONFIG_ERROR,
    'YAMLError': CONFIG_ERROR,
    'ConfigError': CONFIG_ERROR,
    'KeyboardInterrupt': INTERRUPTED,
}


def get_exit_code_for_exception(exc: Exception) -> int:
    """
    Get the appropriate exit code for an exception.

    Args:
        exc: The exception that occurred

    Returns:
        Appropriate exit code
    """
    exc_name = exc.__class__.__name__
    return EXCEPTION_EXIT_CODES.get(exc_name, GENERAL_ERROR)


class CommandError(Exception):
    """
    Exception that commands can raise to indicate specific exit codes.
    """
    def __init__(self, message: str, exit_code: int = GENERAL_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


class NoRepositoryError(CommandError):
    """Raised when the path is not inside a git repository."""
    def __init__(self, message: str = "No Git repository."):
        super().__init__(message, NO_REPOSITORY)


class ConfigError(CommandError):
    """Raised when there's a configuration error."""
    def __init__(self, message: str):
        super().__init__(message, CONFIG_ERROR)


class VersionError(CommandError):
    """Raised when a commit has no valid version and one is required."""
    def __init__(self, message: str, errors: Optional[list] = None):
        super().__init__(message, VERSION_ERROR)
        self.errors = errors or []
