"""Exception hierarchy for buildmanager.

All exceptions inherit from :class:`BuildManagerError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`buildmanager.exit_codes`.
The top-level error handler in :func:`buildmanager.app.main` catches
``BuildManagerError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    BuildManagerError (exit 1)
    +-- InvalidUsageError      (exit 2)
    |   +-- InvalidArgumentError (exit 2)
    +-- ConfigError            (exit 1)
    +-- ProjectError           (exit 4)
    +-- BuildError             (exit 5)
    +-- HookError              (exit 10)
"""

from buildmanager.exit_codes import (
    EXIT_BUILD_FAILURE,
    EXIT_GENERIC_FAILURE,
    EXIT_HOOK_ERROR,
    EXIT_INVALID_USAGE,
    EXIT_PROJECT_ERROR,
)


class BuildManagerError(Exception):
    """Base exception for all buildmanager errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`buildmanager.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(BuildManagerError):
    """Raised for invalid CLI arguments, unknown targets, or unsupported features."""

    exit_code = EXIT_INVALID_USAGE


class InvalidArgumentError(InvalidUsageError):
    """Raised when a resolver receives an argument it cannot work with (e.g. an empty name)."""


class ConfigError(BuildManagerError):
    """Raised for configuration problems (invalid JSON, no target or editor path configured)."""

    exit_code = EXIT_GENERIC_FAILURE


class ProjectError(BuildManagerError):
    """Raised when Unity project settings files are missing or malformed."""

    exit_code = EXIT_PROJECT_ERROR


class BuildError(BuildManagerError):
    """Raised when the build executor cannot run or the build fails."""

    exit_code = EXIT_BUILD_FAILURE


class HookError(BuildManagerError):
    """Raised when a hook fails to load, initialise, or execute."""

    exit_code = EXIT_HOOK_ERROR
