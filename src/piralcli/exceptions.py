"""Exception hierarchy for piralcli.

All exceptions inherit from :class:`PiralCliError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`piralcli.exit_codes`.
The console-script entry points in :mod:`piralcli.app` catch
``PiralCliError`` and exit with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    PiralCliError (exit 1)
    +-- InvalidUsageError          (exit 2)
    |   +-- CommandNotFoundError   (exit 2)
    +-- NotFoundError              (exit 4)
    +-- ValidationError            (exit 5)
    +-- BackendError               (exit 10)
    |   +-- BackendUnavailableError (exit 10)
    +-- ConfigError                (exit 1)
"""

from __future__ import annotations

from piralcli.exit_codes import (
    EXIT_BACKEND_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_VALIDATION_FAILURE,
)


class PiralCliError(Exception):
    """Base exception for all piralcli errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`piralcli.exit_codes`. The entry point catches
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


class InvalidUsageError(PiralCliError):
    """Raised for invalid CLI arguments or missing required options."""

    exit_code = EXIT_INVALID_USAGE


class CommandNotFoundError(InvalidUsageError):
    """Raised when a command token matches no name or alias in the active view.

    Args:
        token: The token the user typed.
        suggestions: Close matches from the same view, best first.
    """

    def __init__(self, token: str, suggestions: list[str] | None = None):
        self.token = token
        self.suggestions = list(suggestions or [])
        message = f"Unknown command '{token}'"
        if self.suggestions:
            message += f". Did you mean: {', '.join(self.suggestions)}?"
        super().__init__(message)


class NotFoundError(PiralCliError):
    """Raised when an entry module, package.json, or tarball does not exist."""

    exit_code = EXIT_NOT_FOUND


class ValidationError(PiralCliError):
    """Raised when a ``validate`` command reports one or more errors.

    Args:
        message: Summary line.
        errors: The individual error messages that were reported.
    """

    exit_code = EXIT_VALIDATION_FAILURE

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.errors = list(errors or [])


class BackendError(PiralCliError):
    """Raised when a backend fails to load, initialise, or execute."""

    exit_code = EXIT_BACKEND_ERROR


class BackendUnavailableError(BackendError):
    """Raised when no loaded backend provides a required capability.

    Args:
        capability: The capability that was requested (e.g. ``"bundle"``).
    """

    def __init__(self, capability: str):
        self.capability = capability
        super().__init__(
            f"No backend provides the '{capability}' capability. "
            "Install a piralcli backend package (e.g. a bundler plugin)."
        )


class ConfigError(PiralCliError):
    """Raised for configuration problems (invalid JSON, bad credential sources)."""

    exit_code = EXIT_GENERIC_FAILURE
