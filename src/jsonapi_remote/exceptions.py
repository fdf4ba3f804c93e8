"""Exception hierarchy for jsonapi_remote.

Request outcomes are values, not exceptions: transport failures, bad statuses
and decode errors are all reported through
:class:`~jsonapi_remote.remote.Failed`.  The exceptions below cover the
remaining cases -- caller mistakes, broken configuration, and the explicit
conversion of a failed result into a process exit.

All exceptions inherit from :class:`JsonApiRemoteError`, which carries an
``exit_code`` attribute mapped to a constant from
:mod:`jsonapi_remote.exit_codes`.

Subclass hierarchy::

    JsonApiRemoteError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- ConfigError         (exit 1)
    +-- RequestFailedError  (exit code derived from the outcome error)
"""

from __future__ import annotations

from typing import Any

from jsonapi_remote.exit_codes import EXIT_GENERIC_FAILURE, EXIT_INVALID_USAGE


class JsonApiRemoteError(Exception):
    """Base exception for all jsonapi_remote errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(JsonApiRemoteError):
    """Raised for malformed request descriptors or invalid CLI arguments."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(JsonApiRemoteError):
    """Raised for configuration problems (invalid JSON, bad environment values)."""

    exit_code = EXIT_GENERIC_FAILURE


class RequestFailedError(JsonApiRemoteError):
    """Raised when a :class:`~jsonapi_remote.remote.Failed` result is unwrapped.

    Produced by :func:`~jsonapi_remote.messages.unwrap`; the library itself
    never raises it while classifying.

    Attributes:
        error: The :data:`~jsonapi_remote.outcomes.OutcomeError` that caused
            the failure.
    """

    def __init__(self, message: str, error: Any, exit_code: int | None = None):
        super().__init__(message, exit_code)
        self.error = error
