"""Exception hierarchy for nouncli.

All dispatcher errors inherit from :class:`NouncliError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`nouncli.exit_codes`.
Command handlers raise these exceptions; :meth:`nouncli.runner.CLIRunner.execute`
catches them at a single point and turns them into a failed
:class:`~nouncli.models.CommandResult`, so none of them escape to the caller.

Subclass hierarchy::

    NouncliError (exit 1)
    +-- InvalidUsageError     (exit 2)
    +-- AuthError             (exit 3)
    +-- NotFoundError         (exit 4)
    +-- ServerError           (exit 5)
    +-- ConnectionError_      (exit 6)
    |   +-- RequestTimeoutError (exit 6)
    +-- SchemaError           (exit 7)
    +-- APIValidationError    (exit 8)
    +-- ConfigError           (exit 1)

:class:`TransportError` sits outside this tree: it is what a transport
raises when the remote call fails, and
:func:`~nouncli.client.errors.map_transport_error` classifies it into one
of the classes above.
"""

from __future__ import annotations

from typing import Any, Optional

from nouncli.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_SCHEMA_ERROR,
    EXIT_SERVER_ERROR,
    EXIT_VALIDATION_ERROR,
)


class NouncliError(Exception):
    """Base exception for all nouncli errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`nouncli.exit_codes`.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
        suggestion: Optional "did you mean" hint for usage errors.
        usage: Optional literal invocation shape, e.g. ``customer get <id>``.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(
        self,
        message: str,
        exit_code: int | None = None,
        suggestion: Optional[str] = None,
        usage: Optional[str] = None,
    ):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code
        self.suggestion = suggestion
        self.usage = usage


class InvalidUsageError(NouncliError):
    """Raised for unknown commands, invalid arguments or missing required parameters."""

    exit_code = EXIT_INVALID_USAGE


class AuthError(NouncliError):
    """Raised when the caller is not authenticated or the credential is rejected."""

    exit_code = EXIT_AUTH_FAILURE


class NotFoundError(NouncliError):
    """Raised when the transport reports HTTP 404."""

    exit_code = EXIT_NOT_FOUND


class ServerError(NouncliError):
    """Raised for remote failures without a more specific classification."""

    exit_code = EXIT_SERVER_ERROR


class ConnectionError_(NouncliError):
    """Raised when the server cannot be reached.

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class RequestTimeoutError(ConnectionError_):
    """Raised when the transport call timed out."""


class SchemaError(NouncliError):
    """Raised when the application definition cannot be parsed or fails validation."""

    exit_code = EXIT_SCHEMA_ERROR


class APIValidationError(NouncliError):
    """Raised when the remote API rejects a payload with field-level details."""

    exit_code = EXIT_VALIDATION_ERROR


class ConfigError(NouncliError):
    """Raised for configuration problems (refused keys, unwritable config directory)."""

    exit_code = EXIT_GENERIC_FAILURE


class TransportError(Exception):
    """Structured failure raised by a transport when the remote call is rejected.

    Any field may be absent. The error mapper reads them duck-typed, so
    third-party exceptions exposing the same attribute names are classified
    the same way.

    Args:
        message: Human-readable description of the failure.
        status: HTTP-like status code reported by the remote side.
        error: Short error title from the response body.
        details: Field-level problems, each ``{"field": ..., "message": ...}``.
        request_id: Correlation id for support requests.
    """

    def __init__(
        self,
        message: str = "",
        *,
        status: Optional[int] = None,
        error: Optional[str] = None,
        details: Optional[list[dict[str, Any]]] = None,
        request_id: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.error = error
        self.details = details
        self.request_id = request_id
