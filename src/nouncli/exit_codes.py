"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~nouncli.exceptions.NouncliError` subclass. Every
:class:`~nouncli.models.CommandResult` carries one of these codes, and the
console entry point exits with it, so shell wrappers can tell failure
classes apart without parsing stderr.

Example::

    $ shop customer get
    $ echo $?
    2   # EXIT_INVALID_USAGE -- the <id> argument is missing
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_AUTH_FAILURE = 3
"""Not authenticated, or the credential was rejected."""

EXIT_NOT_FOUND = 4
"""The requested record was not found (HTTP 404)."""

EXIT_SERVER_ERROR = 5
"""The remote API reported a failure that is not covered by a narrower code."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (connection refused, timeout)."""

EXIT_SCHEMA_ERROR = 7
"""The application definition could not be loaded or validated."""

EXIT_VALIDATION_ERROR = 8
"""The remote API rejected the payload with field-level validation details."""
