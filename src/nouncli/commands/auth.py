"""Auth commands -- store and remove the API credential.

``login`` checks the key locally, optionally validates it through the
caller's callback, then writes it to ``credentials.json``. ``logout``
deletes that file and is idempotent.

Typical workflow::

    shop login --api-key sk_live_abc123
    shop customer list
    shop logout
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Callable, Optional

from nouncli.client.errors import map_transport_error
from nouncli.config import ConfigStore
from nouncli.exceptions import AuthError, InvalidUsageError
from nouncli.models import CommandResult, CredentialCheck

logger = logging.getLogger(__name__)

API_KEY_FLAG = "--api-key"
MIN_API_KEY_LENGTH = 8
RESERVED_INVALID_KEY = "invalid"
LOGIN_USAGE = "login --api-key <key>"


def _read_api_key(args: list[str]) -> Optional[str]:
    """Return the value of ``--api-key <key>`` or ``--api-key=<key>``."""
    for i, arg in enumerate(args):
        if arg == API_KEY_FLAG:
            if i + 1 < len(args) and args[i + 1]:
                return args[i + 1]
            return None
        if arg.startswith(API_KEY_FLAG + "="):
            return arg.split("=", 1)[1] or None
    return None


async def _check_credentials(
    validator: Callable[..., Any], api_key: str
) -> CredentialCheck:
    try:
        result = validator(api_key)
        if inspect.isawaitable(result):
            result = await result
    except Exception as exc:
        raise map_transport_error(exc) from exc
    if isinstance(result, CredentialCheck):
        return result
    return CredentialCheck.model_validate(result, from_attributes=True)


async def login(
    args: list[str],
    store: ConfigStore,
    validate_credentials: Optional[Callable[..., Any]] = None,
) -> CommandResult:
    """Authenticate with an API key and persist it.

    Args:
        args: Tokens after ``login``.
        store: Config store of the application.
        validate_credentials: Optional callback receiving the key and
            returning ``{"valid": bool, "user": {...}}``. May be async.

    Raises:
        InvalidUsageError: When no key is given.
        AuthError: When the key has an invalid format or is rejected.
    """
    api_key = _read_api_key(args)
    if not api_key:
        raise InvalidUsageError(
            "API key is required. Use --api-key <key>", usage=LOGIN_USAGE
        )

    if len(api_key) < MIN_API_KEY_LENGTH or api_key == RESERVED_INVALID_KEY:
        raise AuthError("Invalid API key format")

    if validate_credentials is None:
        store.save_credentials(api_key)
        return CommandResult.ok(
            "Successfully authenticated!", message="Successfully authenticated!"
        )

    check = await _check_credentials(validate_credentials, api_key)
    if not check.valid:
        raise AuthError("Invalid API key")

    store.save_credentials(api_key)
    email = (check.user or {}).get("email")
    logger.debug("Credential accepted for %s", email or "unknown user")
    message = "Successfully authenticated!"
    if check.user:
        message += f"\nLogged in as: {email}"
    return CommandResult.ok(
        f"Logged in as: {email or 'Unknown'}",
        message=message,
        data=check.user,
    )


def logout(store: ConfigStore) -> CommandResult:
    """Remove the stored credential. Succeeds whether or not one existed."""
    removed = store.clear_credentials()
    logger.debug("Logout removed credentials: %s", removed)
    return CommandResult.ok(
        "Successfully logged out", message="Successfully logged out"
    )
