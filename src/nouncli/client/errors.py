"""Classify transport failures into the nouncli error taxonomy.

A transport signals failure by raising. What it raises is one of two
shapes:

* an ordinary exception (``ConnectionRefusedError``, ``httpx.ConnectError``,
  ``TimeoutError``...) whose type or message identifies a network problem;
* a :class:`~nouncli.exceptions.TransportError` (or any exception with the
  same attributes) carrying ``status``, ``error``, ``message``,
  ``details`` and ``request_id`` from the remote response.

:func:`map_transport_error` turns either into a
:class:`~nouncli.exceptions.NouncliError`. The checks are ordered: network
and timeout first, then not-found, then field validation, then the generic
fallback, so a value matching several shapes is classified predictably.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from nouncli.exceptions import (
    APIValidationError,
    AuthError,
    ConnectionError_,
    NotFoundError,
    NouncliError,
    RequestTimeoutError,
    ServerError,
)
from nouncli.models import ResourceDescriptor

CONNECTION_REFUSED_MARKER = "ECONNREFUSED"
TIMEOUT_MARKER = "ETIMEDOUT"


def _is_network_error(exc: BaseException) -> bool:
    if isinstance(exc, (ConnectionRefusedError, httpx.ConnectError)):
        return True
    return CONNECTION_REFUSED_MARKER in str(exc)


def _is_timeout(exc: BaseException) -> bool:
    if isinstance(exc, (TimeoutError, httpx.TimeoutException)):
        return True
    return TIMEOUT_MARKER in str(exc)


def _with_request_id(message: str, request_id: Any) -> str:
    if request_id:
        return f"{message} (Request ID: {request_id})"
    return message


def _format_details(details: list[Any]) -> str:
    parts = []
    for detail in details:
        if isinstance(detail, dict):
            parts.append(f"{detail.get('field', '?')}: {detail.get('message', '')}")
        else:
            parts.append(str(detail))
    return ", ".join(parts)


def map_transport_error(
    exc: BaseException,
    resource: Optional[ResourceDescriptor] = None,
    record_id: Optional[str] = None,
) -> NouncliError:
    """Map a transport failure to a :class:`~nouncli.exceptions.NouncliError`.

    Args:
        exc: Whatever the transport raised.
        resource: The resource the command addressed, used to render
            not-found messages.
        record_id: The id the command addressed, if any.

    Returns:
        The classified error. Its message ends with ``(Request ID: ...)``
        whenever the failure carried a correlation id.
    """
    request_id = getattr(exc, "request_id", None)

    if _is_network_error(exc):
        return ConnectionError_(
            _with_request_id("Network error: Unable to connect to the server", request_id)
        )

    if _is_timeout(exc):
        return RequestTimeoutError(_with_request_id("Request timed out", request_id))

    status = getattr(exc, "status", None)
    error_title = getattr(exc, "error", None)
    message = getattr(exc, "message", None)
    fallback = error_title or message or str(exc) or "Unknown error"

    if status == 404:
        if resource is not None and record_id is not None:
            text = f"{resource.name} not found: {record_id}"
        else:
            text = fallback
        return NotFoundError(_with_request_id(text, request_id))

    details = getattr(exc, "details", None)
    if isinstance(details, list):
        text = f"{error_title or 'Error'}: {_format_details(details)}"
        return APIValidationError(_with_request_id(text, request_id))

    text = _with_request_id(fallback, request_id)
    if status in (401, 403):
        return AuthError(text)
    return ServerError(text)
