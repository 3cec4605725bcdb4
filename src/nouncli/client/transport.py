"""Production transport -- performs dispatcher requests over HTTP with httpx.

The dispatcher only knows the transport contract: an awaitable callable
taking a :class:`~nouncli.models.TransportRequest` and returning the decoded
response, or raising on failure. :class:`HttpTransport` fulfils it on top of
:class:`httpx.AsyncClient` and layers on:

- **Auth injection** -- the API key is sent as ``Authorization: Bearer``,
  or raw in a custom header.
- **Retry with backoff** -- retries on 5xx and network errors with
  exponential delay (1 s, 2 s, 4 s, ...). Retrying is the transport's job;
  the dispatcher maps the first failure it sees and returns.
- **Error shaping** -- a 4xx/5xx response becomes a
  :class:`~nouncli.exceptions.TransportError` whose fields come from the
  JSON error body, so the error mapper can classify it.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

import httpx

from nouncli.exceptions import TransportError
from nouncli.models import TransportRequest

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "x-request-id"


class HttpTransport:
    """Send :class:`~nouncli.models.TransportRequest` objects to a REST API.

    A fresh :class:`httpx.AsyncClient` is opened per call, matching the
    one-command-per-process usage of the CLI.

    Args:
        base_url: API root that request paths are appended to.
        api_key: Credential to inject, if any.
        header_name: Header for the credential. ``None`` or
            ``Authorization`` sends ``Bearer <key>``; any other header
            receives the raw key.
        timeout: Per-request timeout in seconds.
        max_retries: Extra attempts on 5xx responses and network errors.
        transport: Optional httpx transport, e.g. :class:`httpx.MockTransport`.

    Example::

        transport = HttpTransport("https://api.example.com", api_key="sk_live_...")
        await transport(TransportRequest(method="GET", path="/customers"))
    """

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        header_name: Optional[str] = None,
        timeout: float = 30.0,
        max_retries: int = 3,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._header_name = header_name
        self._timeout = timeout
        self._max_retries = max_retries
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self._base_url

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._api_key:
            if self._header_name in (None, "Authorization"):
                headers["Authorization"] = f"Bearer {self._api_key}"
            else:
                headers[self._header_name] = self._api_key
        return headers

    async def __call__(self, request: TransportRequest) -> Any:
        """Perform *request* and return the decoded body.

        Returns:
            The JSON-decoded body, the raw text for non-JSON bodies, or
            ``None`` for an empty body.

        Raises:
            TransportError: On a 4xx/5xx response (after retries for 5xx).
            httpx.ConnectError: When the server is unreachable after retries.
            httpx.TimeoutException: When every attempt timed out.
        """
        async with httpx.AsyncClient(
            base_url=self._base_url,
            headers=self._headers(),
            timeout=self._timeout,
            follow_redirects=True,
            transport=self._transport,
        ) as client:
            response = await self._send_with_retry(client, request)

        if response.status_code >= 400:
            raise _transport_error(response)
        return extract_response_data(response)

    async def _send_with_retry(
        self,
        client: httpx.AsyncClient,
        request: TransportRequest,
    ) -> httpx.Response:
        method = request.method.value
        for attempt in range(self._max_retries + 1):
            try:
                logger.debug("%s %s%s", method, self._base_url, request.path)
                response = await client.request(
                    method,
                    request.path,
                    params=request.query,
                    json=request.body,
                )
                if response.status_code >= 500 and attempt < self._max_retries:
                    delay = 2 ** attempt
                    logger.debug(
                        "Server error %s, retrying in %ss (attempt %s/%s)",
                        response.status_code, delay, attempt + 1, self._max_retries,
                    )
                    await asyncio.sleep(delay)
                    continue
                return response
            except (httpx.ConnectError, httpx.TimeoutException, httpx.NetworkError) as exc:
                if attempt >= self._max_retries:
                    raise
                delay = 2 ** attempt
                logger.debug(
                    "Connection error: %s, retrying in %ss (attempt %s/%s)",
                    exc, delay, attempt + 1, self._max_retries,
                )
                await asyncio.sleep(delay)
        raise AssertionError("unreachable")  # pragma: no cover


def extract_response_data(response: httpx.Response) -> Any:
    """Return the JSON body of *response*, its text, or ``None`` when empty."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def _transport_error(response: httpx.Response) -> TransportError:
    """Build a :class:`TransportError` from an error response."""
    body = extract_response_data(response)
    request_id = response.headers.get(REQUEST_ID_HEADER)

    if isinstance(body, dict):
        error_title = body.get("error")
        message = body.get("message") or body.get("detail") or ""
        details = body.get("details") if isinstance(body.get("details"), list) else None
        request_id = body.get("requestId") or body.get("request_id") or request_id
    else:
        error_title = None
        message = body[:200] if isinstance(body, str) else ""
        details = None

    if not isinstance(error_title, str):
        error_title = None
    return TransportError(
        message or f"HTTP {response.status_code}",
        status=response.status_code,
        error=error_title,
        details=details,
        request_id=request_id,
    )
