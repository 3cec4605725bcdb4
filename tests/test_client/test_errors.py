"""Tests for nouncli.client.errors (transport failure classification)."""

from __future__ import annotations

import httpx
import pytest

from nouncli.client.errors import map_transport_error
from nouncli.exceptions import (
    APIValidationError,
    AuthError,
    ConnectionError_,
    NotFoundError,
    RequestTimeoutError,
    ServerError,
    TransportError,
)
from nouncli.parser.extractor import parse_resource

CUSTOMER = parse_resource("Customer", {"name": "string"})


class Rejection(Exception):
    """Third-party style exception exposing the transport error attributes."""

    def __init__(self, **attrs) -> None:
        super().__init__(attrs.get("message", ""))
        for key, value in attrs.items():
            setattr(self, key, value)


class TestNetworkAndTimeout:
    @pytest.mark.parametrize(
        "exc",
        [
            ConnectionRefusedError("refused"),
            httpx.ConnectError("boom"),
            Exception("connect ECONNREFUSED 127.0.0.1:443"),
        ],
    )
    def test_network(self, exc: BaseException) -> None:
        err = map_transport_error(exc)
        assert isinstance(err, ConnectionError_)
        assert not isinstance(err, RequestTimeoutError)
        assert str(err) == "Network error: Unable to connect to the server"
        assert err.exit_code == 6

    @pytest.mark.parametrize(
        "exc",
        [
            TimeoutError(),
            httpx.ReadTimeout("slow"),
            Exception("socket ETIMEDOUT"),
        ],
    )
    def test_timeout(self, exc: BaseException) -> None:
        err = map_transport_error(exc)
        assert isinstance(err, RequestTimeoutError)
        assert str(err) == "Request timed out"

    def test_network_checked_before_details(self) -> None:
        exc = Rejection(
            message="ECONNREFUSED",
            details=[{"field": "name", "message": "required"}],
        )
        assert isinstance(map_transport_error(exc), ConnectionError_)


class TestNotFound:
    def test_with_resource_and_id(self) -> None:
        err = map_transport_error(TransportError(status=404), CUSTOMER, "cus_42")
        assert isinstance(err, NotFoundError)
        assert str(err) == "Customer not found: cus_42"
        assert err.exit_code == 4

    def test_without_id_uses_generic_text(self) -> None:
        err = map_transport_error(TransportError("No such route", status=404))
        assert isinstance(err, NotFoundError)
        assert str(err) == "No such route"

    def test_request_id_appended(self) -> None:
        exc = TransportError(status=404, request_id="req_9")
        err = map_transport_error(exc, CUSTOMER, "cus_1")
        assert str(err) == "Customer not found: cus_1 (Request ID: req_9)"


class TestValidation:
    def test_details_joined(self) -> None:
        exc = TransportError(
            status=422,
            error="Validation failed",
            details=[
                {"field": "email", "message": "is invalid"},
                {"field": "name", "message": "is required"},
            ],
        )
        err = map_transport_error(exc)
        assert isinstance(err, APIValidationError)
        assert str(err) == "Validation failed: email: is invalid, name: is required"
        assert err.exit_code == 8

    def test_default_title_and_request_id(self) -> None:
        exc = Rejection(details=[{"field": "a", "message": "b"}], request_id="req_1")
        assert str(map_transport_error(exc)) == "Error: a: b (Request ID: req_1)"


class TestGeneric:
    def test_error_title_preferred(self) -> None:
        exc = TransportError("long message", status=500, error="Internal")
        err = map_transport_error(exc)
        assert isinstance(err, ServerError)
        assert str(err) == "Internal"

    def test_message_fallback(self) -> None:
        assert str(map_transport_error(TransportError("Bad gateway", status=502))) == "Bad gateway"

    def test_plain_exception_text(self) -> None:
        assert str(map_transport_error(RuntimeError("kaput"))) == "kaput"

    def test_unknown_error(self) -> None:
        err = map_transport_error(TransportError())
        assert str(err) == "Unknown error"

    @pytest.mark.parametrize("status", [401, 403])
    def test_auth_statuses(self, status: int) -> None:
        err = map_transport_error(TransportError("nope", status=status))
        assert isinstance(err, AuthError)
        assert err.exit_code == 3

    def test_request_id_appended(self) -> None:
        exc = TransportError("Server exploded", status=500, request_id="req_abc")
        assert str(map_transport_error(exc)) == "Server exploded (Request ID: req_abc)"
