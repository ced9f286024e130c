"""Tests for Topsort error types."""

from __future__ import annotations

import pickle

import httpx
import pytest

from services.topsort.errors import (
    ConnectError,
    DecodeError,
    ErrorCode,
    ResponseError,
    TopsortError,
    TransportError,
    classify_error,
)

URL = "https://api.test.topsort.com/v1/auctions"


def status_error(status_code: int, text: str = "") -> httpx.HTTPStatusError:
    """Build the error raise_for_status would raise."""
    request = httpx.Request("POST", URL)
    response = httpx.Response(status_code, text=text, request=request)
    return httpx.HTTPStatusError(f"HTTP {status_code}", request=request, response=response)


class TestErrorCode:
    """Tests for ErrorCode enum."""

    def test_error_codes_exist(self) -> None:
        """ErrorCode should have all expected values."""
        assert ErrorCode.RESPONSE.value == "response"
        assert ErrorCode.CONNECTION.value == "connection"
        assert ErrorCode.TRANSPORT.value == "transport"
        assert ErrorCode.DECODE.value == "decode"


class TestTopsortError:
    """Tests for TopsortError."""

    def test_create_error(self) -> None:
        """TopsortError can be created with required fields."""
        error = TopsortError(ErrorCode.CONNECTION, "Failed to get auction", "Could not connect")

        assert error.code == ErrorCode.CONNECTION
        assert error.operation == "Failed to get auction"
        assert error.detail == "Could not connect"
        assert error.status_code is None
        assert error.url is None
        assert error.content is None
        assert error.cause is None

    def test_str_representation(self) -> None:
        """str should prefix the detail with the operation label."""
        error = TopsortError(ErrorCode.RESPONSE, "Event creation failed", "Content: nope")

        assert str(error) == "Event creation failed: Content: nope"
        assert error.args == ("Event creation failed: Content: nope",)

    def test_cause_is_chained_error(self) -> None:
        """cause should expose the chained error."""
        original = httpx.ConnectError("refused")

        with pytest.raises(TopsortError) as exc_info:
            raise ConnectError("Auction creation failed", URL) from original

        assert exc_info.value.cause is original

    def test_str_appends_cause_text(self) -> None:
        """str should end with the cause's text."""
        with pytest.raises(TopsortError) as exc_info:
            raise ConnectError("Auction creation failed", URL) from httpx.ConnectError("refused")

        error = exc_info.value
        assert str(error) == f"Auction creation failed: Could not connect to {URL}: refused"
        assert error.message == f"Auction creation failed: Could not connect to {URL}"

    def test_str_does_not_repeat_cause_text(self) -> None:
        """Cause text already in the message should not be appended twice."""
        exc = httpx.RemoteProtocolError("malformed")

        with pytest.raises(TopsortError) as exc_info:
            raise TransportError("Event creation failed", exc, URL) from exc

        assert str(exc_info.value) == "Event creation failed: Request failed: malformed"

    def test_pickle_round_trip(self) -> None:
        """Errors should survive pickling with all their fields."""
        error = ResponseError("Auction creation failed", status_error(500, "internal error"))

        restored = pickle.loads(pickle.dumps(error))

        assert isinstance(restored, TopsortError)
        assert restored.code == ErrorCode.RESPONSE
        assert restored.operation == "Auction creation failed"
        assert restored.message == error.message
        assert restored.status_code == 500
        assert restored.url == URL
        assert restored.content == "internal error"
        assert restored.args == error.args

    def test_status_classes(self) -> None:
        """is_client_error and is_server_error should follow the status."""
        client_side = TopsortError(ErrorCode.RESPONSE, "op", "x", status_code=422)
        server_side = TopsortError(ErrorCode.RESPONSE, "op", "x", status_code=503)
        no_status = TopsortError(ErrorCode.CONNECTION, "op", "x")

        assert client_side.is_client_error is True
        assert client_side.is_server_error is False
        assert server_side.is_server_error is True
        assert server_side.is_client_error is False
        assert no_status.is_client_error is False
        assert no_status.is_server_error is False


class TestErrorFactories:
    """Tests for error factory functions."""

    def test_response_error_with_body(self) -> None:
        """ResponseError should embed the response body."""
        error = ResponseError("Auction creation failed", status_error(500, "internal error"))

        assert error.code == ErrorCode.RESPONSE
        assert error.message == "Auction creation failed: Content: internal error"
        assert error.status_code == 500
        assert error.url == URL
        assert error.content == "internal error"

    def test_response_error_without_body(self) -> None:
        """ResponseError should fall back to the transport error text."""
        error = ResponseError("Auction creation failed", status_error(401))

        assert error.message == "Auction creation failed: Message: HTTP 401"
        assert error.content is None

    def test_connect_error(self) -> None:
        """ConnectError should name the URL."""
        error = ConnectError("Failed to get ad locations", URL)

        assert error.code == ErrorCode.CONNECTION
        assert error.message == f"Failed to get ad locations: Could not connect to {URL}"
        assert error.url == URL

    def test_transport_error(self) -> None:
        """TransportError should embed the error text."""
        error = TransportError("Event creation failed", httpx.TooManyRedirects("too many"), URL)

        assert error.code == ErrorCode.TRANSPORT
        assert error.message == "Event creation failed: Request failed: too many"

    def test_decode_error(self) -> None:
        """DecodeError should keep the undecodable body."""
        request = httpx.Request("GET", URL)
        response = httpx.Response(200, text="not json", request=request)

        error = DecodeError("Failed to get auction", ValueError("Expecting value"), response)

        assert error.code == ErrorCode.DECODE
        assert error.message == "Failed to get auction: Invalid JSON response: Expecting value"
        assert error.status_code == 200
        assert error.content == "not json"


class TestClassifyError:
    """Tests for classify_error."""

    def test_status_error(self) -> None:
        """HTTP status errors should be response errors."""
        error = classify_error("op", status_error(500, "boom"), URL)

        assert error.code == ErrorCode.RESPONSE

    @pytest.mark.parametrize(
        "exc",
        [
            httpx.ConnectError("refused"),
            httpx.ConnectTimeout("timeout"),
            httpx.ReadTimeout("timeout"),
            httpx.ReadError("reset"),
        ],
    )
    def test_no_response_errors(self, exc: httpx.HTTPError) -> None:
        """Failures without a response should be connection errors."""
        error = classify_error("op", exc, URL)

        assert error.code == ErrorCode.CONNECTION
        assert error.message == f"op: Could not connect to {URL}"

    @pytest.mark.parametrize(
        "exc",
        [
            httpx.RemoteProtocolError("bad"),
            httpx.ProxyError("proxy"),
            httpx.UnsupportedProtocol("scheme"),
            httpx.TooManyRedirects("loop"),
            httpx.InvalidURL("bad url"),
        ],
    )
    def test_other_errors_fall_back_to_transport(self, exc: Exception) -> None:
        """Every other failure should still produce an error."""
        error = classify_error("op", exc, URL)

        assert error.code == ErrorCode.TRANSPORT
        assert error.url == URL
