"""Error types for the Topsort client."""

from __future__ import annotations

from enum import Enum

import httpx


class ErrorCode(str, Enum):
    """Error codes for Topsort errors."""

    RESPONSE = "response"
    CONNECTION = "connection"
    TRANSPORT = "transport"
    DECODE = "decode"


class TopsortError(Exception):
    """
    Error raised by every failed Topsort client call.

    The underlying transport or decode error is chained as ``__cause__``.

    Attributes:
        code: Error code identifying the kind of failure.
        operation: Label of the operation that failed.
        detail: Failure description, without the operation label.
        status_code: HTTP status, when the server responded.
        url: Target URL of the failed request.
        content: Response body text, when the server sent one.
    """

    def __init__(
        self,
        code: ErrorCode,
        operation: str,
        detail: str,
        *,
        status_code: int | None = None,
        url: str | None = None,
        content: str | None = None,
    ) -> None:
        self.code = code
        self.operation = operation
        self.detail = detail
        self.status_code = status_code
        self.url = url
        self.content = content
        super().__init__(self.message)

    @property
    def message(self) -> str:
        """Full human-readable message."""
        return f"{self.operation}: {self.detail}"

    @property
    def cause(self) -> BaseException | None:
        """The original error this one wraps."""
        return self.__cause__

    @property
    def is_client_error(self) -> bool:
        """Check if the server rejected the request with a 4xx status."""
        return self.status_code is not None and 400 <= self.status_code < 500

    @property
    def is_server_error(self) -> bool:
        """Check if the server failed with a 5xx status."""
        return self.status_code is not None and self.status_code >= 500

    def __str__(self) -> str:
        """Return the message, followed by the cause's text when it adds any."""
        cause = str(self.__cause__) if self.__cause__ is not None else ""
        if cause and cause not in self.message:
            return f"{self.message}: {cause}"
        return self.message

    def __repr__(self) -> str:
        return f"TopsortError(code={self.code.value!r}, message={self.message!r})"

    def __reduce__(self) -> tuple[type[TopsortError], tuple[ErrorCode, str, str], dict[str, object]]:
        # The cause is not pickled; transport errors hold unpicklable requests
        return (
            self.__class__,
            (self.code, self.operation, self.detail),
            {"status_code": self.status_code, "url": self.url, "content": self.content},
        )


def ResponseError(operation: str, exc: httpx.HTTPStatusError) -> TopsortError:
    """Create an error for a response with a non-success status."""
    response = exc.response
    content = response.text
    detail = f"Content: {content}" if content else f"Message: {exc}"
    return TopsortError(
        ErrorCode.RESPONSE,
        operation,
        detail,
        status_code=response.status_code,
        url=str(exc.request.url),
        content=content or None,
    )


def ConnectError(operation: str, url: str) -> TopsortError:
    """Create an error for a request that got no response."""
    return TopsortError(
        ErrorCode.CONNECTION,
        operation,
        f"Could not connect to {url}",
        url=url,
    )


def TransportError(operation: str, exc: Exception, url: str | None = None) -> TopsortError:
    """Create an error for any other transport failure."""
    return TopsortError(
        ErrorCode.TRANSPORT,
        operation,
        f"Request failed: {exc}",
        url=url,
    )


def DecodeError(operation: str, exc: ValueError, response: httpx.Response) -> TopsortError:
    """Create an error for a success response whose body is not JSON."""
    return TopsortError(
        ErrorCode.DECODE,
        operation,
        f"Invalid JSON response: {exc}",
        status_code=response.status_code,
        url=str(response.request.url),
        content=response.text or None,
    )


def classify_error(
    operation: str,
    exc: httpx.HTTPError | httpx.InvalidURL,
    url: str,
) -> TopsortError:
    """
    Map an httpx error onto a TopsortError.

    Every httpx error produces an error; failures that are neither a bad
    status nor a missing response fall back to ``ErrorCode.TRANSPORT``.

    Args:
        operation: Label of the operation that failed.
        exc: The httpx error.
        url: Target URL of the request.

    Returns:
        The normalized error. The caller chains ``exc`` when raising it.
    """
    if isinstance(exc, httpx.HTTPStatusError):
        return ResponseError(operation, exc)

    if isinstance(exc, httpx.TimeoutException | httpx.NetworkError):
        return ConnectError(operation, url)

    return TransportError(operation, exc, url)
