"""Error types raised by the Alpha Vantage client."""

from __future__ import annotations

from typing import Optional


class AlphaVantageError(RuntimeError):
    """
    Base exception type for Alpha Vantage client failures.

    Messages must never contain the API key.
    """

    def __init__(self, message: str, *, code: str = "alpha_vantage_error") -> None:
        super().__init__(message)
        self.message = message
        self.code = code

    def __str__(self) -> str:  # pragma: no cover
        return self.message


class ConfigurationError(AlphaVantageError):
    """Raised when the API key or client configuration is missing or invalid."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="configuration")


class ValidationError(AlphaVantageError, ValueError):
    """Raised when a request parameter is rejected before any network call."""

    def __init__(self, message: str, *, parameter: Optional[str] = None) -> None:
        super().__init__(message, code="validation")
        self.parameter = parameter


class TransportError(AlphaVantageError):
    """Raised when the HTTP round trip itself fails."""

    def __init__(self, message: str, *, code: str = "transport") -> None:
        super().__init__(message, code=code)


class TransportConnectionError(TransportError):
    def __init__(self, message: str) -> None:
        super().__init__(message, code="connection")


class TransportTimeoutError(TransportError):
    def __init__(self, message: str) -> None:
        super().__init__(message, code="timeout")


class InvalidBodyError(TransportError):
    """Raised when the response body is not valid UTF-8 text."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="invalid_body")


class ApiError(AlphaVantageError):
    """Raised for non-success HTTP statuses."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        body: str,
        request_id: Optional[str] = None,
    ) -> None:
        super().__init__(message, code="api_error")
        self.status_code = status_code
        self.body = body
        self.request_id = request_id


class DecodeError(AlphaVantageError):
    """
    Raised when a body cannot be mapped onto the endpoint's typed structure.

    ``raw_body`` always carries the untouched response text so callers can
    fall back to inspecting the JSON themselves. ``api_message`` is set when
    the service answered with an error envelope instead of data.
    """

    def __init__(
        self,
        message: str,
        *,
        raw_body: str,
        code: str = "decode_error",
        api_message: Optional[str] = None,
    ) -> None:
        super().__init__(message, code=code)
        self.raw_body = raw_body
        self.api_message = api_message


class ProjectionError(AlphaVantageError):
    """Raised when the requested output shape cannot be derived from a result."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="projection")


class RequestConsumedError(AlphaVantageError):
    """Raised when a request builder is used after it has been executed."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="request_consumed")
