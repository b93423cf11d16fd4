"""Core exceptions for the gateway."""

from typing import Optional


class ProxyError(Exception):
    """Base exception for gateway errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class AuthError(ProxyError):
    """Raised when the caller's API key is missing or does not match."""
    pass


class InvalidRequestError(ProxyError):
    """Raised when an incoming request is invalid."""

    def __init__(self, message: str, code: str = "invalid_request") -> None:
        super().__init__(message)
        self.code = code


class TokenAcquisitionError(ProxyError):
    """Raised when the backend status probe does not yield a session token."""
    pass


class BackendRequestError(ProxyError):
    """Raised when the backend chat endpoint answers with a non-success status."""

    def __init__(self, message: str, body: str = "", status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.body = body
        self.status_code = status_code


class StreamReadError(ProxyError):
    """Raised when the backend connection fails while its body is being read."""
    pass
