"""Operator API key check for inbound requests."""

from __future__ import annotations

import hmac
import logging

from fastapi import Request

from ..core.exceptions import AuthError

logger = logging.getLogger("duckproxy")

BEARER_PREFIX = "bearer "
MISSING_HEADER_MESSAGE = "authorization error"
KEY_MISMATCH_MESSAGE = "apikey error"


class ApiKeyValidator:
    """Checks the ``Authorization: Bearer <key>`` header.

    The check only applies when an API key is configured; with an empty key
    every request is let through.
    """

    def __init__(self, api_key: str | None = None) -> None:
        self.api_key = api_key or ""

    def is_enabled(self) -> bool:
        """Check if API key authentication is enabled."""
        return bool(self.api_key)

    def validate(self, request: Request) -> None:
        """Validate an incoming request.

        Raises:
            AuthError: The header is missing, not a bearer credential, or
                carries the wrong key.
        """
        if not self.is_enabled():
            return

        auth_header = request.headers.get("Authorization")
        if not auth_header:
            logger.warning("Request rejected: missing Authorization header")
            raise AuthError(MISSING_HEADER_MESSAGE)

        if not auth_header.lower().startswith(BEARER_PREFIX):
            logger.warning("Request rejected: Authorization header is not a bearer key")
            raise AuthError(KEY_MISMATCH_MESSAGE)

        provided_key = auth_header[len(BEARER_PREFIX):].strip()
        # Constant-time comparison
        if not hmac.compare_digest(provided_key.encode("utf-8"), self.api_key.encode("utf-8")):
            logger.warning("Request rejected: invalid API key")
            raise AuthError(KEY_MISMATCH_MESSAGE)
