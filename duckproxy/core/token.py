"""Backend session token acquisition.

The backend hands out a single-use session token in a response header of its
status endpoint. A token is fetched per chat call; nothing is cached.
"""

import logging

import httpx

from .backend import BackendSettings, format_httpx_error
from .exceptions import TokenAcquisitionError

logger = logging.getLogger("duckproxy")


class TokenProvider:
    """Mints backend session tokens by probing the status endpoint."""

    def __init__(self, settings: BackendSettings) -> None:
        self.settings = settings

    async def acquire(self, client: httpx.AsyncClient) -> str:
        """Fetch a fresh session token.

        Args:
            client: The request-scoped client used for the following chat call.

        Returns:
            The token read from the configured response header.

        Raises:
            TokenAcquisitionError: The call failed, returned a non-success
                status, or did not carry the header.
        """
        url = self.settings.status_url
        logger.debug("Fetching %s token from %s", self.settings.token_header, url)
        try:
            resp = await client.get(url, headers=dict(self.settings.headers))
        except httpx.HTTPError as exc:
            message = format_httpx_error(exc, url)
            logger.error("Error fetching %s token: %s", self.settings.token_header, message)
            raise TokenAcquisitionError(message) from exc

        if not resp.is_success:
            logger.error(
                "Status probe %s returned status %s", url, resp.status_code
            )
            raise TokenAcquisitionError(f"status probe returned status {resp.status_code}")

        token = resp.headers.get(self.settings.token_header, "").strip()
        if not token:
            logger.error(
                "Status probe %s did not return a %s header", url, self.settings.token_header
            )
            raise TokenAcquisitionError(f"status probe returned no {self.settings.token_header} header")

        logger.debug("Received %s token", self.settings.token_header)
        return token
