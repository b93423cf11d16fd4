"""Backend configuration and utilities."""

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

import httpx

logger = logging.getLogger("duckproxy")

DEFAULT_STATUS_URL = "https://duckduckgo.com/duckchat/v1/status"
DEFAULT_CHAT_URL = "https://duckduckgo.com/duckchat/v1/chat"
DEFAULT_TOKEN_HEADER = "x-vqd-4"

# The backend only answers clients that look like its own web page.
DEFAULT_HEADERS: dict[str, str] = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; WOW64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/102.0.0.0 Safari/537.36"
    ),
    "Accept": "text/event-stream",
    "Accept-Language": "de,en-US;q=0.7,en;q=0.3",
    "Accept-Encoding": "gzip, deflate",
    "Referer": "https://duckduckgo.com/?q=DuckDuckGo&ia=chat",
    "Content-Type": "application/json",
    "Origin": "https://duckduckgo.com",
    "Connection": "keep-alive",
    "Cookie": "dcm=1; bg=-1",
    "Sec-Fetch-Dest": "empty",
    "Sec-Fetch-Mode": "cors",
    "Sec-Fetch-Site": "same-origin",
    "Pragma": "no-cache",
    "TE": "trailers",
    "x-vqd-accept": "1",
    "cache-control": "no-store",
}

SENSITIVE_HEADERS = {"authorization", "cookie", DEFAULT_TOKEN_HEADER}


@dataclass(frozen=True)
class BackendSettings:
    """Where and how to reach the chat backend.

    Built once from configuration and handed to every call site that talks
    to the backend.
    """

    status_url: str = DEFAULT_STATUS_URL
    chat_url: str = DEFAULT_CHAT_URL
    token_header: str = DEFAULT_TOKEN_HEADER
    headers: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_HEADERS))
    timeout_seconds: Optional[float] = None

    def build_timeout(self) -> httpx.Timeout:
        """Return the httpx timeout; ``None`` disables every limit."""
        return httpx.Timeout(self.timeout_seconds)

    def chat_headers(self, token: str) -> dict[str, str]:
        """Headers for a chat call carrying the given session token."""
        headers = {self.token_header: token}
        headers.update(self.headers)
        return headers


def build_backend_settings(section: Optional[Mapping[str, Any]]) -> BackendSettings:
    """Build :class:`BackendSettings` from the ``backend`` config section."""
    section = section or {}

    headers = dict(DEFAULT_HEADERS)
    extra_headers = section.get("headers")
    if isinstance(extra_headers, Mapping):
        headers.update({str(k): str(v) for k, v in extra_headers.items()})

    timeout_raw = section.get("timeout_seconds")
    timeout_seconds: Optional[float] = None
    if timeout_raw is not None:
        try:
            timeout_seconds = float(timeout_raw)
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid backend.timeout_seconds=%r", timeout_raw)
        else:
            if timeout_seconds <= 0:
                timeout_seconds = None

    return BackendSettings(
        status_url=str(section.get("status_url") or DEFAULT_STATUS_URL),
        chat_url=str(section.get("chat_url") or DEFAULT_CHAT_URL),
        token_header=str(section.get("token_header") or DEFAULT_TOKEN_HEADER).lower(),
        headers=headers,
        timeout_seconds=timeout_seconds,
    )


def format_httpx_error(exc: Any, url: Optional[str] = None) -> str:
    """Produce a detailed, user-facing description of an httpx error."""
    parts = [exc.__class__.__name__]
    message = str(exc).strip()
    if message:
        parts.append(message)

    try:
        request = getattr(exc, "request", None)
    except RuntimeError:
        # httpx raises when .request is read on an error raised without one
        request = None
    if request is not None:
        parts.append(f"request={request.method} {request.url}")
    elif url:
        parts.append(f"url={url}")

    return "; ".join(parts)


def safe_headers_for_log(headers: Mapping[str, str]) -> dict[str, str]:
    """Copy headers with credentials and session tokens masked."""
    masked: dict[str, str] = {}
    for key, value in headers.items():
        if str(key).lower() in SENSITIVE_HEADERS:
            value = str(value)
            masked[str(key)] = value[:3] + "****" if len(value) > 3 else "****"
        else:
            masked[str(key)] = str(value)
    return masked
