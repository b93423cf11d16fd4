"""Gateway harness for in-process simulation tests."""

from __future__ import annotations

from typing import Any, Mapping, Optional

import httpx
from fastapi import FastAPI

from ..main import create_app
from .fake_backend import CHAT_PATH, STATUS_PATH, FakeDuckChat

FAKE_BACKEND_URL = "http://duck.local"


def build_gateway_config(
    *,
    api_key: str = "",
    base_url: str = FAKE_BACKEND_URL,
    models: Optional[list[str]] = None,
) -> dict[str, Any]:
    """Build a gateway config pointing at the fake backend."""
    config: dict[str, Any] = {
        "proxy_settings": {
            "api_key": api_key,
            "logging": {"level": "DEBUG", "log_to_disk": False},
        },
        "backend": {
            "status_url": f"{base_url}{STATUS_PATH}",
            "chat_url": f"{base_url}{CHAT_PATH}",
        },
    }
    if models is not None:
        config["models"] = models
    return config


class GatewayHarness:
    """Build the gateway app wired to a :class:`FakeDuckChat`.

    Usage:
        harness = GatewayHarness()
        harness.backend.enqueue_messages(["Hi"])
        async with harness.make_async_client() as client:
            response = await client.post("/v1/chat/completions", json={...})
    """

    def __init__(
        self,
        backend: Optional[FakeDuckChat] = None,
        *,
        config: Optional[Mapping[str, Any]] = None,
        api_key: str = "",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.backend = backend or FakeDuckChat()
        self.config = dict(config) if config is not None else build_gateway_config(api_key=api_key)
        self.transport = transport or httpx.ASGITransport(app=self.backend.app)
        self.app: FastAPI = create_app(self.config, transport=self.transport)

    def make_async_client(
        self, base_url: str = "http://proxy.local"
    ) -> httpx.AsyncClient:
        """Create an async HTTP client for the gateway."""
        return httpx.AsyncClient(
            transport=httpx.ASGITransport(app=self.app),
            base_url=base_url,
        )
