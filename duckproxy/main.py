"""Main FastAPI application for the DuckDuckGo chat gateway."""

import logging
import socket
from typing import Any, Mapping, Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.routes import chat_completions, list_models
from .auth import ApiKeyValidator
from .config_loader import load_config, load_settings
from .core.errors import error_response
from .core.exceptions import ProxyError
from .core.gateway import ChatGateway
from .logging import setup_logging, wait_for_pending_logs

logger = logging.getLogger("duckproxy")


async def proxy_error_handler(request: Request, exc: ProxyError) -> JSONResponse:
    """Render gateway errors as ``{"error": ...}`` payloads."""
    logger.info(f"Request to {request.url.path} failed: {exc.__class__.__name__}: {exc.message}")
    return error_response(exc)


def create_app(
    config: Optional[Mapping[str, Any]] = None,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Factory function to create the FastAPI application.

    Args:
        config: Parsed configuration; loaded from disk when omitted.
        transport: Optional httpx transport for backend calls (tests route
            these to an in-process fake).

    Returns:
        The configured FastAPI application instance.
    """
    if config is None:
        config = load_config()
    settings = load_settings(config)
    setup_logging(settings.log_level)

    app = FastAPI(title="DuckDuckGo Chat Gateway")
    app.state.settings = settings
    app.state.gateway = ChatGateway(settings.backend, transport=transport)
    app.state.api_key_validator = ApiKeyValidator(settings.api_key)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[settings.backend.token_header],
    )
    app.add_exception_handler(ProxyError, proxy_error_handler)

    @app.on_event("startup")
    async def startup_event():
        """Handle application startup."""
        logger.info("Gateway starting up...")
        logger.info("Configured bind address %s:%s", settings.host, settings.port)
        if settings.host == "0.0.0.0":
            hostname = socket.gethostname()
            logger.info("Reachable on local network at http://%s:%s", hostname, settings.port)
        logger.info("Backend chat endpoint: %s", settings.backend.chat_url)
        logger.info("API key check %s", "enabled" if settings.api_key else "disabled")
        logger.info(f"Available models: {list(settings.models)}")

    @app.on_event("shutdown")
    async def shutdown_event():
        """Handle application shutdown."""
        await wait_for_pending_logs()

    # Register routes
    app.post("/v1/chat/completions")(chat_completions)
    app.get("/v1/models")(list_models)

    logger.info("FastAPI application created")
    return app


__all__ = ["create_app", "proxy_error_handler"]
