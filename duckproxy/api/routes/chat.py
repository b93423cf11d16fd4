"""OpenAI-compatible chat completions endpoint."""

import logging
from typing import Optional

from fastapi import Request, Response
from pydantic import ValidationError

from ...core.errors import error_response
from ...core.exceptions import InvalidRequestError, ProxyError
from ...logging import RequestLogRecorder
from ...types import ChatRequest

logger = logging.getLogger("duckproxy")


def parse_chat_request(body: bytes) -> ChatRequest:
    """Validate a raw request body.

    Raises:
        InvalidRequestError: Carrying the first validation message.
    """
    try:
        return ChatRequest.model_validate_json(body or b"{}")
    except ValidationError as exc:
        errors = exc.errors()
        message = errors[0]["msg"] if errors else str(exc)
        logger.warning(f"Invalid chat request: {message}")
        raise InvalidRequestError(message) from exc


async def chat_completions(request: Request) -> Response:
    """Handle ``POST /v1/chat/completions``.

    The API key is checked before the body is looked at, and neither check
    touches the backend.
    """
    logger.info(f"Handling {request.method} request to {request.url.path}")
    state = request.app.state
    state.api_key_validator.validate(request)

    body = await request.body()
    chat_request = parse_chat_request(body)

    gateway = state.gateway
    token_header = gateway.settings.token_header
    caller_token: Optional[str] = request.headers.get(token_header) or None

    request_log = RequestLogRecorder(
        chat_request.model,
        chat_request.wants_stream,
        enabled=state.settings.log_to_disk,
    )
    request_log.record_request(request.method, request.url.path, request.headers, body)

    try:
        return await gateway.complete(chat_request, caller_token, request_log)
    except ProxyError as exc:
        request_log.record_error(exc.message)
        request_log.finalize("error")
        raise
    except Exception as exc:
        logger.exception(f"Unexpected error handling chat request for model {chat_request.model}")
        request_log.record_error(f"unexpected error: {exc}")
        request_log.finalize("error")
        return error_response(exc)
