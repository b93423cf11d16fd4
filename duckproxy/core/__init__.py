"""Core module initialization."""

from .aggregator import aggregate, collect_content
from .backend import (
    BackendSettings,
    build_backend_settings,
    format_httpx_error,
    safe_headers_for_log,
)
from .errors import error_response, map_exception
from .exceptions import (
    AuthError,
    BackendRequestError,
    InvalidRequestError,
    ProxyError,
    StreamReadError,
    TokenAcquisitionError,
)
from .frames import StreamContext, build_completion, build_delta_chunk, build_stop_chunk
from .gateway import BackendChat, ChatGateway
from .sse import encode_sse, parse_event
from .stream_bridge import BridgePhase, BridgeState, bridge_stream, feed_text
from .token import TokenProvider
from .translator import translate_request, translate_role

__all__ = [
    "AuthError",
    "BackendChat",
    "BackendRequestError",
    "BackendSettings",
    "BridgePhase",
    "BridgeState",
    "ChatGateway",
    "InvalidRequestError",
    "ProxyError",
    "StreamContext",
    "StreamReadError",
    "TokenAcquisitionError",
    "TokenProvider",
    "aggregate",
    "bridge_stream",
    "build_backend_settings",
    "build_completion",
    "build_delta_chunk",
    "build_stop_chunk",
    "collect_content",
    "encode_sse",
    "error_response",
    "feed_text",
    "format_httpx_error",
    "map_exception",
    "parse_event",
    "safe_headers_for_log",
    "translate_request",
    "translate_role",
]
