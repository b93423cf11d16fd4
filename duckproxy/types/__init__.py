"""Type definitions for the gateway."""

from .chat import (
    AssistantMessage,
    BackendMessage,
    BackendRequestBody,
    ChatCompletionChunk,
    ChatCompletionResponse,
    ChatMessage,
    ChatRequest,
    CompletionChoice,
    Delta,
    ModelCard,
    StreamChoice,
    Usage,
)

__all__ = [
    "AssistantMessage",
    "BackendMessage",
    "BackendRequestBody",
    "ChatCompletionChunk",
    "ChatCompletionResponse",
    "ChatMessage",
    "ChatRequest",
    "CompletionChoice",
    "Delta",
    "ModelCard",
    "StreamChoice",
    "Usage",
]
