"""Builders for OpenAI-compatible completion payloads."""

import time
import uuid
from dataclasses import dataclass, field

from ..types import ChatCompletionChunk, ChatCompletionResponse, Delta
from .sse import BackendEvent

SYSTEM_FINGERPRINT = "fp_44709d6fcb"


def _new_completion_id() -> str:
    return f"chatcmpl-{uuid.uuid4().hex[:24]}"


@dataclass(frozen=True)
class StreamContext:
    """Request-scoped values stamped on every frame of one completion."""

    model: str
    completion_id: str = field(default_factory=_new_completion_id)
    created: int = field(default_factory=lambda: int(time.time()))


def build_delta_chunk(context: StreamContext, event: BackendEvent) -> ChatCompletionChunk:
    """Translate one backend event into a stream chunk."""
    delta: Delta = {}
    if event.role is not None:
        delta["role"] = event.role
    if event.message is not None:
        delta["content"] = event.message
    return {
        "id": context.completion_id,
        "object": "chat.completion.chunk",
        "created": context.created,
        "model": context.model,
        "choices": [
            {
                "index": 0,
                "delta": delta,
                "finish_reason": None,
                "content_filter_results": None,
            }
        ],
    }


def build_stop_chunk(context: StreamContext) -> ChatCompletionChunk:
    """The terminal chunk: empty delta and ``finish_reason`` "stop"."""
    return {
        "id": context.completion_id,
        "object": "chat.completion.chunk",
        "created": context.created,
        "model": context.model,
        "system_fingerprint": SYSTEM_FINGERPRINT,
        "choices": [
            {
                "index": 0,
                "delta": {},
                "finish_reason": "stop",
                "content_filter_results": None,
            }
        ],
    }


def build_completion(context: StreamContext, content: str) -> ChatCompletionResponse:
    """Wrap assembled text into a non-streamed completion."""
    return {
        "id": context.completion_id,
        "object": "chat.completion",
        "created": context.created,
        "model": context.model,
        "system_fingerprint": SYSTEM_FINGERPRINT,
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "logprobs": None,
                "finish_reason": "stop",
            }
        ],
        "usage": {
            "prompt_tokens": 0,
            "completion_tokens": 0,
            "total_tokens": 0,
        },
    }
