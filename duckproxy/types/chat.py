"""Types for the chat completion contract and the backend request shape.

Inbound requests are validated with pydantic models. Outbound payloads
(stream chunks, completions, backend bodies) are plain dicts described by
TypedDicts so they can be handed to ``json.dumps`` as they are.
"""

from typing import Any, Optional

from pydantic import BaseModel, StrictBool, StrictStr
from typing_extensions import TypedDict


# =============================================================================
# Inbound (OpenAI-compatible) request
# =============================================================================


class ChatMessage(BaseModel):
    """A message in a chat conversation.

    The role is caller-supplied and not restricted to a fixed vocabulary.
    """

    role: StrictStr
    content: StrictStr


class ChatRequest(BaseModel):
    """A chat completion request as accepted on ``/v1/chat/completions``.

    Attributes:
        model: Free-form model identifier, forwarded verbatim.
        messages: Conversation in order.
        stream: Whether the caller wants server-sent events.
    """

    model: StrictStr
    messages: list[ChatMessage]
    stream: Optional[StrictBool] = None

    @property
    def wants_stream(self) -> bool:
        return bool(self.stream)


# =============================================================================
# Backend request
# =============================================================================


class BackendMessage(TypedDict):
    role: str
    content: str


class BackendRequestBody(TypedDict):
    """Body posted to the backend chat endpoint."""
    model: str
    messages: list[BackendMessage]


# =============================================================================
# Outbound (OpenAI-compatible) responses
# =============================================================================


class Delta(TypedDict, total=False):
    """Incremental message fragment; an empty delta closes the stream."""
    role: str
    content: str


class StreamChoice(TypedDict):
    index: int
    delta: Delta
    finish_reason: Optional[str]
    content_filter_results: Optional[Any]


class ChatCompletionChunk(TypedDict, total=False):
    """One server-sent event payload of a streamed completion."""
    id: str
    object: str
    created: int
    model: str
    system_fingerprint: str
    choices: list[StreamChoice]


class AssistantMessage(TypedDict):
    role: str
    content: str


class CompletionChoice(TypedDict):
    index: int
    message: AssistantMessage
    logprobs: Optional[Any]
    finish_reason: str


class Usage(TypedDict):
    """Token counters; the backend does not report any so they stay zero."""
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


class ChatCompletionResponse(TypedDict):
    """A complete non-streamed chat completion."""
    id: str
    object: str
    created: int
    model: str
    system_fingerprint: str
    choices: list[CompletionChoice]
    usage: Usage


class ModelCard(TypedDict):
    id: str
    object: str
    created: int
    owned_by: str
