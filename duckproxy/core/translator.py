"""OpenAI chat request -> backend chat request translation.

The backend accepts the same ``{model, messages}`` shape as the OpenAI Chat
Completions API but has no system role, so system prompts are sent as user
turns. Everything else is copied verbatim and in order.
"""

from ..types import BackendMessage, BackendRequestBody, ChatRequest

ROLE_REMAP = {"system": "user"}


def translate_role(role: str) -> str:
    return ROLE_REMAP.get(role, role)


def translate_request(chat_request: ChatRequest) -> BackendRequestBody:
    """Build the backend request body for a validated chat request."""
    messages: list[BackendMessage] = [
        {"role": translate_role(message.role), "content": message.content}
        for message in chat_request.messages
    ]
    return {"model": chat_request.model, "messages": messages}
