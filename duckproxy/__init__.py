"""duckproxy - an OpenAI-compatible gateway for DuckDuckGo AI chat.

Accepts OpenAI chat completion requests, drives the DuckDuckGo chat backend
with its ``x-vqd-4`` session token and returns OpenAI-shaped completions or
stream chunks.

Example:
    >>> import uvicorn
    >>> uvicorn.run("duckproxy.main:create_app", factory=True, port=8787)
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
