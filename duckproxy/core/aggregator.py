"""Aggregate a backend event stream into one chat completion.

Used when the caller did not ask for streaming. The backend body is read to
the end, split into blank-line separated frames and every text delta before
the sentinel is concatenated.
"""

import logging
from typing import AsyncIterator

from ..types import ChatCompletionResponse
from .frames import StreamContext, build_completion
from .sse import DONE, SKIP, parse_event

logger = logging.getLogger("duckproxy")

FRAME_DELIMITER = "\n\n"


def collect_content(body: str) -> str:
    """Concatenate the text deltas of a fully buffered backend body."""
    parts: list[str] = []
    for frame in body.split(FRAME_DELIMITER):
        event = parse_event(frame)
        if event is DONE:
            break
        if event is SKIP:
            continue
        parts.append(event.message or "")
    return "".join(parts)


async def aggregate(
    chunks: AsyncIterator[bytes],
    context: StreamContext,
) -> ChatCompletionResponse:
    """Read the whole backend body and build the completion.

    Raises:
        StreamReadError: The connection failed before the body was complete.
    """
    raw = bytearray()
    async for chunk in chunks:
        raw.extend(chunk)

    content = collect_content(raw.decode("utf-8", errors="replace"))
    logger.debug("Aggregated %d bytes into %d characters", len(raw), len(content))
    return build_completion(context, content)
