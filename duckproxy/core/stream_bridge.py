"""Bridge from the backend's line stream to OpenAI chat completion chunks.

Backend bytes arrive in arbitrary network chunks: a line may be split over
several chunks and one chunk may hold several lines. The bridge decodes the
bytes incrementally, reassembles complete lines and turns each one into at
most one outbound frame, in arrival order:

    data: {"role":"assistant","message":"Hel"}  -> chunk(delta={"role": "assistant", "content": "Hel"})
    data: {"message":"lo"}                      -> chunk(delta={"content": "lo"})
    data: not json                              -> (dropped)
    data: [DONE]                                -> chunk(delta={}, finish_reason="stop"), "[DONE]"

Nothing is emitted after the sentinel, even if the backend keeps sending.
"""

import codecs
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import AsyncIterator, Union

from ..types import ChatCompletionChunk
from .exceptions import StreamReadError
from .frames import StreamContext, build_delta_chunk, build_stop_chunk
from .sse import DONE, SENTINEL, SKIP, parse_event

logger = logging.getLogger("duckproxy")

# A frame is either a chunk payload or the literal end-of-stream marker.
StreamFrame = Union[ChatCompletionChunk, str]


class BridgePhase(str, Enum):
    READING = "reading"
    EMITTING = "emitting"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class BridgeState:
    """Reassembly state carried from one read to the next.

    Attributes:
        buffer: Trailing text not yet terminated by a newline.
        phase: Where the bridge is in its lifecycle.
    """

    buffer: str = ""
    phase: BridgePhase = BridgePhase.READING


def feed_text(state: BridgeState, text: str) -> tuple[BridgeState, list[str]]:
    """Append decoded text and split off every complete line.

    The last, possibly incomplete, fragment stays in the returned state.
    """
    parts = (state.buffer + text).split("\n")
    remainder = parts.pop()
    return replace(state, buffer=remainder), parts


async def bridge_stream(
    chunks: AsyncIterator[bytes],
    context: StreamContext,
) -> AsyncIterator[StreamFrame]:
    """Translate backend bytes into OpenAI stream frames.

    Args:
        chunks: Backend body; consumed once and not restartable.
        context: Id, model and timestamp stamped on every frame.

    Yields:
        Chunk payloads, then the stop chunk and ``"[DONE]"`` if the backend
        sent its sentinel. A read failure or an early close ends the
        sequence without the terminal pair.
    """
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    state = BridgeState()
    emitted = 0

    try:
        async for chunk in chunks:
            state, lines = feed_text(state, decoder.decode(chunk))
            for line in lines:
                state = replace(state, phase=BridgePhase.EMITTING)
                event = parse_event(line)
                if event is DONE:
                    yield build_stop_chunk(context)
                    yield SENTINEL
                    state = replace(state, phase=BridgePhase.DONE)
                    logger.info("Stream completed after %d frames", emitted)
                    return
                if event is not SKIP:
                    emitted += 1
                    yield build_delta_chunk(context, event)
                state = replace(state, phase=BridgePhase.READING)
    except StreamReadError as exc:
        state = replace(state, phase=BridgePhase.FAILED)
        logger.error("Stream processing error after %d frames: %s", emitted, exc)
        return

    state = replace(state, phase=BridgePhase.DONE)
    if state.buffer.strip():
        logger.debug("Discarding unterminated trailing fragment: %s", state.buffer[:100])
    logger.warning("Backend stream closed without %s after %d frames", SENTINEL, emitted)
