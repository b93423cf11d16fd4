"""Ensure streaming and non-stream assembly agree on the same backend body."""

from __future__ import annotations

import pytest

from duckproxy.core.aggregator import aggregate
from duckproxy.core.stream_bridge import bridge_stream
from duckproxy.testing import encode_backend_events, iter_chunks, split_every

BODIES = [
    b"".join(encode_backend_events(["Hel", "lo"])),
    b"".join(encode_backend_events(["The ", "quick ", "brown ", "fox"])),
    b"".join(encode_backend_events(["Ünïcödé ", "✓"])),
    b"".join(encode_backend_events([""])),
    (
        b'data: {"role":"assistant","message":"a"}\n\n'
        b"data: {bad\n\n"
        b'data: {"message":"b"}\n\n'
        b"data: [DONE]\n\n"
    ),
]


async def _streamed_text(body: bytes, context, size: int) -> str:
    parts: list[str] = []
    async for frame in bridge_stream(iter_chunks(split_every(body, size)), context):
        if isinstance(frame, dict):
            parts.append(frame["choices"][0]["delta"].get("content") or "")
    return "".join(parts)


@pytest.mark.asyncio
@pytest.mark.parametrize("body", BODIES)
@pytest.mark.parametrize("size", [1, 4, 1024])
async def test_stream_and_aggregate_produce_same_text(body, size, stream_context):
    streamed = await _streamed_text(body, stream_context, size)
    completion = await aggregate(iter_chunks([body]), stream_context)
    assert streamed == completion["choices"][0]["message"]["content"]
