"""Testing utilities for in-process gateway simulations."""

from .fake_backend import ChatReply, FakeDuckChat, encode_backend_events
from .gateway_harness import FAKE_BACKEND_URL, GatewayHarness, build_gateway_config
from .streams import iter_chunks, split_every

__all__ = [
    "ChatReply",
    "FAKE_BACKEND_URL",
    "FakeDuckChat",
    "GatewayHarness",
    "build_gateway_config",
    "encode_backend_events",
    "iter_chunks",
    "split_every",
]
