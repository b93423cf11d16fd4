"""Pytest configuration and fixtures for testing."""

from __future__ import annotations

import pytest

from duckproxy.core.frames import StreamContext
from duckproxy.testing import FakeDuckChat, GatewayHarness


@pytest.fixture
def stream_context() -> StreamContext:
    return StreamContext(model="gpt-4o-mini", completion_id="chatcmpl-test", created=1720000000)


@pytest.fixture
def fake_backend() -> FakeDuckChat:
    return FakeDuckChat()


@pytest.fixture
def harness(fake_backend: FakeDuckChat) -> GatewayHarness:
    return GatewayHarness(fake_backend)
