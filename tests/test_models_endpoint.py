"""Tests for /v1/models."""

import pytest

from duckproxy.config_loader import DEFAULT_MODELS
from duckproxy.testing import GatewayHarness, build_gateway_config


class TestListModels:
    """Model catalog listing."""

    @pytest.mark.asyncio
    async def test_lists_default_models(self, harness):
        async with harness.make_async_client() as client:
            response = await client.get("/v1/models")

        assert response.status_code == 200
        body = response.json()
        assert body["object"] == "list"
        assert [m["id"] for m in body["data"]] == list(DEFAULT_MODELS)
        for card in body["data"]:
            assert card["object"] == "model"
            assert card["created"] == 1686935002
            assert card["owned_by"] == "duckduckgo-ai"

    @pytest.mark.asyncio
    async def test_lists_configured_models(self):
        harness = GatewayHarness(config=build_gateway_config(models=["a", "b"]))
        async with harness.make_async_client() as client:
            response = await client.get("/v1/models")
        assert [m["id"] for m in response.json()["data"]] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_models_not_validated_on_chat(self, harness, fake_backend):
        fake_backend.enqueue_messages(["ok"])
        async with harness.make_async_client() as client:
            response = await client.post(
                "/v1/chat/completions",
                json={"model": "not-in-catalog", "messages": [{"role": "user", "content": "x"}]},
            )
        assert response.status_code == 200
        assert fake_backend.received[0]["json"]["model"] == "not-in-catalog"
