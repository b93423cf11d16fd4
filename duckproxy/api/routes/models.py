"""Models listing endpoint - OpenAI compatible."""

import logging

from fastapi import Request

from ...types import ModelCard

logger = logging.getLogger("duckproxy")

MODEL_CREATED = 1686935002
MODEL_OWNER = "duckduckgo-ai"


def build_model_cards(models) -> list[ModelCard]:
    return [
        {
            "id": model_name,
            "object": "model",
            "created": MODEL_CREATED,
            "owned_by": MODEL_OWNER,
        }
        for model_name in models
    ]


async def list_models(request: Request) -> dict:
    """List available models in OpenAI API format.

    GET /v1/models

    Returns:
        A dictionary containing the list of available models.
    """
    logger.info("Received models list request")
    return {
        "object": "list",
        "data": build_model_cards(request.app.state.settings.models),
    }
