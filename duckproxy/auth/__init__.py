"""Authentication module for the gateway."""

from .api_key import ApiKeyValidator

__all__ = ["ApiKeyValidator"]
