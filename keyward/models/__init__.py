"""SQLModel data models."""

from keyward.models.api_key import ApiKey, ApiKeyType

__all__ = [
    "ApiKey",
    "ApiKeyType",
]
