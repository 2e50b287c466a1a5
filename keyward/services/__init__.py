"""keyward services layer."""

from keyward.services.api_key import ApiKeyCreated, ApiKeyService, parse_api_key_header

__all__ = ["ApiKeyCreated", "ApiKeyService", "parse_api_key_header"]
