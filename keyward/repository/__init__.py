"""Persistence layer."""

from keyward.repository.api_key import ApiKeyFilter, ApiKeyRepository
from keyward.repository.base import DatabaseOptions, FindAllOptions, Filter, Repository

__all__ = [
    "ApiKeyFilter",
    "ApiKeyRepository",
    "DatabaseOptions",
    "FindAllOptions",
    "Filter",
    "Repository",
]
