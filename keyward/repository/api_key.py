"""ApiKey repository and typed filter."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.sql.elements import ColumnElement

from keyward.models.api_key import ApiKey
from keyward.repository.base import Filter, Repository


@dataclass
class ApiKeyFilter(Filter):
    """Field matchers for ApiKey queries. Unset fields match everything."""

    ids: list[str] | None = None
    key: str | None = None
    name: str | None = None
    types: list[str] | None = None
    is_active: bool | None = None
    end_date_lte: datetime | None = None

    def clauses(self) -> list[ColumnElement[bool]]:
        clauses: list[ColumnElement[bool]] = []
        if self.ids is not None:
            clauses.append(ApiKey.id.in_(self.ids))
        if self.key is not None:
            clauses.append(ApiKey.key == self.key)
        if self.name is not None:
            clauses.append(ApiKey.name == self.name)
        if self.types is not None:
            clauses.append(ApiKey.type.in_(self.types))
        if self.is_active is not None:
            clauses.append(ApiKey.is_active == self.is_active)
        if self.end_date_lte is not None:
            clauses.append(ApiKey.end_date <= self.end_date_lte)
        return clauses


class ApiKeyRepository(Repository[ApiKey]):
    """Repository for the ``api_keys`` table."""

    model = ApiKey
