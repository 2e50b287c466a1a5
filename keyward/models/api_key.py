"""API Key data model.

Stores hashed API keys for authentication.
Secrets are never stored, only SHA-256 hashes of ``key:secret``.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import Column, DateTime
from sqlmodel import Field, SQLModel

from keyward.utils.datetime import utcnow


class ApiKeyType(str, Enum):
    """Caller-supplied classification of an API key."""

    DEFAULT = "default"
    SYSTEM = "system"


class ApiKey(SQLModel, table=True):
    """API key record.

    ``key`` is the public identifier (``<env>_`` prefixed) presented by
    clients alongside their secret. Validity window bounds, when set, are
    day-aligned naive UTC datetimes.

    Datetime columns are declared as plain ``DateTime`` so naive UTC values
    bind as-is.
    """

    __tablename__ = "api_keys"

    id: str = Field(primary_key=True)
    name: str = Field()
    key: str = Field(index=True, unique=True)
    hash: str = Field()  # SHA-256 hex digest of "key:secret"
    type: str = Field(default=ApiKeyType.DEFAULT.value, index=True)
    is_active: bool = Field(default=True, index=True)

    # Validity window
    start_date: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=False), nullable=True),
    )
    end_date: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=False), nullable=True, index=True),
    )

    # Soft delete (tombstone)
    deleted: bool = Field(default=False, index=True)
    deleted_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=False), nullable=True),
    )

    # Timestamps
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=False), nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=False), nullable=False),
    )

    def is_expired(self, now: datetime) -> bool:
        """Check if the validity window has ended at ``now``."""
        return self.end_date is not None and self.end_date <= now

    def is_before_start(self, now: datetime) -> bool:
        """Check if the validity window has not started at ``now``."""
        return self.start_date is not None and now < self.start_date
