"""API Key service.

Handles key/secret generation, hashing, verification, validity windows,
seeding from configuration and the expiry sweep.

A key is a public ``<env>_``-prefixed identifier; the secret is returned to
the caller exactly once and only ``sha256("key:secret")`` is stored.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from keyward.config import ApiKeyConfig, ApiKeySeed, get_settings
from keyward.errors import (
    ApiKeyExpiredError,
    ApiKeyInvalidError,
    ApiKeyNotFoundError,
    ApiKeyNotYetValidError,
)
from keyward.models.api_key import ApiKey, ApiKeyType
from keyward.repository import (
    ApiKeyFilter,
    ApiKeyRepository,
    DatabaseOptions,
    FindAllOptions,
)
from keyward.utils.datetime import end_of_day, start_of_day, to_naive_utc, utcnow
from keyward.utils.hash import sha256, sha256_compare
from keyward.utils.string import random_string

logger = structlog.get_logger()

# Separator between key and secret, both in the hashed payload and in headers
_CREDENTIAL_SEPARATOR = ":"


@dataclass
class ApiKeyCreated:
    """A freshly created key together with its one-time secret."""

    doc: ApiKey
    secret: str


def parse_api_key_header(value: str) -> tuple[str, str]:
    """Split a ``key:secret`` credential.

    Raises:
        ApiKeyInvalidError: If either part is missing
    """
    key, sep, secret = value.partition(_CREDENTIAL_SEPARATOR)
    if not sep or not key or not secret:
        raise ApiKeyInvalidError("Malformed API key credential")
    return key, secret


class ApiKeyService:
    """Service for API key lifecycle management."""

    def __init__(
        self,
        db_session: AsyncSession,
        *,
        env: str | None = None,
        config: ApiKeyConfig | None = None,
    ) -> None:
        self._repository = ApiKeyRepository(db_session)
        self._log = logger.bind(service="api_key")

        if env is None or config is None:
            settings = get_settings()
            env = env if env is not None else settings.app.env
            config = config if config is not None else settings.api_key
        self._env = env
        self._config = config

    @property
    def env(self) -> str:
        """Environment tag used as the key prefix."""
        return self._env

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def find_all(
        self,
        find: ApiKeyFilter | None = None,
        options: FindAllOptions | None = None,
    ) -> list[ApiKey]:
        return await self._repository.find_all(find, options)

    async def find_one_by_id(
        self,
        _id: str,
        options: DatabaseOptions | None = None,
    ) -> ApiKey | None:
        return await self._repository.find_one_by_id(_id, options)

    async def find_one(
        self,
        find: ApiKeyFilter,
        options: DatabaseOptions | None = None,
    ) -> ApiKey | None:
        return await self._repository.find_one(find, options)

    async def find_one_by_key(
        self,
        key: str,
        options: DatabaseOptions | None = None,
    ) -> ApiKey | None:
        return await self._repository.find_one(ApiKeyFilter(key=key), options)

    async def find_one_by_active_key(
        self,
        key: str,
        options: DatabaseOptions | None = None,
    ) -> ApiKey | None:
        return await self._repository.find_one(
            ApiKeyFilter(key=key, is_active=True),
            options,
        )

    async def get_total(
        self,
        find: ApiKeyFilter | None = None,
        options: DatabaseOptions | None = None,
    ) -> int:
        return await self._repository.get_total(find, options)

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    async def create(
        self,
        name: str,
        type: str | ApiKeyType,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        options: DatabaseOptions | None = None,
    ) -> ApiKeyCreated:
        """Create a key with a generated key and secret.

        The validity window is only set when both bounds are given; a single
        bound is ignored.

        Returns:
            ApiKeyCreated carrying the plaintext secret (shown once)
        """
        key = self.create_key()
        secret = self.create_secret()
        return await self._create(name, key, secret, type, start_date, end_date, options)

    async def create_raw(
        self,
        name: str,
        key: str,
        secret: str,
        type: str | ApiKeyType,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        options: DatabaseOptions | None = None,
    ) -> ApiKeyCreated:
        """Create a key from a caller-supplied key and secret (seeding, migration)."""
        return await self._create(name, key, secret, type, start_date, end_date, options)

    async def _create(
        self,
        name: str,
        key: str,
        secret: str,
        type: str | ApiKeyType,
        start_date: datetime | None,
        end_date: datetime | None,
        options: DatabaseOptions | None,
    ) -> ApiKeyCreated:
        doc = ApiKey(
            id=str(uuid.uuid4()),
            name=name,
            key=key,
            hash=self.create_hash_api_key(key, secret),
            type=type.value if isinstance(type, ApiKeyType) else type,
            is_active=True,
        )

        if start_date and end_date:
            doc.start_date = start_of_day(start_date)
            doc.end_date = end_of_day(end_date)

        created = await self._repository.create(doc, options)

        self._log.info(
            "api_key.create",
            api_key_id=created.id,
            key=created.key,
            type=created.type,
            end_date=created.end_date,
        )

        return ApiKeyCreated(doc=created, secret=secret)

    async def seed(
        self,
        seeds: Iterable[ApiKeySeed],
        options: DatabaseOptions | None = None,
    ) -> list[ApiKey]:
        """Create configured keys that are not in the store yet.

        Soft-deleted keys count as present so a deleted seed is not revived.

        Returns:
            Newly created records
        """
        lookup = DatabaseOptions(
            session=options.session if options else None,
            with_deleted=True,
        )

        created: list[ApiKey] = []
        for seed in seeds:
            existing = await self._repository.find_one(ApiKeyFilter(key=seed.key), lookup)
            if existing is not None:
                self._log.debug("api_key.seed.skip", key=seed.key, reason="exists")
                continue

            result = await self.create_raw(
                name=seed.name,
                key=seed.key,
                secret=seed.secret,
                type=seed.type,
                options=options,
            )
            created.append(result.doc)
            self._log.info("api_key.seed.created", key=seed.key)

        return created

    # ------------------------------------------------------------------
    # State transitions
    # ------------------------------------------------------------------

    async def active(
        self,
        doc: ApiKey,
        options: DatabaseOptions | None = None,
    ) -> ApiKey:
        doc.is_active = True
        self._log.info("api_key.active", api_key_id=doc.id)
        return await self._repository.save(doc, options)

    async def inactive(
        self,
        doc: ApiKey,
        options: DatabaseOptions | None = None,
    ) -> ApiKey:
        doc.is_active = False
        self._log.info("api_key.inactive", api_key_id=doc.id)
        return await self._repository.save(doc, options)

    async def update(
        self,
        doc: ApiKey,
        name: str,
        options: DatabaseOptions | None = None,
    ) -> ApiKey:
        doc.name = name
        return await self._repository.save(doc, options)

    async def update_date(
        self,
        doc: ApiKey,
        start_date: datetime | None,
        end_date: datetime | None,
        options: DatabaseOptions | None = None,
    ) -> ApiKey:
        """Overwrite the validity window.

        Both bounds are required; with only one the window is left as is and
        the record is saved unchanged.
        """
        if start_date and end_date:
            doc.start_date = start_of_day(start_date)
            doc.end_date = end_of_day(end_date)
        else:
            self._log.debug("api_key.update_date.skip", api_key_id=doc.id)

        return await self._repository.save(doc, options)

    async def reset(
        self,
        doc: ApiKey,
        secret: str,
        options: DatabaseOptions | None = None,
    ) -> ApiKey:
        """Rotate the secret: re-hash the existing key with ``secret``."""
        doc.hash = self.create_hash_api_key(doc.key, secret)
        self._log.info("api_key.reset", api_key_id=doc.id, key=doc.key)
        return await self._repository.save(doc, options)

    async def delete(
        self,
        doc: ApiKey,
        options: DatabaseOptions | None = None,
    ) -> ApiKey:
        """Soft-delete: the row stays, hidden from default queries."""
        return await self._repository.soft_delete(doc, options)

    # ------------------------------------------------------------------
    # Bulk operations
    # ------------------------------------------------------------------

    async def delete_many(
        self,
        find: ApiKeyFilter,
        options: DatabaseOptions | None = None,
    ) -> int:
        """Hard-delete matching keys. Returns the number of rows removed."""
        return await self._repository.delete_many(find, options)

    async def inactive_many_by_end_date(
        self,
        options: DatabaseOptions | None = None,
    ) -> int:
        """Deactivate every active key whose end date has passed.

        Returns:
            Number of keys deactivated
        """
        count = await self._repository.update_many(
            ApiKeyFilter(is_active=True, end_date_lte=utcnow()),
            {"is_active": False},
            options,
        )
        self._log.info("api_key.inactive_many_by_end_date", count=count)
        return count

    # ------------------------------------------------------------------
    # Key material
    # ------------------------------------------------------------------

    def create_key(self) -> str:
        return random_string(
            self._config.key_length,
            safe=False,
            upper_case=True,
            prefix=f"{self._env}_",
        )

    def create_secret(self) -> str:
        return random_string(
            self._config.secret_length,
            safe=False,
            upper_case=True,
        )

    @staticmethod
    def create_hash_api_key(key: str, secret: str) -> str:
        """Hash ``key:secret`` using SHA-256.

        Returns:
            SHA-256 hex digest
        """
        return sha256(f"{key}{_CREDENTIAL_SEPARATOR}{secret}")

    @staticmethod
    def validate_hash_api_key(hash_from_request: str, hash: str) -> bool:
        """Compare a request-derived hash against the stored one in constant time."""
        return sha256_compare(hash_from_request, hash)

    # ------------------------------------------------------------------
    # Authentication boundary
    # ------------------------------------------------------------------

    async def authenticate(
        self,
        key: str,
        secret: str,
        *,
        now: datetime | None = None,
        options: DatabaseOptions | None = None,
    ) -> ApiKey:
        """Resolve a presented key/secret pair to its active record.

        Raises:
            ApiKeyNotFoundError: No active, non-deleted key matches
            ApiKeyNotYetValidError: Validity window has not started
            ApiKeyExpiredError: Validity window has ended
            ApiKeyInvalidError: Secret does not match
        """
        doc = await self.find_one_by_active_key(key, options)
        if doc is None:
            self._log.info("api_key.auth.not_found", key=key)
            raise ApiKeyNotFoundError()

        now = to_naive_utc(now) if now is not None else utcnow()
        if doc.is_before_start(now):
            self._log.info("api_key.auth.not_yet_valid", key=key)
            raise ApiKeyNotYetValidError(details={"start_date": doc.start_date.isoformat()})
        if doc.is_expired(now):
            self._log.info("api_key.auth.expired", key=key)
            raise ApiKeyExpiredError(details={"end_date": doc.end_date.isoformat()})

        if not self.validate_hash_api_key(self.create_hash_api_key(key, secret), doc.hash):
            self._log.info("api_key.auth.invalid_secret", key=key)
            raise ApiKeyInvalidError()

        return doc
