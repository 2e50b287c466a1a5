"""Generic async repository over SQLModel tables.

Default queries hide soft-deleted rows (``deleted = false``). Passing
``with_deleted=True`` in the options bag includes them.

Every operation accepts an options bag. When ``options.session`` is set the
operation runs inside that session and only flushes; the caller owns the
transaction. Otherwise the repository's own session is committed, and rolled
back if the commit fails.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import structlog
from sqlalchemy import delete, func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement
from sqlmodel import SQLModel, select

from keyward.utils.datetime import utcnow

logger = structlog.get_logger()

ModelT = TypeVar("ModelT", bound=SQLModel)


class Filter(ABC):
    """Typed query predicate."""

    @abstractmethod
    def clauses(self) -> list[ColumnElement[bool]]:
        """Return SQL clauses, combined with AND by the repository."""
        ...


@dataclass
class DatabaseOptions:
    """Session context and visibility for a repository call."""

    session: AsyncSession | None = None
    with_deleted: bool = False


@dataclass
class FindAllOptions(DatabaseOptions):
    """Pagination and ordering for ``find_all``."""

    limit: int | None = None
    offset: int = 0
    order_by: str = "created_at"
    descending: bool = False


class Repository(Generic[ModelT]):
    """CRUD over a single SQLModel table with soft delete support.

    The model must define ``id``, ``deleted``, ``deleted_at`` and
    ``updated_at`` columns.
    """

    model: type[ModelT]

    def __init__(self, db_session: AsyncSession) -> None:
        self._db = db_session
        self._log = logger.bind(repository=self.model.__tablename__)

    def _session(self, options: DatabaseOptions | None) -> AsyncSession:
        if options is not None and options.session is not None:
            return options.session
        return self._db

    async def _finish(self, session: AsyncSession, options: DatabaseOptions | None) -> None:
        if options is not None and options.session is not None:
            await session.flush()
            return

        try:
            await session.commit()
        except Exception:
            # keep the owned session usable after a failed commit
            await session.rollback()
            raise

    def _where(
        self,
        find: Filter | None,
        options: DatabaseOptions | None,
    ) -> list[ColumnElement[bool]]:
        clauses = find.clauses() if find is not None else []
        if options is None or not options.with_deleted:
            clauses.append(self.model.deleted == False)  # noqa: E712
        return clauses

    async def create(
        self,
        doc: ModelT,
        options: DatabaseOptions | None = None,
    ) -> ModelT:
        """Insert a new record and return it refreshed from the store."""
        session = self._session(options)
        session.add(doc)
        await self._finish(session, options)
        await session.refresh(doc)
        return doc

    async def find_one(
        self,
        find: Filter,
        options: DatabaseOptions | None = None,
    ) -> ModelT | None:
        """Return the first record matching ``find``, or None."""
        session = self._session(options)
        result = await session.execute(
            select(self.model).where(*self._where(find, options))
        )
        return result.scalars().first()

    async def find_one_by_id(
        self,
        _id: str,
        options: DatabaseOptions | None = None,
    ) -> ModelT | None:
        """Return the record with primary key ``_id``, or None."""
        session = self._session(options)
        clauses = self._where(None, options)
        clauses.append(self.model.id == _id)
        result = await session.execute(select(self.model).where(*clauses))
        return result.scalars().first()

    async def find_all(
        self,
        find: Filter | None = None,
        options: FindAllOptions | None = None,
    ) -> list[ModelT]:
        """Return records matching ``find``, ordered and paginated."""
        options = options or FindAllOptions()
        session = self._session(options)

        column = getattr(self.model, options.order_by, None)
        if column is None:
            raise ValueError(f"Unknown order_by column: {options.order_by}")

        query = (
            select(self.model)
            .where(*self._where(find, options))
            .order_by(column.desc() if options.descending else column.asc())
            .offset(options.offset)
        )
        if options.limit is not None:
            query = query.limit(options.limit)

        result = await session.execute(query)
        return list(result.scalars().all())

    async def get_total(
        self,
        find: Filter | None = None,
        options: DatabaseOptions | None = None,
    ) -> int:
        """Count records matching ``find``."""
        session = self._session(options)
        result = await session.execute(
            select(func.count())
            .select_from(self.model)
            .where(*self._where(find, options))
        )
        return result.scalar_one()

    async def save(
        self,
        doc: ModelT,
        options: DatabaseOptions | None = None,
    ) -> ModelT:
        """Persist changes made to ``doc``."""
        session = self._session(options)
        doc.updated_at = utcnow()
        session.add(doc)
        await self._finish(session, options)
        await session.refresh(doc)
        return doc

    async def soft_delete(
        self,
        doc: ModelT,
        options: DatabaseOptions | None = None,
    ) -> ModelT:
        """Mark ``doc`` as deleted without removing the row."""
        doc.deleted = True
        doc.deleted_at = utcnow()
        self._log.info("repository.soft_delete", id=doc.id)
        return await self.save(doc, options)

    async def delete_many(
        self,
        find: Filter,
        options: DatabaseOptions | None = None,
    ) -> int:
        """Hard-delete every record matching ``find``.

        Returns:
            Number of rows removed
        """
        session = self._session(options)
        result = await session.execute(
            delete(self.model).where(*self._where(find, options))
        )
        count = result.rowcount
        await self._finish(session, options)
        self._log.info("repository.delete_many", count=count)
        return count

    async def update_many(
        self,
        find: Filter,
        values: dict[str, Any],
        options: DatabaseOptions | None = None,
    ) -> int:
        """Apply ``values`` to every record matching ``find`` in one statement.

        Returns:
            Number of rows updated
        """
        session = self._session(options)
        values = {"updated_at": utcnow(), **values}
        result = await session.execute(
            update(self.model).where(*self._where(find, options)).values(**values)
        )
        count = result.rowcount
        await self._finish(session, options)
        self._log.info("repository.update_many", count=count)
        return count
