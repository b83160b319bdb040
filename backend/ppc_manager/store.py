"""
Entity Store — the storage contract the services are written against.

Operations, keyed by entity kind (the ORM model class):
  find_by_id(kind, id)              -> record | None
  find_many(kind, filters)          -> records, newest first
  insert(kind, fields)              -> record
  update_fields(kind, id, fields)   -> record
  savepoint()                       -> async context; writes inside roll back together

`filters` is a mapping of column name -> required value (equality, None
matches NULL). SqlAlchemyStore is what the API runs on; MemoryStore keeps
records in process and backs the service tests.
"""

import itertools
import logging
import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncContextManager, Optional, Protocol, Sequence

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ppc_manager.database import get_db
from ppc_manager.errors import NotFoundError
from ppc_manager.utils import utcnow

logger = logging.getLogger(__name__)


class EntityStore(Protocol):
    async def find_by_id(self, kind: type, id: uuid.UUID) -> Optional[Any]: ...

    async def find_many(self, kind: type, filters: Optional[dict] = None) -> Sequence[Any]: ...

    async def insert(self, kind: type, fields: dict) -> Any: ...

    async def update_fields(self, kind: type, id: uuid.UUID, fields: dict) -> Any: ...

    def savepoint(self) -> AsyncContextManager: ...


class SqlAlchemyStore:
    """Store backed by an AsyncSession. Commit/rollback belongs to the session owner (get_db)."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_id(self, kind, id):
        return await self.session.get(kind, id)

    async def find_many(self, kind, filters=None):
        query = select(kind)
        for name, value in (filters or {}).items():
            column = getattr(kind, name)
            query = query.where(column.is_(None) if value is None else column == value)
        query = query.order_by(kind.created_at.desc())
        result = await self.session.execute(query)
        return result.scalars().all()

    async def insert(self, kind, fields):
        record = kind(**fields)
        self.session.add(record)
        await self.session.flush()
        return record

    async def update_fields(self, kind, id, fields):
        record = await self.session.get(kind, id)
        if record is None:
            raise NotFoundError(f"{kind.__name__} not found")
        for name, value in fields.items():
            setattr(record, name, value)
        await self.session.flush()
        return record

    def savepoint(self):
        return self.session.begin_nested()


class MemoryStore:
    """
    In-process store with the same contract. Fills in the column defaults
    the database would apply (id, timestamps) so records look persisted.
    """

    def __init__(self):
        self._tables: dict[type, dict[uuid.UUID, Any]] = {}
        self._seq = itertools.count()
        self._order: dict[uuid.UUID, int] = {}

    def _table(self, kind) -> dict:
        return self._tables.setdefault(kind, {})

    async def find_by_id(self, kind, id):
        return self._table(kind).get(id)

    async def find_many(self, kind, filters=None):
        filters = filters or {}
        records = [
            r for r in self._table(kind).values()
            if all(getattr(r, name) == value for name, value in filters.items())
        ]
        # Timestamps can tie within a clock tick; insertion order breaks the tie
        records.sort(key=lambda r: (r.created_at, self._order[r.id]), reverse=True)
        return records

    async def insert(self, kind, fields):
        record = kind(**fields)
        if record.id is None:
            record.id = uuid.uuid4()
        now = utcnow()
        record.created_at = now
        record.updated_at = now
        self._table(kind)[record.id] = record
        self._order[record.id] = next(self._seq)
        return record

    async def update_fields(self, kind, id, fields):
        record = self._table(kind).get(id)
        if record is None:
            raise NotFoundError(f"{kind.__name__} not found")
        for name, value in fields.items():
            setattr(record, name, value)
        record.updated_at = utcnow()
        return record

    @asynccontextmanager
    async def savepoint(self):
        # No transaction here; a rejected insert never reaches the table
        yield


async def get_store(db: AsyncSession = Depends(get_db)) -> EntityStore:
    """Dependency: one store per request, sharing the request's session."""
    return SqlAlchemyStore(db)
