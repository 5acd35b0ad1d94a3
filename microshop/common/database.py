import logging
from contextlib import asynccontextmanager
from typing import Optional, Dict, Any, List, Iterable, Mapping

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import DBAPIError, IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession

from .db import Base, Counter
from .errors import DuplicateKey, StorageUnavailable
from ..inventory.model import ProductRow  # noqa: F401  (registers the table)
from ..orders.model import OrderRow  # noqa: F401

_logger = logging.getLogger(__name__)


class SqlStore:
    """Document store over SQLAlchemy's async engine.

    Each collection maps to one table and each document to one row, so every
    write below is a single statement against a single row. That is what lets
    the allocator and status updates stay atomic without explicit locking.
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.engine = create_async_engine(url, future=True, echo=echo)
        self.session_factory = async_sessionmaker(self.engine, expire_on_commit=False, class_=AsyncSession)
        self._counters = Counter.__table__

    # -- plumbing -------------------------------------------------------

    def _table(self, collection: str) -> sa.Table:
        try:
            return Base.metadata.tables[collection]
        except KeyError:
            raise ValueError(f"Unknown collection: {collection}") from None

    def _insert(self):
        dialect = self.engine.dialect.name
        if dialect == "postgresql":
            return postgresql.insert
        if dialect == "sqlite":
            return sqlite.insert
        raise NotImplementedError(f"Counters need upsert support, dialect {dialect!r} is not supported")

    @asynccontextmanager
    async def _transaction(self):
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    yield session
        except IntegrityError as e:
            raise DuplicateKey(str(e.orig)) from e
        except (OperationalError, InterfaceError) as e:
            _logger.error("Storage error | url=%s err=%s", self.engine.url.render_as_string(hide_password=True), e)
            raise StorageUnavailable(str(e)) from e
        except DBAPIError as e:
            if e.connection_invalidated:
                raise StorageUnavailable(str(e)) from e
            raise
        except OSError as e:
            raise StorageUnavailable(str(e)) from e

    # -- lifecycle ------------------------------------------------------

    async def connect(self) -> None:
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except (OperationalError, InterfaceError, OSError) as e:
            raise StorageUnavailable(str(e)) from e

    async def close(self) -> None:
        await self.engine.dispose()

    async def ping(self) -> None:
        async with self._transaction() as session:
            await session.execute(sa.text("SELECT 1"))

    # -- documents ------------------------------------------------------

    async def count(self, collection: str) -> int:
        table = self._table(collection)
        async with self._transaction() as session:
            res = await session.execute(sa.select(sa.func.count()).select_from(table))
            return int(res.scalar() or 0)

    async def insert_one(self, collection: str, doc: Mapping[str, Any]) -> None:
        table = self._table(collection)
        async with self._transaction() as session:
            await session.execute(sa.insert(table).values(**doc))

    async def insert_many(self, collection: str, docs: Iterable[Mapping[str, Any]]) -> None:
        table = self._table(collection)
        rows = [dict(d) for d in docs]
        if not rows:
            return
        async with self._transaction() as session:
            await session.execute(sa.insert(table), rows)

    async def find_one(self, collection: str, doc_id: int) -> Optional[Dict[str, Any]]:
        table = self._table(collection)
        async with self._transaction() as session:
            res = await session.execute(sa.select(table).where(table.c.id == doc_id))
            row = res.mappings().first()
            return dict(row) if row else None

    async def find(self, collection: str, **equals: Any) -> List[Dict[str, Any]]:
        table = self._table(collection)
        stmt = sa.select(table).where(*[table.c[k] == v for k, v in equals.items()]).order_by(table.c.id)
        async with self._transaction() as session:
            res = await session.execute(stmt)
            return [dict(row) for row in res.mappings().all()]

    async def find_one_and_update(
        self,
        collection: str,
        doc_id: int,
        fields: Mapping[str, Any],
        guard: Optional[Mapping[str, Iterable[Any]]] = None,
    ) -> Optional[Dict[str, Any]]:
        table = self._table(collection)
        stmt = sa.update(table).where(table.c.id == doc_id)
        for field, allowed in (guard or {}).items():
            stmt = stmt.where(table.c[field].in_(list(allowed)))
        stmt = stmt.values(**fields).returning(*table.c)
        async with self._transaction() as session:
            res = await session.execute(stmt)
            row = res.mappings().first()
            return dict(row) if row else None

    async def delete_one(self, collection: str, doc_id: int) -> bool:
        table = self._table(collection)
        async with self._transaction() as session:
            res = await session.execute(sa.delete(table).where(table.c.id == doc_id))
            return (res.rowcount or 0) > 0

    # -- counters -------------------------------------------------------

    async def increment(self, name: str) -> int:
        """Atomically create-or-increment the counter and return the new value."""
        c = self._counters
        stmt = (
            self._insert()(c)
            .values(name=name, seq=1)
            .on_conflict_do_update(index_elements=[c.c.name], set_={"seq": c.c.seq + 1})
            .returning(c.c.seq)
        )
        async with self._transaction() as session:
            res = await session.execute(stmt)
            return int(res.scalar_one())

    async def set_on_insert(self, name: str, value: int) -> None:
        c = self._counters
        stmt = self._insert()(c).values(name=name, seq=value).on_conflict_do_nothing(index_elements=[c.c.name])
        async with self._transaction() as session:
            await session.execute(stmt)

    async def current(self, name: str) -> Optional[int]:
        c = self._counters
        async with self._transaction() as session:
            res = await session.execute(sa.select(c.c.seq).where(c.c.name == name))
            row = res.first()
            return int(row[0]) if row else None
