# app/store.py
"""Generic row store over the application database.

Everything the services persist goes through DataStore: equality-filtered
select/insert/update/delete on a table name, rows in and out as plain dicts.
Every write commits on its own, so a store call is the unit of atomicity;
there is no transaction spanning several calls.
"""
import logging
from typing import Any, Iterable, Mapping, Sequence

from fastapi import Depends
from sqlalchemy import Table, delete, func, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .database import Base, get_session
from .models import utcnow

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """The database rejected or failed a store call."""


class DataStore:
    def __init__(self, session: AsyncSession):
        self.session = session

    def _table(self, name: str) -> Table:
        try:
            return Base.metadata.tables[name]
        except KeyError:
            raise StoreError(f"Unknown table: {name}")

    @staticmethod
    def _where(table: Table, filters: Mapping[str, Any] | None):
        clauses = []
        for column, value in (filters or {}).items():
            if column not in table.c:
                raise StoreError(f"Unknown column {table.name}.{column}")
            clauses.append(table.c[column] == value)
        return clauses

    async def _run(self, stmt, write: bool):
        try:
            result = await self.session.execute(stmt)
            rows = [dict(r._mapping) for r in result] if result.returns_rows else []
            rowcount = result.rowcount
            if write:
                await self.session.commit()
            return rows, rowcount
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Store call failed: %s", e)
            raise StoreError(str(getattr(e, "orig", None) or e)) from e

    async def select(
        self,
        table_name: str,
        filters: Mapping[str, Any] | None = None,
        order_by: Sequence[str] = (),
        descending: bool = False,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[dict]:
        table = self._table(table_name)
        stmt = select(table).where(*self._where(table, filters))
        for column in order_by:
            col = table.c[column]
            stmt = stmt.order_by(col.desc() if descending else col.asc())
        if limit is not None:
            stmt = stmt.limit(limit)
        if offset:
            stmt = stmt.offset(offset)
        rows, _ = await self._run(stmt, write=False)
        return rows

    async def select_one(self, table_name: str, filters: Mapping[str, Any]) -> dict | None:
        rows = await self.select(table_name, filters, limit=1)
        return rows[0] if rows else None

    async def count(self, table_name: str, filters: Mapping[str, Any] | None = None) -> int:
        table = self._table(table_name)
        stmt = select(func.count()).select_from(table).where(*self._where(table, filters))
        rows, _ = await self._run(stmt, write=False)
        return next(iter(rows[0].values()))

    async def insert(self, table_name: str, rows: Iterable[Mapping[str, Any]]) -> list[dict]:
        table = self._table(table_name)
        rows = [dict(r) for r in rows]
        if not rows:
            return []
        stmt = insert(table).values(rows).returning(*table.c)
        inserted, _ = await self._run(stmt, write=True)
        return inserted

    async def insert_one(self, table_name: str, row: Mapping[str, Any]) -> dict:
        inserted = await self.insert(table_name, [row])
        return inserted[0]

    async def update(
        self,
        table_name: str,
        values: Mapping[str, Any],
        filters: Mapping[str, Any],
    ) -> list[dict]:
        table = self._table(table_name)
        values = dict(values)
        if "updated_at" in table.c and "updated_at" not in values:
            values["updated_at"] = utcnow()
        stmt = (
            update(table)
            .where(*self._where(table, filters))
            .values(**values)
            .returning(*table.c)
        )
        updated, _ = await self._run(stmt, write=True)
        return updated

    async def delete(self, table_name: str, filters: Mapping[str, Any]) -> int:
        table = self._table(table_name)
        if not filters:
            raise StoreError(f"Refusing to delete from {table_name} without filters")
        stmt = delete(table).where(*self._where(table, filters))
        _, rowcount = await self._run(stmt, write=True)
        return rowcount

    async def ping(self) -> int:
        """Cheap round trip used by the health check; returns the product count."""
        return await self.count("products")


async def get_store(session: AsyncSession = Depends(get_session)) -> DataStore:
    return DataStore(session)
