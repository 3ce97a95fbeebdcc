"""Async ``RemoteStore`` implementation on SQLAlchemy Core."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Any

from sqlalchemy import Table, delete, event, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from refledger.domain.errors import StoreError
from refledger.domain.ports import is_multi_value

from .tables import TABLES

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from sqlalchemy.engine.interfaces import DBAPIConnection
    from sqlalchemy.pool import ConnectionPoolEntry
    from sqlalchemy.sql.elements import ColumnElement

    from refledger.domain.ports import Filters, Row

log = getLogger(__name__)


def _enable_sqlite_foreign_keys(
    dbapi_connection: DBAPIConnection, connection_record: ConnectionPoolEntry
) -> None:
    _ = connection_record
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON")
    finally:
        cursor.close()


def create_store_engine(database_uri: str, *, echo: bool = False) -> AsyncEngine:
    """Create the async engine; SQLite connections enforce foreign keys."""

    engine = create_async_engine(database_uri, echo=echo)
    if engine.dialect.name == "sqlite":
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return engine


class SqlAlchemyRemoteStore:
    """Row-level access to the store tables, one transaction per call."""

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    async def aclose(self) -> None:
        await self._engine.dispose()

    async def select(self, table: str, filters: Filters) -> list[Row]:
        target = self._table(table)
        statement = select(target).where(*self._conditions(target, filters))
        try:
            async with self._engine.connect() as connection:
                result = await connection.execute(statement)
                return [dict(row._mapping) for row in result]  # noqa: SLF001
        except SQLAlchemyError as exc:
            raise _store_error("select", table, exc) from exc

    async def insert(self, table: str, rows: Sequence[Mapping[str, Any]]) -> None:
        if not rows:
            return
        target = self._table(table)
        try:
            async with self._engine.begin() as connection:
                await connection.execute(target.insert(), [dict(row) for row in rows])
        except SQLAlchemyError as exc:
            raise _store_error("insert", table, exc) from exc
        log.debug("Inserted %d rows into %s", len(rows), table)

    async def upsert(
        self,
        table: str,
        rows: Sequence[Mapping[str, Any]],
        conflict_key: Sequence[str],
        *,
        ignore_duplicates: bool = False,
    ) -> list[Row]:
        if not rows:
            return []
        target = self._table(table)
        dialect = self._engine.dialect.name
        if dialect == "sqlite":
            statement = sqlite.insert(target).values([dict(row) for row in rows])
        elif dialect == "postgresql":
            statement = postgresql.insert(target).values([dict(row) for row in rows])
        else:
            raise StoreError(f"upsert is not supported on {dialect}", table=table)

        if ignore_duplicates:
            statement = statement.on_conflict_do_nothing(index_elements=list(conflict_key))
        else:
            # id and the conflict key stay as stored; another scope's row is never touched
            frozen = {"id", *conflict_key}
            written = {column for row in rows for column in row}
            statement = statement.on_conflict_do_update(
                index_elements=list(conflict_key),
                set_={
                    name: statement.excluded[name]
                    for name in target.columns.keys()  # noqa: SIM118
                    if name in written and name not in frozen
                },
                where=target.c.user_id == statement.excluded.user_id,
            )
        statement = statement.returning(*target.columns)

        try:
            async with self._engine.begin() as connection:
                result = await connection.execute(statement)
                stored = [dict(row._mapping) for row in result]  # noqa: SLF001
        except SQLAlchemyError as exc:
            raise _store_error("upsert", table, exc) from exc
        log.debug("Upserted %d rows into %s", len(stored), table)
        return stored

    async def update(self, table: str, patch: Mapping[str, Any], filters: Filters) -> int:
        target = self._table(table)
        statement = update(target).where(*self._conditions(target, filters)).values(dict(patch))
        try:
            async with self._engine.begin() as connection:
                result = await connection.execute(statement)
                count = result.rowcount
        except SQLAlchemyError as exc:
            raise _store_error("update", table, exc) from exc
        return count

    async def delete(self, table: str, filters: Filters) -> int:
        target = self._table(table)
        statement = delete(target).where(*self._conditions(target, filters))
        try:
            async with self._engine.begin() as connection:
                result = await connection.execute(statement)
                count = result.rowcount
        except SQLAlchemyError as exc:
            raise _store_error("delete", table, exc) from exc
        log.debug("Deleted %d rows from %s", count, table)
        return count

    def _table(self, name: str) -> Table:
        try:
            return TABLES[name]
        except KeyError:
            raise StoreError(f"unknown table {name}", table=name) from None

    def _conditions(self, table: Table, filters: Filters) -> list[ColumnElement[bool]]:
        if "user_id" not in filters:
            raise StoreError(f"{table.name}: filters must include user_id", table=table.name)
        conditions: list[ColumnElement[bool]] = []
        for name, value in filters.items():
            if name not in table.c:
                raise StoreError(f"{table.name} has no column {name}", table=table.name)
            column = table.c[name]
            if is_multi_value(value):
                conditions.append(column.in_(list(value)))
            elif value is None:
                conditions.append(column.is_(None))
            else:
                conditions.append(column == value)
        return conditions


def _store_error(operation: str, table: str, exc: SQLAlchemyError) -> StoreError:
    cause = getattr(exc, "orig", None) or exc
    log.debug("%s on %s failed: %s", operation, table, cause)
    return StoreError(str(cause), table=table)
