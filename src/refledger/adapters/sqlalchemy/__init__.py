"""SQLAlchemy adapter package for refledger."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .store import SqlAlchemyRemoteStore, create_store_engine
from .tables import TABLES, UTCDateTime, metadata

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine


async def create_all_tables(engine: AsyncEngine) -> None:
    """Create every table directly from metadata, bypassing migrations."""

    async with engine.begin() as connection:
        await connection.run_sync(metadata.create_all)


__all__ = [
    "TABLES",
    "SqlAlchemyRemoteStore",
    "UTCDateTime",
    "create_all_tables",
    "create_store_engine",
    "metadata",
]
