from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
import pytest_asyncio

from refledger.adapters.sqlalchemy import (
    SqlAlchemyRemoteStore,
    create_all_tables,
    create_store_engine,
)
from tests.support.memory_store import InMemoryRemoteStore

os.environ.setdefault("DATABASE_URI", "sqlite+aiosqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from pathlib import Path


@pytest.fixture(autouse=True)
def isolated_data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    data_dir = tmp_path / "data"
    monkeypatch.setenv("REFLEDGER_DATA_DIR", str(data_dir))
    return data_dir


@pytest.fixture
def memory_store() -> InMemoryRemoteStore:
    return InMemoryRemoteStore()


@pytest_asyncio.fixture
async def sqlite_store(tmp_path: Path) -> AsyncIterator[SqlAlchemyRemoteStore]:
    engine = create_store_engine(f"sqlite+aiosqlite:///{tmp_path / 'store.db'}")
    await create_all_tables(engine)
    store = SqlAlchemyRemoteStore(engine)
    try:
        yield store
    finally:
        await store.aclose()
