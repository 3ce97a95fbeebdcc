"""Data storage configuration helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

APP_DIR_NAME: Final[str] = "refledger"
DEFAULT_DB_FILENAME: Final[str] = "refledger.db"
SNAPSHOT_CACHE_FILENAME: Final[str] = "snapshot.json"
CONFIRMED_SNAPSHOT_FILENAME: Final[str] = "confirmed.json"

_ASYNC_DRIVER_SWAPS: Final[dict[str, str]] = {
    "sqlite+aiosqlite": "sqlite+pysqlite",
    "postgresql+asyncpg": "postgresql+psycopg",
}


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path
    database_filename: str = DEFAULT_DB_FILENAME
    snapshot_cache_filename: str = SNAPSHOT_CACHE_FILENAME
    confirmed_snapshot_filename: str = CONFIRMED_SNAPSHOT_FILENAME

    def resolve_data_dir(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def ensure_data_dir(self) -> Path:
        data_dir = self.resolve_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def database_path(self, *, ensure: bool = True) -> Path:
        base = self.ensure_data_dir() if ensure else self.resolve_data_dir()
        return base / self.database_filename

    def snapshot_cache_path(self, *, ensure: bool = True) -> Path:
        base = self.ensure_data_dir() if ensure else self.resolve_data_dir()
        return base / self.snapshot_cache_filename

    def confirmed_snapshot_path(self, *, ensure: bool = True) -> Path:
        base = self.ensure_data_dir() if ensure else self.resolve_data_dir()
        return base / self.confirmed_snapshot_filename

    def database_uri(self) -> str:
        return f"sqlite+aiosqlite:///{self.database_path()}"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str

    def sync_uri(self) -> str:
        return sync_database_uri(self.uri)


def sync_database_uri(uri: str) -> str:
    """Return the blocking-driver equivalent of an async database URI (for Alembic)."""

    scheme, sep, rest = uri.partition("://")
    if not sep:
        return uri
    return f"{_ASYNC_DRIVER_SWAPS.get(scheme, scheme)}://{rest}"


def _default_data_dir() -> Path:
    if os.name == "nt":
        base = os.getenv("LOCALAPPDATA")
        base_path = Path(base) if base else (Path.home() / "AppData" / "Local")
    else:
        base = os.getenv("XDG_DATA_HOME")
        base_path = Path(base) if base else (Path.home() / ".local" / "share")
    return (base_path / APP_DIR_NAME).expanduser().resolve()


def get_storage_config() -> StorageConfig:
    env_dir = os.getenv("REFLEDGER_DATA_DIR")
    data_dir = Path(env_dir) if env_dir else _default_data_dir()
    return StorageConfig(data_dir=data_dir)


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    env_uri = os.getenv("DATABASE_URI")
    if env_uri:
        return DatabaseConfig(uri=env_uri)
    storage_config = storage or get_storage_config()
    return DatabaseConfig(uri=storage_config.database_uri())
