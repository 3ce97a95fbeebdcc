"""Application configuration helpers."""

from __future__ import annotations

from .env import env_float, require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .feeds import FeedSyncConfig, get_feed_sync_config
from .http_resilience import RateLimit, ResilienceConfig
from .logging import configure_logging
from .storage import (
    DatabaseConfig,
    StorageConfig,
    get_database_config,
    get_storage_config,
    sync_database_uri,
)

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "FeedSyncConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "StorageConfig",
    "configure_logging",
    "env_float",
    "get_database_config",
    "get_feed_sync_config",
    "get_storage_config",
    "require_env_var",
    "require_env_vars",
    "sync_database_uri",
]
