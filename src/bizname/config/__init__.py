"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_env_float, optional_env_int, optional_env_str
from .errors import ConfigurationError, LayoutError
from .logging import configure_logging
from .search import SearchConfig, get_search_config
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config
from .sync import IngestConfig, get_ingest_config

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "IngestConfig",
    "LayoutError",
    "SearchConfig",
    "StorageConfig",
    "configure_logging",
    "get_database_config",
    "get_ingest_config",
    "get_search_config",
    "get_storage_config",
    "optional_env_float",
    "optional_env_int",
    "optional_env_str",
]
