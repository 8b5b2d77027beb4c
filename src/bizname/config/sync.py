"""Ingestion defaults for record imports."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_float, optional_env_int, optional_env_str

DEFAULT_INGEST_WORKERS = 4
DEFAULT_INGEST_BATCH_SIZE = 500
DEFAULT_PROGRESS_EVERY = 1000
DEFAULT_ERROR_LOG_LIMIT = 10
DEFAULT_SOURCE_ENCODING = "latin-1"
DEFAULT_STALL_HOURS = 6.0


@dataclass(frozen=True, slots=True)
class IngestConfig:
    workers: int = DEFAULT_INGEST_WORKERS
    batch_size: int = DEFAULT_INGEST_BATCH_SIZE
    progress_every: int = DEFAULT_PROGRESS_EVERY
    error_log_limit: int = DEFAULT_ERROR_LOG_LIMIT
    source_encoding: str = DEFAULT_SOURCE_ENCODING
    stall_hours: float = DEFAULT_STALL_HOURS


def get_ingest_config() -> IngestConfig:
    return IngestConfig(
        workers=optional_env_int("BIZNAME_INGEST_WORKERS", DEFAULT_INGEST_WORKERS),
        batch_size=optional_env_int("BIZNAME_INGEST_BATCH_SIZE", DEFAULT_INGEST_BATCH_SIZE),
        progress_every=optional_env_int("BIZNAME_PROGRESS_EVERY", DEFAULT_PROGRESS_EVERY),
        error_log_limit=optional_env_int(
            "BIZNAME_ERROR_LOG_LIMIT", DEFAULT_ERROR_LOG_LIMIT, minimum=0
        ),
        source_encoding=optional_env_str("BIZNAME_SOURCE_ENCODING", DEFAULT_SOURCE_ENCODING),
        stall_hours=optional_env_float("BIZNAME_STALL_HOURS", DEFAULT_STALL_HOURS),
    )
