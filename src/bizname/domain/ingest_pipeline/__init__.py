"""Generic ingestion pipeline for fixed-width record extracts.

The pipeline streams a source, parses and normalizes each line, and upserts the
results in batches while keeping the sync-run ledger current. Everything that
differs between record kinds lives in a ``RecordKindDescriptor``.
"""

from __future__ import annotations

from .context import CancellationToken, ProgressCallback, ProgressSignal, RunTally
from .descriptor import RecordKindDescriptor, RecordParser
from .orchestrator import IngestionPipeline

__all__ = [
    "CancellationToken",
    "IngestionPipeline",
    "ProgressCallback",
    "ProgressSignal",
    "RecordKindDescriptor",
    "RecordParser",
    "RunTally",
]
