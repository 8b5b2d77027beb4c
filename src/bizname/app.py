"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING

from bizname.adapters.fixed_width import descriptor_for
from bizname.adapters.source_file import FixedWidthFileSource, find_source_files
from bizname.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, is_started, startup
from bizname.config import get_ingest_config, get_search_config
from bizname.domain.ingest_pipeline import IngestionPipeline
from bizname.domain.model import RecordKind, RunType
from bizname.domain.normalization import DEFAULT_RULES, NamingRules
from bizname.domain.ports.unit_of_work import RecordUnitOfWork
from bizname.domain.search import AvailabilitySearchService, most_recent_first

if TYPE_CHECKING:
    from bizname.config import IngestConfig, SearchConfig
    from bizname.domain.ingest_pipeline import CancellationToken, ProgressCallback
    from bizname.domain.model import SyncRun
    from bizname.domain.search import RankingPolicy, SearchResult

UnitOfWorkFactory = Callable[[], RecordUnitOfWork]


log = getLogger(__name__)


def _resolve_unit_of_work(factory: UnitOfWorkFactory | None) -> UnitOfWorkFactory:
    if factory is not None:
        return factory
    if not is_started():
        startup()
    return SqlAlchemyUnitOfWork


def build_pipeline(
    kind: RecordKind,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: IngestConfig | None = None,
    rules: NamingRules = DEFAULT_RULES,
) -> IngestionPipeline:
    settings = config or get_ingest_config()
    return IngestionPipeline(
        descriptor=descriptor_for(kind),
        unit_of_work_factory=_resolve_unit_of_work(unit_of_work_factory),
        rules=rules,
        workers=settings.workers,
        batch_size=settings.batch_size,
        progress_every=settings.progress_every,
        error_log_limit=settings.error_log_limit,
    )


def import_source(
    kind: RecordKind,
    path: Path,
    *,
    run_type: RunType = RunType.FULL,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: IngestConfig | None = None,
    rules: NamingRules = DEFAULT_RULES,
    cancel: CancellationToken | None = None,
    progress: ProgressCallback | None = None,
) -> SyncRun:
    """Ingest a single extract file of ``kind`` and return its sync run."""

    settings = config or get_ingest_config()
    pipeline = build_pipeline(
        kind, unit_of_work_factory=unit_of_work_factory, config=settings, rules=rules
    )
    source = FixedWidthFileSource(path=path, kind=kind, encoding=settings.source_encoding)
    return pipeline.run(source, run_type=run_type, cancel=cancel, progress=progress)


def import_path(
    kind: RecordKind,
    path: Path,
    *,
    run_type: RunType = RunType.FULL,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: IngestConfig | None = None,
    rules: NamingRules = DEFAULT_RULES,
    cancel: CancellationToken | None = None,
    progress: ProgressCallback | None = None,
) -> list[SyncRun]:
    """Ingest ``path``, or every matching extract file when it is a directory.

    Directory files are processed one after another in name order, one sync run
    each. Cancellation stops before the next file starts.
    """

    path = Path(path)
    if not path.is_dir():
        files = [path]
    else:
        pattern = descriptor_for(kind).file_pattern
        files = find_source_files(path, pattern)
        if not files:
            log.warning("No %s files matching %s in %s", kind, pattern, path)
        else:
            log.info("Importing %d %s files from %s", len(files), kind, path)

    runs: list[SyncRun] = []
    for file_path in files:
        if cancel is not None and cancel.cancelled:
            log.warning("Import cancelled before %s", file_path)
            break
        runs.append(
            import_source(
                kind,
                file_path,
                run_type=run_type,
                unit_of_work_factory=unit_of_work_factory,
                config=config,
                rules=rules,
                cancel=cancel,
                progress=progress,
            )
        )
    return runs


def build_search_service(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: SearchConfig | None = None,
    rules: NamingRules = DEFAULT_RULES,
    ranking: RankingPolicy = most_recent_first,
) -> AvailabilitySearchService:
    """Create a search service; the caller owns it and must close it."""

    settings = config or get_search_config()
    return AvailabilitySearchService(
        _resolve_unit_of_work(unit_of_work_factory),
        rules=rules,
        limits={
            RecordKind.ENTITY: settings.entity_limit,
            RecordKind.FICTITIOUS_NAME: settings.fictitious_name_limit,
            RecordKind.PARTNERSHIP: settings.partnership_limit,
        },
        result_cap=settings.result_cap,
        lookup_timeout=settings.lookup_timeout_seconds,
        ranking=ranking,
    )


def search_name(
    raw_query: str,
    *,
    entity_type: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: SearchConfig | None = None,
) -> SearchResult:
    """One-shot availability search for ``raw_query``."""

    with build_search_service(
        unit_of_work_factory=unit_of_work_factory, config=config
    ) as service:
        result = service.search(raw_query, entity_type=entity_type)
    log.info(
        "Searched %r (key %r): available=%s matches=%d unavailable=%s",
        raw_query,
        result.normalized_query,
        result.available,
        len(result.matches),
        [str(kind) for kind in result.unavailable_kinds],
    )
    return result


def latest_sync_runs(
    *, unit_of_work_factory: UnitOfWorkFactory | None = None
) -> dict[RecordKind, SyncRun]:
    """Most recent sync run per record kind, for data-freshness checks."""

    with _resolve_unit_of_work(unit_of_work_factory)() as uow:
        return uow.repositories.sync_runs.latest_per_kind()
