"""SQLAlchemy-backed unit of work for the record stores and sync-run ledger."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal

from sqlalchemy import create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from bizname.adapters.sqlalchemy.mappings import start_mappers
from bizname.adapters.sqlalchemy.migrations import upgrade_head
from bizname.adapters.sqlalchemy.repositories import (
    SqlAlchemyEntityRepository,
    SqlAlchemyFictitiousNameRepository,
    SqlAlchemyPartnershipRepository,
    SqlAlchemySyncRunRepository,
)
from bizname.config import get_database_config
from bizname.domain.ports.persistence import StoreError
from bizname.domain.ports.unit_of_work import RecordRepositories, RepositoryCollection

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

SQLITE_BUSY_TIMEOUT_SECONDS = 30


class StartupError(RuntimeError):
    """Raised when a SQLAlchemy unit of work is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    _engine: Engine | None = None
    _session_factory: sessionmaker[Session] | None = None

    @property
    def engine(self) -> Engine | None:
        return self._engine

    @engine.setter
    def engine(self, value: Engine | None) -> None:
        self._session_factory = None
        self._engine = value

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._engine is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call bizname.adapters.sqlalchemy."
                "unit_of_work.startup() before requesting a unit of work."
            )
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        return self._session_factory


_STATE = _AdapterState()


def _enable_sqlite_wal(dbapi_connection: Any, connection_record: Any) -> None:
    _ = connection_record
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA journal_mode=WAL")
    finally:
        cursor.close()


def build_engine(database_uri: str) -> Engine:
    """Create an engine suited to concurrent ingestion workers and search readers.

    SQLite connections wait on locks instead of failing immediately, and file
    databases use WAL so readers never block on the writer.
    """

    url = make_url(database_uri)
    if url.get_backend_name() != "sqlite":
        return create_engine(url, pool_pre_ping=True)

    engine = create_engine(
        url,
        connect_args={"timeout": SQLITE_BUSY_TIMEOUT_SECONDS, "check_same_thread": False},
    )
    if url.database not in (None, "", ":memory:"):
        event.listen(engine, "connect", _enable_sqlite_wal)
    return engine


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Initialise the SQLAlchemy engine, schema, and session factory."""

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )

    resolved_engine = engine or build_engine(database_uri or get_database_config().uri)
    start_mappers()
    upgrade_head(engine=resolved_engine)

    if _STATE.engine is not None and _STATE.engine is not resolved_engine:
        _STATE.engine.dispose()
    _STATE.engine = resolved_engine


def configured_engine() -> Engine | None:
    """Return the engine currently managed by the adapter (if any)."""

    return _STATE.engine


def is_started() -> bool:
    """Return whether the adapter has been initialised."""

    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None


class BaseSqlAlchemyUnitOfWork[TRepositories: RepositoryCollection](ABC):
    """Generic SQLAlchemy unit of work with pluggable repository collections.

    Database failures during ``commit`` surface as ``StoreError`` so callers
    only deal with domain exceptions.
    """

    def __init__(self) -> None:
        self.session_factory: sessionmaker[Session] = _STATE.session_factory
        self._session: Session | None = None

    @abstractmethod
    def _build_repositories(self, session: Session) -> TRepositories: ...

    def __enter__(self) -> BaseSqlAlchemyUnitOfWork[TRepositories]:
        self.session = self.session_factory()
        self._repositories = self._build_repositories(self.session)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self.rollback()
        self.session.close()
        self.session = None
        return False

    def commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            raise StoreError(f"Commit failed: {exc}") from exc

    def rollback(self) -> None:
        self.session.rollback()

    @property
    def repositories(self) -> TRepositories:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._repositories

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session

    @session.setter
    def session(self, session: Session | None) -> None:
        if self._session is not None and session is not None:
            raise StartupError("Unit of work session already initialised")
        self._session = session


class SqlAlchemyUnitOfWork(BaseSqlAlchemyUnitOfWork[RecordRepositories]):
    """Unit of work managing SQLAlchemy sessions for record stores and sync runs."""

    def _build_repositories(self, session: Session) -> RecordRepositories:
        return RecordRepositories(
            entities=SqlAlchemyEntityRepository(session),
            fictitious_names=SqlAlchemyFictitiousNameRepository(session),
            partnerships=SqlAlchemyPartnershipRepository(session),
            sync_runs=SqlAlchemySyncRunRepository(session),
        )


if TYPE_CHECKING:
    from bizname.domain.ports.unit_of_work import RecordUnitOfWork

    _uow_check: RecordUnitOfWork = SqlAlchemyUnitOfWork()
