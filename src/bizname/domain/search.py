"""Availability search across the three record stores.

A query is normalized once and looked up by normalized-name prefix in every
store concurrently. Each lookup runs in its own unit of work and is bounded by a
timeout. A store that fails or times out is reported in ``unavailable_kinds``
and contributes no matches, so one slow store degrades the answer instead of
failing it. The verdict is advisory: ``available`` only says whether anything
on file normalizes to a name starting with the query key.
"""

from __future__ import annotations

import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Final

from bizname.domain.model import EntityRecord, RecordKind
from bizname.domain.naming import suggest_alternatives
from bizname.domain.normalization import DEFAULT_RULES, NamingRules, normalize

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence
    from datetime import date
    from types import TracebackType

    from bizname.domain.model import BusinessRecord, StoredRecord
    from bizname.domain.ports import RecordUnitOfWork


log = getLogger(__name__)

DEFAULT_LIMITS: Final[dict[RecordKind, int]] = {
    RecordKind.ENTITY: 30,
    RecordKind.FICTITIOUS_NAME: 10,
    RecordKind.PARTNERSHIP: 10,
}
DEFAULT_RESULT_CAP: Final[int] = 50
DEFAULT_LOOKUP_TIMEOUT_SECONDS: Final[float] = 0.5


@dataclass(frozen=True, slots=True)
class Match:
    kind: RecordKind
    document_number: str
    name: str
    normalized_name: str
    status: str
    status_label: str
    relevant_date: date | None
    entity_type: str | None
    exact: bool
    active: bool

    @classmethod
    def from_stored(cls, stored: StoredRecord[BusinessRecord], query_key: str) -> Match:
        record = stored.record
        entity_type = record.entity_type if isinstance(record, EntityRecord) else None
        return cls(
            kind=record.kind,
            document_number=record.document_number,
            name=record.name,
            normalized_name=stored.normalized_name,
            status=record.status,
            status_label=record.status_label,
            relevant_date=record.relevant_date,
            entity_type=entity_type,
            exact=stored.normalized_name == query_key,
            active=record.is_active,
        )


@dataclass(frozen=True, slots=True)
class SearchResult:
    """Outcome of one availability search.

    ``available`` only reflects the stores in ``checked_kinds``. When every lookup
    failed or timed out it is still ``True``; ``undetermined`` flags that case so
    callers do not mistake it for a clean answer.
    """

    query: str
    normalized_query: str
    available: bool
    matches: tuple[Match, ...] = ()
    checked_kinds: tuple[RecordKind, ...] = ()
    unavailable_kinds: tuple[RecordKind, ...] = ()
    suggestions: tuple[str, ...] = ()

    @property
    def degraded(self) -> bool:
        return bool(self.unavailable_kinds)

    @property
    def undetermined(self) -> bool:
        return bool(self.unavailable_kinds) and not self.checked_kinds


type RankingPolicy = Callable[[Sequence[Match]], list[Match]]


def _recency_key(match: Match) -> tuple[bool, int]:
    if match.relevant_date is None:
        return (True, 0)
    return (False, -match.relevant_date.toordinal())


def most_recent_first(matches: Sequence[Match]) -> list[Match]:
    """Newest relevant date first; undated matches last in their original order."""

    return sorted(matches, key=_recency_key)


_KIND_WEIGHTS: Final[dict[RecordKind, int]] = {
    RecordKind.ENTITY: 0,
    RecordKind.PARTNERSHIP: 1,
    RecordKind.FICTITIOUS_NAME: 2,
}


def active_first(matches: Sequence[Match]) -> list[Match]:
    """Exact active filings first, then active ones, with entities ahead of other kinds."""

    return sorted(
        matches,
        key=lambda match: (
            not (match.exact and match.active),
            not match.active,
            _KIND_WEIGHTS[match.kind],
            *_recency_key(match),
        ),
    )


class AvailabilitySearchService:
    """Answer "is this name available?" from the record stores.

    The service owns a thread pool for store lookups; call ``close`` (or use it
    as a context manager) when done. Lookups that overrun the timeout keep their
    worker thread until the store answers, but the search returns without them.
    """

    def __init__(
        self,
        unit_of_work_factory: Callable[[], RecordUnitOfWork],
        *,
        rules: NamingRules = DEFAULT_RULES,
        limits: Mapping[RecordKind, int] | None = None,
        result_cap: int = DEFAULT_RESULT_CAP,
        lookup_timeout: float = DEFAULT_LOOKUP_TIMEOUT_SECONDS,
        ranking: RankingPolicy = most_recent_first,
        max_workers: int | None = None,
    ) -> None:
        self._unit_of_work_factory = unit_of_work_factory
        self._rules = rules
        self._limits = dict(limits or DEFAULT_LIMITS)
        self._result_cap = result_cap
        self._lookup_timeout = lookup_timeout
        self._ranking = ranking
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers or len(self._limits) * 4,
            thread_name_prefix="availability-search",
        )

    def __enter__(self) -> AvailabilitySearchService:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)

    def search(self, raw_query: str, *, entity_type: str | None = None) -> SearchResult:
        key = normalize(raw_query, self._rules)
        if not key:
            return SearchResult(query=raw_query, normalized_query=key, available=True)

        futures = {
            kind: self._executor.submit(self._lookup, kind, key, limit)
            for kind, limit in self._limits.items()
        }
        deadline = time.monotonic() + self._lookup_timeout
        merged: list[Match] = []
        checked: list[RecordKind] = []
        unavailable: list[RecordKind] = []
        for kind, future in futures.items():
            found = self._collect(kind, future, deadline)
            if found is None:
                unavailable.append(kind)
                continue
            checked.append(kind)
            merged.extend(Match.from_stored(stored, key) for stored in found)

        matches = tuple(self._ranking(merged)[: self._result_cap])
        available = not matches
        suggestions: tuple[str, ...] = ()
        if not available:
            suggestions = tuple(
                suggest_alternatives(raw_query, entity_type=entity_type, rules=self._rules)
            )
        return SearchResult(
            query=raw_query,
            normalized_query=key,
            available=available,
            matches=matches,
            checked_kinds=tuple(checked),
            unavailable_kinds=tuple(unavailable),
            suggestions=suggestions,
        )

    def _lookup(self, kind: RecordKind, key: str, limit: int) -> list[StoredRecord[BusinessRecord]]:
        with self._unit_of_work_factory() as uow:
            return uow.repositories.for_kind(kind).find_by_normalized_prefix(key, limit=limit)

    def _collect(
        self,
        kind: RecordKind,
        future: Future[list[StoredRecord[BusinessRecord]]],
        deadline: float,
    ) -> list[StoredRecord[BusinessRecord]] | None:
        remaining = max(0.0, deadline - time.monotonic())
        try:
            return future.result(timeout=remaining)
        except TimeoutError:
            future.cancel()
            log.warning("Lookup of %s records timed out after %.3fs", kind, self._lookup_timeout)
        except Exception as exc:  # noqa: BLE001
            log.warning("Lookup of %s records failed: %s", kind, exc)
        return None


__all__ = [
    "DEFAULT_LIMITS",
    "AvailabilitySearchService",
    "Match",
    "RankingPolicy",
    "SearchResult",
    "active_first",
    "most_recent_first",
]
