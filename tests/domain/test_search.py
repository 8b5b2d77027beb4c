from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING

import pytest

from bizname.domain.model import RecordKind
from bizname.domain.normalization import normalize
from bizname.domain.ports import StoreError
from bizname.domain.search import (
    AvailabilitySearchService,
    active_first,
    most_recent_first,
)
from tests.helpers.fakes import FakeStore, make_entity, make_fictitious_name, make_partnership

if TYPE_CHECKING:
    from collections.abc import Iterator

    from bizname.domain.model import BusinessRecord


def _put(store: FakeStore, record: BusinessRecord) -> None:
    repository = {
        RecordKind.ENTITY: store.entities,
        RecordKind.FICTITIOUS_NAME: store.fictitious_names,
        RecordKind.PARTNERSHIP: store.partnerships,
    }[record.kind]
    repository.put(record, normalize(record.name))


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def service(store: FakeStore) -> Iterator[AvailabilitySearchService]:
    with AvailabilitySearchService(store.factory, lookup_timeout=2.0) as search_service:
        yield search_service


def test_exact_match_makes_name_unavailable(
    store: FakeStore, service: AvailabilitySearchService
) -> None:
    record = make_entity(
        "L23000123456", "Sunshine Consulting LLC", filing_date=date(2023, 1, 15)
    )
    _put(store, record)

    result = service.search("Sunshine Consulting", entity_type="LLC")

    assert not result.available
    assert result.normalized_query == "SUNSHINE CONSULTING"
    assert result.checked_kinds == (
        RecordKind.ENTITY,
        RecordKind.FICTITIOUS_NAME,
        RecordKind.PARTNERSHIP,
    )
    assert not result.degraded
    (match,) = result.matches
    assert match.document_number == "L23000123456"
    assert match.kind is RecordKind.ENTITY
    assert match.exact
    assert match.active
    assert match.status_label == "ACTIVE"
    assert match.entity_type == "LLC"
    assert match.relevant_date == date(2023, 1, 15)
    assert result.suggestions[0] == "SUNSHINE CONSULTING VENTURES"


def test_prefix_matches_are_reported_as_inexact(
    store: FakeStore, service: AvailabilitySearchService
) -> None:
    _put(store, make_fictitious_name("G1", "Sunshine Consulting Group"))

    result = service.search("The Sunshine")

    assert not result.available
    (match,) = result.matches
    assert match.kind is RecordKind.FICTITIOUS_NAME
    assert not match.exact
    assert match.entity_type is None


def test_name_with_no_matches_is_available(
    store: FakeStore, service: AvailabilitySearchService
) -> None:
    _put(store, make_entity("E1", "Moonlight Bakery"))

    result = service.search("Sunshine Consulting")

    assert result.available
    assert result.matches == ()
    assert result.suggestions == ()


def test_empty_key_skips_every_store(store: FakeStore, service: AvailabilitySearchService) -> None:
    result = service.search("The LLC")

    assert result.available
    assert result.normalized_query == ""
    assert result.checked_kinds == ()
    assert store.entities.lookups == []
    assert store.partnerships.lookups == []


def test_each_store_is_queried_with_its_own_limit(
    store: FakeStore, service: AvailabilitySearchService
) -> None:
    service.search("Acme")

    assert store.entities.lookups == [("ACME", 30)]
    assert store.fictitious_names.lookups == [("ACME", 10)]
    assert store.partnerships.lookups == [("ACME", 10)]


def test_results_are_newest_first_across_kinds(
    store: FakeStore, service: AvailabilitySearchService
) -> None:
    _put(store, make_entity("E-old", "Acme Widgets", filing_date=date(2001, 5, 1)))
    _put(store, make_fictitious_name("F-new", "Acme Widgets", filing_date=date(2024, 2, 1)))
    _put(store, make_partnership("P-undated", "Acme Widgets"))
    _put(store, make_partnership("P-mid", "Acme Tools", effective_date=date(2015, 7, 4)))

    result = service.search("Acme")

    assert [match.document_number for match in result.matches] == [
        "F-new",
        "P-mid",
        "E-old",
        "P-undated",
    ]


def test_active_first_ranking_prefers_exact_active_entities(store: FakeStore) -> None:
    _put(store, make_fictitious_name("F1", "Acme", filing_date=date(2024, 1, 1)))
    _put(store, make_entity("E-inactive", "Acme", status="I", filing_date=date(2023, 1, 1)))
    _put(store, make_partnership("P1", "Acme Partners", filing_date=date(2022, 1, 1)))
    _put(store, make_entity("E1", "Acme LLC", filing_date=date(1999, 1, 1)))

    with AvailabilitySearchService(store.factory, ranking=active_first) as service:
        result = service.search("Acme")

    assert [match.document_number for match in result.matches] == [
        "E1",
        "F1",
        "P1",
        "E-inactive",
    ]


def test_ranking_policies_are_plain_functions() -> None:
    assert most_recent_first([]) == []
    assert active_first([]) == []


def test_result_cap_truncates_ranked_matches(store: FakeStore) -> None:
    for index in range(8):
        _put(store, make_entity(f"E{index}", f"Acme {index}", filing_date=date(2000 + index, 1, 1)))

    with AvailabilitySearchService(store.factory, result_cap=3) as service:
        result = service.search("Acme")

    assert [match.document_number for match in result.matches] == ["E7", "E6", "E5"]


def test_failing_store_degrades_the_result(
    store: FakeStore, service: AvailabilitySearchService, caplog: pytest.LogCaptureFixture
) -> None:
    _put(store, make_entity("E1", "Acme"))
    store.fictitious_names.lookup_error = StoreError("connection refused")
    caplog.set_level(logging.WARNING, logger="bizname.domain.search")

    result = service.search("Acme")

    assert not result.available
    assert result.degraded
    assert result.unavailable_kinds == (RecordKind.FICTITIOUS_NAME,)
    assert RecordKind.FICTITIOUS_NAME not in result.checked_kinds
    assert not result.undetermined
    assert [match.document_number for match in result.matches] == ["E1"]
    assert any("connection refused" in record.getMessage() for record in caplog.records)


def test_slow_store_is_dropped_after_the_timeout(store: FakeStore) -> None:
    store.partnerships.lookup_delay = 1.0

    with AvailabilitySearchService(store.factory, lookup_timeout=0.2) as service:
        result = service.search("Acme")

    assert result.available
    assert result.unavailable_kinds == (RecordKind.PARTNERSHIP,)
    assert result.checked_kinds == (RecordKind.ENTITY, RecordKind.FICTITIOUS_NAME)


@pytest.mark.parametrize("query", ["", "LLC"])
def test_queries_without_a_key_are_available(
    store: FakeStore, service: AvailabilitySearchService, query: str
) -> None:
    _put(store, make_entity("E1", "Acme"))

    result = service.search(query)

    assert result.available
    assert result.matches == ()


def test_every_store_failing_leaves_the_verdict_undetermined(store: FakeStore) -> None:
    for repository in (store.entities, store.fictitious_names, store.partnerships):
        repository.lookup_error = StoreError("connection refused")

    with AvailabilitySearchService(store.factory, lookup_timeout=2.0) as service:
        result = service.search("Acme")

    assert result.available
    assert result.checked_kinds == ()
    assert result.undetermined
