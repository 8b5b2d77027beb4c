"""Availability search limits and timeouts."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_float

DEFAULT_ENTITY_LIMIT = 30
DEFAULT_FICTITIOUS_NAME_LIMIT = 10
DEFAULT_PARTNERSHIP_LIMIT = 10
DEFAULT_RESULT_CAP = 50
DEFAULT_LOOKUP_TIMEOUT_SECONDS = 0.5


@dataclass(frozen=True, slots=True)
class SearchConfig:
    entity_limit: int = DEFAULT_ENTITY_LIMIT
    fictitious_name_limit: int = DEFAULT_FICTITIOUS_NAME_LIMIT
    partnership_limit: int = DEFAULT_PARTNERSHIP_LIMIT
    result_cap: int = DEFAULT_RESULT_CAP
    lookup_timeout_seconds: float = DEFAULT_LOOKUP_TIMEOUT_SECONDS


def get_search_config() -> SearchConfig:
    return SearchConfig(
        lookup_timeout_seconds=optional_env_float(
            "BIZNAME_SEARCH_TIMEOUT_SECONDS", DEFAULT_LOOKUP_TIMEOUT_SECONDS
        ),
    )
