"""Name-format checks and alternative-name suggestions.

Both are advisory helpers around availability search: the format check catches
names the filing office would reject outright, and suggestions give the caller
something to try when a name is taken.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Final

from bizname.domain.normalization import DEFAULT_RULES, NamingRules, normalize

MIN_NAME_LENGTH: Final[int] = 3
MAX_NAME_LENGTH: Final[int] = 100
MAX_SUGGESTIONS: Final[int] = 5

_PROHIBITED_CHARACTERS: Final[re.Pattern[str]] = re.compile(r"[<>{}\[\]\\/]")
_RESTRICTED_WORDS: Final[tuple[str, ...]] = (
    "FBI",
    "CIA",
    "TREASURY",
    "FEDERAL RESERVE",
    "UNITED STATES",
)
_RESTRICTED_PATTERNS: Final[tuple[tuple[str, re.Pattern[str]], ...]] = tuple(
    (word, re.compile(rf"\b{re.escape(word)}\b", re.IGNORECASE)) for word in _RESTRICTED_WORDS
)

_GENERIC_SUFFIXES: Final[tuple[str, ...]] = (
    "FLORIDA",
    "FL",
    "GROUP",
    "SOLUTIONS",
    "SERVICES",
    "ENTERPRISES",
)
_ENTITY_TYPE_SUFFIXES: Final[dict[str, tuple[str, ...]]] = {
    "LLC": ("VENTURES", "HOLDINGS"),
    "CORPORATION": ("CORPORATION", "INTERNATIONAL"),
}


@dataclass(frozen=True, slots=True)
class NameFormatValidation:
    errors: tuple[str, ...] = field(default_factory=tuple)

    @property
    def valid(self) -> bool:
        return not self.errors


def validate_name_format(name: str) -> NameFormatValidation:
    """Check ``name`` against the filing office's basic format rules."""

    errors: list[str] = []
    stripped = name.strip()
    if len(stripped) < MIN_NAME_LENGTH:
        errors.append(f"Business name must be at least {MIN_NAME_LENGTH} characters long")
    if len(name) > MAX_NAME_LENGTH:
        errors.append(f"Business name must be at most {MAX_NAME_LENGTH} characters long")
    if _PROHIBITED_CHARACTERS.search(name):
        errors.append("Business name contains prohibited characters")
    if stripped.isdigit():
        errors.append("Business name cannot consist only of numbers")
    errors.extend(
        f'Business name cannot contain "{word}"'
        for word, pattern in _RESTRICTED_PATTERNS
        if pattern.search(name)
    )
    return NameFormatValidation(errors=tuple(errors))


def suggest_alternatives(
    name: str,
    *,
    entity_type: str | None = None,
    year: int | None = None,
    rules: NamingRules = DEFAULT_RULES,
    limit: int = MAX_SUGGESTIONS,
) -> list[str]:
    """Return up to ``limit`` variants of the normalized ``name``.

    Suffixes specific to ``entity_type`` come first, followed by generic
    location and trade words and the current year. The type-specific words
    lead because they keep the filer's chosen structure recognisable in the
    first few suggestions, which is all most callers display.
    """

    base = normalize(name, rules)
    if not base:
        return []
    suffixes = [
        *_ENTITY_TYPE_SUFFIXES.get((entity_type or "").upper(), ()),
        *_GENERIC_SUFFIXES,
        str(year if year is not None else datetime.now(UTC).year),
    ]
    suggestions: list[str] = []
    for suffix in suffixes:
        candidate = f"{base} {suffix}"
        if candidate not in suggestions:
            suggestions.append(candidate)
        if len(suggestions) >= limit:
            break
    return suggestions
