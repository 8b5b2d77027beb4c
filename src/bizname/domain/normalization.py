"""Distinguishability normalization for business names.

Two names are considered the same for registration purposes when they differ
only by:

- a trailing entity designator (LLC, Inc., Corp., Co., Ltd., ...)
- a leading article (the, a, an)
- "&" versus "and"
- singular, plural or possessive word forms
- punctuation, symbols and spacing

``normalize`` maps a raw name to a comparison key by applying those rules
in that order. The plural/possessive rule is a literal suffix heuristic, not a
dictionary lookup, so irregular words can be over- or under-stripped (for
example "FITNESS" becomes "FITNE"). Both sides of every comparison go through
the same function, so the approximation is consistent.

A later rule can expose a match for an earlier one ("ACME COS" becomes
"ACME CO" after plural stripping), so the rule sequence is repeated until the
key stops changing. Every pass after the first only removes characters, which
bounds the loop and makes the function idempotent.
"""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Iterable

_APOSTROPHES: Final[frozenset[str]] = frozenset("'’‘`")
_POSSESSIVE_SUFFIXES: Final[tuple[str, ...]] = tuple(f"{mark}S" for mark in sorted(_APOSTROPHES))

DEFAULT_DESIGNATORS: Final[tuple[str, ...]] = (
    "LLC",
    "L.L.C.",
    "L L C",
    "LIMITED LIABILITY COMPANY",
    "LIMITED LIABILITY CO",
    "INC",
    "INC.",
    "INCORPORATED",
    "CORP",
    "CORPORATION",
    "CO",
    "COMPANY",
    "LTD",
    "LIMITED",
    "LP",
    "L.P.",
    "LIMITED PARTNERSHIP",
    "LLP",
    "L.L.P.",
    "LIMITED LIABILITY PARTNERSHIP",
    "LLLP",
    "LIMITED LIABILITY LIMITED PARTNERSHIP",
    "GP",
    "GENERAL PARTNERSHIP",
    "PA",
    "P.A.",
    "PROFESSIONAL ASSOCIATION",
    "PLLC",
    "P.L.L.C.",
    "PROFESSIONAL LIMITED LIABILITY COMPANY",
    "PL",
    "P.L.",
    "PROFESSIONAL LIMITED",
)
DEFAULT_ARTICLES: Final[tuple[str, ...]] = ("THE", "A", "AN")
DEFAULT_CONJUNCTIONS: Final[tuple[str, ...]] = ("&", "AND")
DEFAULT_CONJUNCTION_TOKEN: Final[str] = "AND"


def _is_punctuation(char: str) -> bool:
    category = unicodedata.category(char)
    return category.startswith(("P", "S"))


def _alnum_key(token: str) -> str:
    return "".join(char for char in token if char.isalnum())


def _strip_punctuation(token: str) -> str:
    return "".join(char for char in token if not _is_punctuation(char))


@dataclass(frozen=True, slots=True)
class NamingRules:
    """Immutable rule table for one jurisdiction.

    Designators are stored as tuples of alphanumeric token keys, longest first,
    so "L.L.C." and "LLC" share the key ``("LLC",)`` while "LIMITED LIABILITY
    COMPANY" is matched as a three-token sequence before "COMPANY" alone.
    """

    designators: tuple[tuple[str, ...], ...]
    articles: frozenset[str]
    conjunctions: frozenset[str]
    conjunction_token: str = DEFAULT_CONJUNCTION_TOKEN

    @classmethod
    def build(
        cls,
        *,
        designators: Iterable[str] = DEFAULT_DESIGNATORS,
        articles: Iterable[str] = DEFAULT_ARTICLES,
        conjunctions: Iterable[str] = DEFAULT_CONJUNCTIONS,
        conjunction_token: str = DEFAULT_CONJUNCTION_TOKEN,
    ) -> NamingRules:
        keyed: set[tuple[str, ...]] = set()
        for designator in designators:
            key = tuple(
                part for part in (_alnum_key(token) for token in designator.upper().split()) if part
            )
            if key:
                keyed.add(key)
        ordered = tuple(sorted(keyed, key=lambda key: (-len(key), key)))
        return cls(
            designators=ordered,
            articles=frozenset(article.upper() for article in articles),
            conjunctions=frozenset(word.upper() for word in conjunctions),
            conjunction_token=conjunction_token.upper(),
        )


DEFAULT_RULES: Final[NamingRules] = NamingRules.build()


def normalize(raw_name: str, rules: NamingRules = DEFAULT_RULES) -> str:
    """Return the distinguishability key for ``raw_name``.

    An empty result means the name cannot be evaluated (blank, punctuation only,
    or nothing but a designator); callers must not treat it as matching anything.
    """

    current = _apply_rules(raw_name, rules)
    while True:
        following = _apply_rules(current, rules)
        if following == current:
            return current
        current = following


def are_distinguishable(first: str, second: str, rules: NamingRules = DEFAULT_RULES) -> bool:
    return normalize(first, rules) != normalize(second, rules)


def _apply_rules(name: str, rules: NamingRules) -> str:
    text = unicodedata.normalize("NFKC", name).upper()
    for conjunction in rules.conjunctions:
        if not _alnum_key(conjunction):
            text = text.replace(conjunction, f" {conjunction} ")
    tokens = [
        token for token in text.split() if _alnum_key(token) or token in rules.conjunctions
    ]

    tokens = _strip_designators(tokens, rules)
    tokens = _strip_leading_articles(tokens, rules)
    tokens = [_canonical_conjunction(token, rules) for token in tokens]
    tokens = [_singularize(token) for token in tokens]

    cleaned = (_strip_punctuation(token) for token in tokens)
    return " ".join(token for token in cleaned if token)


def _strip_designators(tokens: list[str], rules: NamingRules) -> list[str]:
    remaining = list(tokens)
    keys = [_alnum_key(token) for token in remaining]
    while remaining:
        for designator in rules.designators:
            size = len(designator)
            if size <= len(keys) and tuple(keys[-size:]) == designator:
                del remaining[-size:]
                del keys[-size:]
                break
        else:
            break
    return remaining


def _strip_leading_articles(tokens: list[str], rules: NamingRules) -> list[str]:
    start = 0
    while start < len(tokens) and _alnum_key(tokens[start]) in rules.articles:
        start += 1
    return tokens[start:]


def _canonical_conjunction(token: str, rules: NamingRules) -> str:
    if token in rules.conjunctions or _alnum_key(token) in rules.conjunctions:
        return rules.conjunction_token
    return token


def _singularize(token: str) -> str:
    word = _trim_edges(token)
    for suffix in _POSSESSIVE_SUFFIXES:
        if word.endswith(suffix) and _alnum_key(word[: -len(suffix)]):
            word = word[: -len(suffix)]
            break
    else:
        if word and word[-1] in _APOSTROPHES:
            word = word[:-1]
    if word.endswith("S") and _alnum_key(word[:-1]):
        word = word[:-1]
    return word


def _trim_edges(token: str) -> str:
    start, end = 0, len(token)
    while start < end and _is_punctuation(token[start]) and token[start] not in _APOSTROPHES:
        start += 1
    while end > start and _is_punctuation(token[end - 1]) and token[end - 1] not in _APOSTROPHES:
        end -= 1
    return token[start:end]
