# eventhub/utils/tokens.py
"""
Normalisation shared by everything that compares actor attributes.

Profiles are written in many shapes (comma lists, free sentences, arrays),
so both sides of a comparison must go through these helpers; tokenising one
side differently would silently break matching.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Iterable, List

_SPLIT_RE = re.compile(r"[,;/|]+|\s+")

STOPWORDS = frozenset({"and", "or"})

MIN_TOKEN_LENGTH = 2

LANGUAGE_ALIASES = {
    "en": "english",
    "eng": "english",
    "fr": "french",
    "ar": "arabic",
    "es": "spanish",
    "de": "german",
    "it": "italian",
    "english": "english",
    "french": "french",
    "arabic": "arabic",
    "spanish": "spanish",
    "german": "german",
    "italian": "italian",
}


def as_list(value: Any) -> List[Any]:
    """Wrap scalars in a list and drop empty entries."""
    if value is None:
        return []
    if isinstance(value, (list, tuple, set, frozenset)):
        return [v for v in value if v not in (None, "")]
    if value == "":
        return []
    return [value]


def _unique(tokens: Iterable[str]) -> List[str]:
    seen = set()
    result = []
    for token in tokens:
        if token not in seen:
            seen.add(token)
            result.append(token)
    return result


def words(value: Any) -> List[str]:
    """
    Tokenise free text (or a list of free texts).

    Lower-cases, splits on whitespace and , ; | /, drops tokens shorter than
    two characters and the stopwords "and"/"or", then de-duplicates keeping
    first-seen order.

    >>> words("AI, logistics and Supply-chain")
    ['ai', 'logistics', 'supply-chain']
    """
    tokens = []
    for item in as_list(value):
        for raw in _SPLIT_RE.split(str(item)):
            token = raw.strip().lower()
            if len(token) < MIN_TOKEN_LENGTH or token in STOPWORDS:
                continue
            tokens.append(token)
    return _unique(tokens)


def language_tokens(value: Any) -> List[str]:
    """Like words(), with abbreviations folded onto full language names."""
    return _unique(LANGUAGE_ALIASES.get(token, token) for token in words(value))


@dataclass(frozen=True)
class TokenVector:
    """Token sets of one actor, computed at query time."""

    looking: frozenset = field(default_factory=frozenset)
    offering: frozenset = field(default_factory=frozenset)
    industries: frozenset = field(default_factory=frozenset)
    regions: frozenset = field(default_factory=frozenset)
    languages: frozenset = field(default_factory=frozenset)

    @classmethod
    def from_fields(
        cls,
        *,
        looking_for: Any = None,
        offering: Any = None,
        industries: Any = None,
        regions: Any = None,
        languages: Any = None,
    ) -> "TokenVector":
        return cls(
            looking=frozenset(words(looking_for)),
            offering=frozenset(words(offering)),
            industries=frozenset(words(industries)),
            regions=frozenset(words(regions)),
            languages=frozenset(language_tokens(languages)),
        )
