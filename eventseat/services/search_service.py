"""
Guest name matching and relevance ranking
"""

from dataclasses import dataclass
from typing import List, Sequence, TypeVar

from eventseat.schemas.guest import GuestResponse

EMPTY_QUERY_ALL = "all"
EMPTY_QUERY_NONE = "none"

G = TypeVar("G", bound=GuestResponse)


@dataclass(frozen=True)
class SearchPolicy:
    """How a store answers name searches.

    ``fuzzy`` enables the token-prefix fallback. ``empty_query`` decides what a
    blank or whitespace-only query returns: every guest (``"all"``) or nothing
    (``"none"``).
    """
    fuzzy: bool = True
    empty_query: str = EMPTY_QUERY_ALL

    def __post_init__(self):
        if self.empty_query not in (EMPTY_QUERY_ALL, EMPTY_QUERY_NONE):
            raise ValueError(f"empty_query must be 'all' or 'none', got {self.empty_query!r}")


def normalize_query(query: str) -> str:
    return (query or "").strip().lower()


def is_substring_match(query: str, name: str) -> bool:
    """Case-insensitive substring test"""
    return normalize_query(query) in name.lower()


def is_token_prefix_match(query: str, name: str) -> bool:
    """True when a word of ``name`` starts with the query or the query starts with that word.

    Tolerates partial or slightly misremembered names ("jon" finds "Jonathan",
    "johnny" finds "John").
    """
    term = normalize_query(query)
    if not term:
        return False
    # str.split() never yields empty tokens, so "" cannot prefix-match everything
    return any(
        token.startswith(term) or term.startswith(token)
        for token in name.lower().split()
    )


def matches(query: str, name: str, fuzzy: bool = True) -> bool:
    if is_substring_match(query, name):
        return True
    return fuzzy and is_token_prefix_match(query, name)


def rank(query: str, guests: Sequence[G]) -> List[G]:
    """Order guests so substring hits come before prefix-only hits.

    ``sorted`` is stable, so guests of equal relevance keep their input order.
    """
    return sorted(guests, key=lambda guest: 0 if is_substring_match(query, guest.name) else 1)


def search(guests: Sequence[G], query: str, policy: SearchPolicy = SearchPolicy()) -> List[G]:
    """Filter ``guests`` by name and return them in relevance order"""
    if not normalize_query(query):
        return list(guests) if policy.empty_query == EMPTY_QUERY_ALL else []

    found = [guest for guest in guests if matches(query, guest.name, fuzzy=policy.fuzzy)]
    return rank(query, found)
