"""
Title relevance scoring.

Case-insensitive ladder, first matching rule wins:

    exact match          100
    title starts with q   80
    q inside title        60
    otherwise            +20 per query word found inside the title

Source-level weighting (``SearchSource.score_bonus``) is applied on top of
this by ``score_item``; ``score`` itself is pure.
"""

from __future__ import annotations

from network_search.domain.entities import RankedHit, RawItem, SearchSource

EXACT_MATCH_SCORE = 100
PREFIX_MATCH_SCORE = 80
SUBSTRING_MATCH_SCORE = 60
WORD_MATCH_SCORE = 20


def score(title: str, query: str) -> int:
    """
    Relevance of ``title`` for ``query``.

    >>> score("Foot Pain Guide", "pain")
    60
    >>> score("Foot Pain Guide", "knee pain")
    20
    """
    title_lower = title.lower()
    query_lower = query.lower()

    if title_lower == query_lower:
        return EXACT_MATCH_SCORE
    if title_lower.startswith(query_lower):
        return PREFIX_MATCH_SCORE
    if query_lower in title_lower:
        return SUBSTRING_MATCH_SCORE

    return sum(WORD_MATCH_SCORE for word in query_lower.split() if word in title_lower)


def score_item(item: RawItem, query: str, source: SearchSource | None = None) -> RankedHit:
    """Score one item and add the bonus configured for its source."""
    bonus = source.score_bonus if source is not None else 0
    return RankedHit(item=item, score=score(item.title, query) + bonus)


def score_items(items: list[RawItem], query: str, source: SearchSource | None = None) -> list[RankedHit]:
    return [score_item(item, query, source) for item in items]
