"""
Keyword relevance scoring.

Always available: no embedding capability involved and no failure modes
beyond returning an empty list.
"""

from __future__ import annotations

import logging
import re
from typing import Sequence

from ..models import Document, SearchResult
from .ranker import rank_results

logger = logging.getLogger(__name__)

FILENAME_MATCH_WEIGHT = 20
CONTENT_MATCH_WEIGHT = 2
EXACT_PHRASE_BONUS = 30

SEGMENT_TERM_SCORE = 10
SEGMENT_OCCURRENCE_SCORE = 2
SEGMENT_MULTI_TERM_SCORE = 5
MIN_SEGMENT_LENGTH = 20

CONTEXT_BEFORE = 100
CONTEXT_AFTER = 200
FALLBACK_SNIPPET_LENGTH = 300

_NON_WORD_RE = re.compile(r"[^\w]")
_SEGMENT_RE = re.compile(r"[.!?]+")


def query_terms(query: str) -> list[str]:
    """Lowercase, split on whitespace, keep terms longer than 2, drop non-word chars."""
    terms: list[str] = []
    for raw_term in query.lower().split():
        if len(raw_term) <= 2:
            continue
        term = _NON_WORD_RE.sub("", raw_term)
        if term:
            terms.append(term)
    return terms


def document_score(document: Document, terms: Sequence[str], lowered_query: str) -> int:
    content = document.content.lower()
    filename = document.name.lower()
    phrase_match = bool(lowered_query) and lowered_query in content

    total = 0
    for term in terms:
        total += filename.count(term) * FILENAME_MATCH_WEIGHT
        total += content.count(term) * CONTENT_MATCH_WEIGHT
        if phrase_match:
            total += EXACT_PHRASE_BONUS
    return total


def _segment_score(segment: str, terms: Sequence[str]) -> int:
    lowered = segment.lower()
    score = 0
    matched_terms = 0
    for term in terms:
        occurrences = lowered.count(term)
        if occurrences:
            matched_terms += 1
            score += SEGMENT_TERM_SCORE + occurrences * SEGMENT_OCCURRENCE_SCORE
    if matched_terms > 1:
        score += matched_terms * SEGMENT_MULTI_TERM_SCORE
    return score


def select_snippet(content: str, terms: Sequence[str]) -> str:
    """
    Pick the passage of `content` that best matches `terms`.

    1) highest scoring sentence-like segment (first one wins ties)
    2) a window around the first term occurrence
    3) the start of the document
    """
    if not content:
        return ""

    best_snippet = ""
    best_score = 0
    if terms:
        for segment in _SEGMENT_RE.split(content):
            if len(segment) < MIN_SEGMENT_LENGTH:
                continue
            score = _segment_score(segment, terms)
            if score > best_score:
                best_score = score
                best_snippet = segment.strip()
    if best_snippet:
        return best_snippet

    lowered = content.lower()
    for term in terms:
        index = lowered.find(term)
        if index == -1:
            continue
        start = max(0, index - CONTEXT_BEFORE)
        end = min(len(content), index + CONTEXT_AFTER)
        snippet = content[start:end]
        if start > 0:
            snippet = "..." + snippet
        if end < len(content):
            snippet = snippet + "..."
        return snippet

    if len(content) > FALLBACK_SNIPPET_LENGTH:
        return content[:FALLBACK_SNIPPET_LENGTH] + "..."
    return content


class KeywordScorer:
    """Term-frequency relevance scoring over a user's documents."""

    name = "keyword"

    def score(self, query: str, documents: Sequence[Document], k: int = 5) -> list[SearchResult]:
        terms = query_terms(query)
        lowered_query = query.strip().lower()
        logger.debug("Keyword search terms: %s", terms)

        results: list[SearchResult] = []
        for document in documents:
            total = document_score(document, terms, lowered_query)
            if total <= 0:
                continue
            results.append(
                SearchResult(
                    document=document,
                    score=min(total / (len(terms) * 10), 1.0),
                    snippet=select_snippet(document.content, terms),
                    method="keyword",
                    raw_score=float(total),
                )
            )

        ranked = rank_results(results, limit=k)
        logger.info("Keyword search found %d results", len(ranked))
        return ranked

    async def search(
        self,
        *,
        query: str,
        documents: Sequence[Document],
        limit: int = 5,
    ) -> list[SearchResult]:
        return self.score(query, documents, limit)
