"""
Similarity and ranking helpers shared by both search paths.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from functools import reduce
from typing import Iterable, Sequence

from ..models import SearchResult


@dataclass(frozen=True)
class ChunkMatch:
    """A chunk paired with its similarity to the query."""

    text: str
    similarity: float


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine of the angle between `a` and `b`; 0.0 for empty, zero or mismatched vectors."""
    if not a or not b or len(a) != len(b):
        return 0.0

    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot / (norm_a * norm_b)


def clamp_score(value: float) -> float:
    return min(max(value, 0.0), 1.0)


def _keep_better(best: ChunkMatch | None, candidate: ChunkMatch) -> ChunkMatch:
    # Strict comparison: on ties the earlier chunk stays.
    if best is None or candidate.similarity > best.similarity:
        return candidate
    return best


def best_match(matches: Iterable[ChunkMatch]) -> ChunkMatch | None:
    """Return the highest-similarity match, or None when there are none."""
    return reduce(_keep_better, matches, None)


def rank_results(results: list[SearchResult], *, limit: int) -> list[SearchResult]:
    """Sort by raw score (descending, stable) and apply limit."""
    ordered = sorted(results, key=lambda result: result.raw_score, reverse=True)
    return ordered[: max(limit, 1)]
