"""Search paths and orchestration over a user's documents."""

from .keyword import KeywordScorer, query_terms, select_snippet
from .orchestrator import (
    RetrievalOutcome,
    SearchOrchestrator,
    SearchStrategy,
    page_reference,
    validate_query,
)
from .ranker import ChunkMatch, best_match, cosine_similarity, rank_results
from .semantic import SemanticSearchEngine, SimilarityRanker

__all__ = [
    "KeywordScorer",
    "query_terms",
    "select_snippet",
    "RetrievalOutcome",
    "SearchOrchestrator",
    "SearchStrategy",
    "page_reference",
    "validate_query",
    "ChunkMatch",
    "best_match",
    "cosine_similarity",
    "rank_results",
    "SemanticSearchEngine",
    "SimilarityRanker",
]
