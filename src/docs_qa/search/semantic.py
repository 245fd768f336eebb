"""
Vector-based semantic search engine.

Embeds a query and compares it against freshly embedded chunks of each
document via cosine similarity. Work per query is bounded (documents and
chunks per document) because every chunk costs one rate-limited API call.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Sequence

from ..embeddings import EmbeddingProvider
from ..errors import CapabilityError, CapabilityUnavailable, SemanticSearchError
from ..indexing.chunker import split_text
from ..models import Document, SearchResult
from .ranker import ChunkMatch, best_match, clamp_score, cosine_similarity, rank_results

logger = logging.getLogger(__name__)

MAX_DOCUMENTS = 5
MAX_CHUNKS_PER_DOCUMENT = 3
MIN_DOCUMENT_LENGTH = 100
MIN_CHUNK_LENGTH = 100
CHUNK_SIZE = 600
CHUNK_OVERLAP = 100
SIMILARITY_THRESHOLD = 0.3


class SimilarityRanker:
    """Rank documents by their best-matching chunk against a query embedding."""

    def __init__(
        self,
        embedding_provider: EmbeddingProvider,
        *,
        max_documents: int = MAX_DOCUMENTS,
        max_chunks_per_document: int = MAX_CHUNKS_PER_DOCUMENT,
        threshold: float = SIMILARITY_THRESHOLD,
    ) -> None:
        self.embedding_provider = embedding_provider
        self.max_documents = max_documents
        self.max_chunks_per_document = max_chunks_per_document
        self.threshold = threshold

    async def rank(
        self,
        query_embedding: Sequence[float],
        documents: Sequence[Document],
        limit: int = 3,
    ) -> list[SearchResult]:
        if not self.embedding_provider.is_configured:
            raise SemanticSearchError("Gemini API not configured")

        results: list[SearchResult] = []
        for document in documents[: self.max_documents]:
            if len(document.content) < MIN_DOCUMENT_LENGTH:
                logger.debug("Skipping document %s: insufficient content", document.name)
                continue

            match = await self._best_chunk(query_embedding, document)
            if match is None or match.similarity <= self.threshold:
                logger.debug(
                    "No good match in %s (best similarity: %s)",
                    document.name,
                    f"{match.similarity:.3f}" if match else "n/a",
                )
                continue

            logger.info("Document %s matched with similarity %.3f", document.name, match.similarity)
            results.append(
                SearchResult(
                    document=document,
                    score=clamp_score(match.similarity),
                    snippet=match.text,
                    method="semantic",
                    raw_score=match.similarity,
                )
            )

        return rank_results(results, limit=limit)

    async def _best_chunk(
        self, query_embedding: Sequence[float], document: Document
    ) -> ChunkMatch | None:
        chunks = split_text(document.content, CHUNK_SIZE, CHUNK_OVERLAP)
        candidates = [
            chunk
            for chunk in chunks[: self.max_chunks_per_document]
            if len(chunk) >= MIN_CHUNK_LENGTH
        ]
        # gather preserves input order, which keeps tie-breaking deterministic.
        embeddings = await asyncio.gather(
            *(self._embed_chunk(document, chunk) for chunk in candidates)
        )
        return best_match(
            ChunkMatch(text=chunk, similarity=cosine_similarity(query_embedding, embedding))
            for chunk, embedding in zip(candidates, embeddings)
            if embedding is not None
        )

    async def _embed_chunk(self, document: Document, chunk: str) -> list[float] | None:
        try:
            return await self.embedding_provider.embed(chunk)
        except CapabilityError as exc:
            logger.warning("Failed to process a chunk of %s: %s", document.name, exc)
            return None


class SemanticSearchEngine:
    """Embed a query and rank documents by chunk similarity."""

    name = "semantic"

    def __init__(
        self,
        embedding_provider: EmbeddingProvider,
        ranker: SimilarityRanker | None = None,
    ) -> None:
        self.embedding_provider = embedding_provider
        self.ranker = ranker or SimilarityRanker(embedding_provider)

    async def search(
        self,
        *,
        query: str,
        documents: Sequence[Document],
        limit: int = 3,
    ) -> list[SearchResult]:
        """Return ranked document hits using vector cosine similarity."""
        if not self.embedding_provider.is_configured:
            raise SemanticSearchError("Gemini API not configured")

        logger.info("Semantic search over %d documents", len(documents))
        try:
            query_embedding = await self.embedding_provider.embed_query(query)
        except (CapabilityError, CapabilityUnavailable) as exc:
            raise SemanticSearchError(str(exc)) from exc

        results = await self.ranker.rank(query_embedding, documents, limit)
        logger.info("Semantic search completed: %d results", len(results))
        return results
