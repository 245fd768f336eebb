"""
Search orchestration: strategy selection, fallback, synthesis and response
assembly for one question.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol, Sequence, cast

from ..embeddings import EmbeddingProvider
from ..errors import InvalidQuery
from ..generation import GenerationProvider
from ..models import AnswerItem, Document, SearchMethod, SearchResponse, SearchResult
from ..rate_limit import RateLimiter, get_rate_limiter
from ..synthesis import AnswerSynthesizer
from .keyword import KeywordScorer
from .semantic import SemanticSearchEngine

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 2
SNIPPET_PREVIEW_LENGTH = 250
PAGE_LOCATOR_PREFIX = 200
CHARS_PER_PAGE = 1500

NO_DOCUMENTS_MESSAGE = (
    "No documents found to search through. Please upload some documents first."
)
NO_RESULTS_MESSAGE = (
    "I couldn't find any relevant information in your documents to answer this "
    "question. The documents may not contain information about this topic, or "
    "you might need to try different keywords."
)
KEYWORD_ONLY_MESSAGE = (
    "Keyword search completed. For more intelligent, context-aware answers, "
    "enable AI semantic search."
)


class SearchStrategy(Protocol):
    """A retrieval path with a common result contract."""

    name: str

    async def search(
        self,
        *,
        query: str,
        documents: Sequence[Document],
        limit: int = 3,
    ) -> list[SearchResult]:
        """Return ranked results or raise to hand over to the next strategy."""


@dataclass(frozen=True)
class RetrievalOutcome:
    """Ranked results plus which strategy produced them."""

    results: list[SearchResult]
    method: SearchMethod
    error: str | None = None


def validate_query(query: str | None) -> str:
    clean = (query or "").strip()
    if len(clean) < MIN_QUERY_LENGTH:
        raise InvalidQuery(f"Query must be at least {MIN_QUERY_LENGTH} characters long")
    return clean


def preview_snippet(snippet: str) -> str:
    if len(snippet) > SNIPPET_PREVIEW_LENGTH:
        return snippet[:SNIPPET_PREVIEW_LENGTH] + "..."
    return snippet


def page_reference(content: str, snippet: str) -> int:
    """
    Approximate locator: which 1500-char slice of `content` the snippet starts in.

    Not a real page number. Returns 1 when the snippet cannot be located verbatim.
    """
    if not content or not snippet:
        return 1
    offset = content.find(snippet[:PAGE_LOCATOR_PREFIX])
    if offset == -1:
        return 1
    return offset // CHARS_PER_PAGE + 1


def to_answer_item(result: SearchResult) -> AnswerItem:
    document = result.document
    return AnswerItem(
        document_id=document.id,
        document_name=document.name,
        document_type=document.content_type,
        content_snippet=preview_snippet(result.snippet),
        confidence=round(result.score * 100),
        page_reference=page_reference(document.content, result.snippet),
        upload_date=document.upload_date,
        search_method=result.method,
    )


class SearchOrchestrator:
    """Answer a question against a document set, degrading instead of failing."""

    def __init__(
        self,
        *,
        embedding_provider: EmbeddingProvider | None = None,
        generation_provider: GenerationProvider | None = None,
        rate_limiter: RateLimiter | None = None,
        keyword_search: SearchStrategy | None = None,
        semantic_search: SearchStrategy | None = None,
        synthesizer: AnswerSynthesizer | None = None,
    ) -> None:
        limiter = rate_limiter or get_rate_limiter()
        self.embedding_provider = embedding_provider or EmbeddingProvider(rate_limiter=limiter)
        self.generation_provider = generation_provider or GenerationProvider(
            rate_limiter=limiter
        )
        self.keyword_search: SearchStrategy = keyword_search or KeywordScorer()
        self.semantic_search: SearchStrategy = semantic_search or SemanticSearchEngine(
            self.embedding_provider
        )
        self.synthesizer = synthesizer or AnswerSynthesizer(self.generation_provider)

    @property
    def ai_enabled(self) -> bool:
        return self.embedding_provider.is_configured

    def strategies(self, *, use_ai: bool) -> list[SearchStrategy]:
        """Ordered retrieval paths for this request."""
        if use_ai and self.ai_enabled:
            return [self.semantic_search, self.keyword_search]
        return [self.keyword_search]

    async def retrieve(
        self,
        query: str,
        documents: Sequence[Document],
        *,
        k: int = 3,
        use_ai: bool = True,
    ) -> RetrievalOutcome:
        """Run strategies in order until one completes without raising."""
        first_error: str | None = None
        for strategy in self.strategies(use_ai=use_ai):
            try:
                results = await strategy.search(query=query, documents=documents, limit=k)
            except Exception as exc:
                logger.warning("%s search failed, falling back: %s", strategy.name, exc)
                if first_error is None:
                    first_error = str(exc)
                continue

            method = strategy.name if first_error is None else f"{strategy.name}_fallback"
            logger.info("Search completed: %d results using %s", len(results), method)
            return RetrievalOutcome(
                results=results, method=cast(SearchMethod, method), error=first_error
            )

        return RetrievalOutcome(results=[], method="keyword_fallback", error=first_error)

    async def answer(self, query: str, outcome: RetrievalOutcome, *, use_ai: bool) -> str:
        if not use_ai:
            return KEYWORD_ONLY_MESSAGE
        if not outcome.results:
            return NO_RESULTS_MESSAGE
        return await self.synthesizer.synthesize(
            query, [result.snippet for result in outcome.results]
        )

    def no_documents_response(self, query: str) -> SearchResponse:
        return SearchResponse(
            query=query,
            answers=[],
            ai_answer=NO_DOCUMENTS_MESSAGE,
            total_found=0,
            search_type="none",
            search_method="no_documents",
            documents_searched=0,
            ai_enabled=self.ai_enabled,
        )

    def build_response(
        self,
        query: str,
        documents: Sequence[Document],
        outcome: RetrievalOutcome,
        ai_answer: str,
        *,
        use_ai: bool,
    ) -> SearchResponse:
        answers = [to_answer_item(result) for result in outcome.results]
        return SearchResponse(
            query=query,
            answers=answers,
            ai_answer=ai_answer,
            total_found=len(answers),
            search_type="ai_semantic" if use_ai else "keyword",
            search_method=outcome.method,
            search_error=outcome.error,
            documents_searched=len(documents),
            ai_enabled=self.ai_enabled,
        )

    async def search(
        self,
        query: str,
        documents: Sequence[Document],
        *,
        k: int = 3,
        use_ai: bool = True,
    ) -> SearchResponse:
        """
        Answer `query` from `documents`.

        Raises `InvalidQuery` for blank or too-short queries. Every other
        failure is absorbed into the response.
        """
        clean_query = validate_query(query)
        if not documents:
            return self.no_documents_response(clean_query)

        outcome = await self.retrieve(clean_query, documents, k=k, use_ai=use_ai)
        ai_answer = await self.answer(clean_query, outcome, use_ai=use_ai)
        return self.build_response(clean_query, documents, outcome, ai_answer, use_ai=use_ai)
