"""
docs-qa - question answering over a user's uploaded documents.

This package stores text documents per user, retrieves the passages most
relevant to a question (semantic search with Gemini embeddings, falling back
to keyword scoring), and synthesizes a grounded answer with Gemini. Every
outbound Gemini call goes through one shared rate limiter, and capability
failures degrade the answer instead of failing the request.

Example usage:
    >>> from docs_qa import SearchOrchestrator
    >>> orchestrator = SearchOrchestrator()
    >>> response = await orchestrator.search("What is the refund policy?", documents)
"""

from .embeddings import EmbeddingProvider
from .errors import (
    AuthError,
    CapabilityError,
    CapabilityUnavailable,
    FailureKind,
    InvalidQuery,
    QuotaExceeded,
    SemanticSearchError,
)
from .generation import GenerationProvider
from .models import AnswerItem, Document, SearchResponse, SearchResult
from .rate_limit import RateLimiter, get_rate_limiter
from .search import SearchOrchestrator
from .synthesis import AnswerSynthesizer
from .workflow import (
    workflow,
    QuestionWorkflow,
    AskEvent,
    RetrievalEvent,
    AnswerEndEvent,
    get_orchestrator,
    set_orchestrator,
)

__all__ = [
    # Capabilities
    "EmbeddingProvider",
    "GenerationProvider",
    "RateLimiter",
    "get_rate_limiter",
    # Search
    "SearchOrchestrator",
    "AnswerSynthesizer",
    # Workflow
    "workflow",
    "QuestionWorkflow",
    "AskEvent",
    "RetrievalEvent",
    "AnswerEndEvent",
    "get_orchestrator",
    "set_orchestrator",
    # Models
    "Document",
    "SearchResult",
    "AnswerItem",
    "SearchResponse",
    # Errors
    "FailureKind",
    "InvalidQuery",
    "CapabilityUnavailable",
    "CapabilityError",
    "QuotaExceeded",
    "AuthError",
    "SemanticSearchError",
]
