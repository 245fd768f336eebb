from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Literal, TypeAlias

from pydantic import BaseModel, ConfigDict, Field

MatchMethod: TypeAlias = Literal["semantic", "keyword"]
SearchMethod: TypeAlias = Literal["semantic", "keyword", "keyword_fallback", "no_documents"]
SearchType: TypeAlias = Literal["ai_semantic", "keyword", "none"]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Document(BaseModel):
    """A user's uploaded document, immutable once stored"""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Document identifier")
    user_id: str = Field(default="local", description="Owner of the document")
    name: str = Field(description="Display name, usually the original filename")
    content: str = Field(description="Extracted raw text content")
    content_type: str = Field(default="text/plain", description="MIME type of the source file")
    upload_date: datetime = Field(default_factory=utc_now, description="Upload timestamp (UTC)")
    size_bytes: int = Field(default=0, description="Size of the source file in bytes")
    embeddings: list[list[float]] = Field(
        default_factory=list,
        description="Precomputed embeddings for a subset of chunks",
    )
    embedding_model: str | None = Field(
        default=None, description="Model that produced `embeddings`"
    )


@dataclass(frozen=True)
class SearchResult:
    """A ranked passage for one document, produced per query."""

    document: Document
    score: float
    snippet: str
    method: MatchMethod
    raw_score: float = 0.0


class AnswerItem(BaseModel):
    """One ranked document in a search response"""

    document_id: str
    document_name: str
    document_type: str
    content_snippet: str = Field(description="Best-matching passage, truncated for display")
    confidence: int = Field(description="Score as a rounded percentage")
    page_reference: int = Field(
        description="Approximate locator derived from the snippet's character offset"
    )
    upload_date: datetime
    search_method: MatchMethod


class SearchResponse(BaseModel):
    """Final answer plus the ranked snippets it was built from"""

    query: str
    answers: list[AnswerItem] = Field(default_factory=list)
    ai_answer: str
    total_found: int = 0
    search_type: SearchType
    search_method: SearchMethod
    search_error: str | None = None
    documents_searched: int = 0
    ai_enabled: bool = False
    timestamp: datetime = Field(default_factory=utc_now)
