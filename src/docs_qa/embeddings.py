"""
Embedding provider for vector-based semantic search.

Wraps the Google GenAI embedding API for single-text embedding with a
configurable model and dimension. Every call goes through the shared rate
limiter, and SDK failures are classified into typed errors here, where the
raw exception is caught.
"""

from __future__ import annotations

import logging
import os
from typing import Any

from google.genai import Client as GenAIClient

from .config import is_gemini_key, resolve_api_key
from .errors import CapabilityUnavailable, EmbeddingError, to_capability_error
from .rate_limit import RateLimiter, get_rate_limiter

logger = logging.getLogger(__name__)

_DEFAULT_MODEL = "gemini-embedding-001"
_DEFAULT_DIM = 768


class EmbeddingProvider:
    """Generate text embeddings via Google GenAI."""

    def __init__(
        self,
        *,
        api_key: str | None = None,
        model: str | None = None,
        dim: int | None = None,
        client: Any | None = None,
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        self.model = model or os.getenv("DOCS_QA_EMBEDDING_MODEL", _DEFAULT_MODEL)
        self.dim = dim or int(os.getenv("DOCS_QA_EMBEDDING_DIM", str(_DEFAULT_DIM)))
        self.rate_limiter = rate_limiter or get_rate_limiter()

        self._client: Any | None
        if client is not None:
            self._client = client
        else:
            resolved_key = resolve_api_key(api_key)
            self._client = GenAIClient(api_key=resolved_key) if is_gemini_key(resolved_key) else None

    @property
    def is_configured(self) -> bool:
        return self._client is not None

    async def embed(
        self,
        text: str,
        *,
        task_type: str = "RETRIEVAL_DOCUMENT",
    ) -> list[float]:
        """Embed a single text.

        Raises `ValueError` for blank text, `CapabilityUnavailable` when no
        API key is configured, and a `CapabilityError` subclass
        (`QuotaExceeded`, `AuthError`, `EmbeddingError`) when the call fails.
        """
        if not text or not text.strip():
            raise ValueError("Empty text provided for embedding")
        if self._client is None:
            raise CapabilityUnavailable("Gemini API key not configured")

        await self.rate_limiter.acquire()
        try:
            result = await self._client.aio.models.embed_content(
                model=self.model,
                contents=[text],
                config={
                    "task_type": task_type,
                    "output_dimensionality": self.dim,
                },
            )
        except Exception as exc:
            logger.warning("Embedding generation failed: %s", exc)
            raise to_capability_error(
                exc, unknown=EmbeddingError, prefix="Failed to generate embeddings"
            ) from exc

        embeddings = getattr(result, "embeddings", None)
        if not embeddings or not embeddings[0].values:
            raise EmbeddingError("Invalid response from Gemini API")
        values = list(embeddings[0].values)
        logger.debug("Generated embedding (%d dimensions) for %d chars", len(values), len(text))
        return values

    async def embed_query(self, query: str) -> list[float]:
        """Embed a single query text for retrieval."""
        return await self.embed(query, task_type="RETRIEVAL_QUERY")
