"""
Health reporting and live capability probes.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from .embeddings import EmbeddingProvider
from .errors import FailureKind, classify_failure
from .generation import GenerationProvider
from .rate_limit import RateLimiter

logger = logging.getLogger(__name__)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


async def health_report(
    *,
    embedding_provider: EmbeddingProvider,
    generation_provider: GenerationProvider,
    rate_limiter: RateLimiter,
) -> dict[str, Any]:
    """Service status plus a rate-limited generation probe when configured."""
    usage = rate_limiter.usage()
    ai_available = embedding_provider.is_configured and generation_provider.is_configured
    health: dict[str, Any] = {
        "status": "OK",
        "timestamp": _timestamp(),
        "limits": {
            "requests_per_minute": usage.limit,
            "models": [generation_provider.model, embedding_provider.model],
            "current_usage": usage.describe(),
        },
        "services": {
            "gemini_api": "CONFIGURED" if ai_available else "UNAVAILABLE",
        },
        "features": {
            "ai_semantic_search": embedding_provider.is_configured,
            "keyword_search": True,
        },
    }

    if generation_provider.is_configured:
        try:
            await generation_provider.generate("health check", max_tokens=5, temperature=0.0)
        except Exception as exc:
            health["services"]["gemini_api"] = "LIMITED"
            if classify_failure(exc) is FailureKind.QUOTA:
                health["gemini_error"] = "Quota limited - normal under heavy usage"
            else:
                health["gemini_error"] = str(exc)
        else:
            health["services"]["gemini_api"] = "ACTIVE"
            health["gemini_test"] = "SUCCESS"

    return health


async def probe_capabilities(
    *,
    embedding_provider: EmbeddingProvider,
    generation_provider: GenerationProvider,
) -> dict[str, Any]:
    """Exercise the embedding and generation models once each."""
    tests: dict[str, dict[str, Any]] = {
        "embedding": {"status": "PENDING", "model": embedding_provider.model},
        "generation": {"status": "PENDING", "model": generation_provider.model},
    }

    try:
        vector = await embedding_provider.embed_query("test query")
    except Exception as exc:
        logger.warning("Embedding probe failed: %s", exc)
        tests["embedding"].update(status="FAILED", error=str(exc))
    else:
        tests["embedding"].update(status="SUCCESS", dimensions=len(vector))

    try:
        text = await generation_provider.generate(
            "Say OK for a connectivity test", max_tokens=20, temperature=0.1
        )
    except Exception as exc:
        logger.warning("Generation probe failed: %s", exc)
        tests["generation"].update(status="FAILED", error=str(exc))
    else:
        tests["generation"].update(status="SUCCESS", response=text)

    all_passed = all(test["status"] == "SUCCESS" for test in tests.values())
    return {
        "status": "SUCCESS" if all_passed else "PARTIAL",
        "message": "Gemini API is working" if all_passed else "Some Gemini features are limited",
        "tests": tests,
        "timestamp": _timestamp(),
    }
