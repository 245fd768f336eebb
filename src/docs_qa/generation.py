"""
Text generation provider backed by Google GenAI.
"""

from __future__ import annotations

import logging
import os
from typing import Any

from google.genai import Client as GenAIClient

from .config import is_gemini_key, resolve_api_key
from .errors import CapabilityUnavailable, GenerationError, to_capability_error
from .rate_limit import RateLimiter, get_rate_limiter

logger = logging.getLogger(__name__)

_DEFAULT_MODEL = "gemini-2.0-flash"


class GenerationProvider:
    """Generate answers via Google GenAI, one rate-limited call at a time."""

    def __init__(
        self,
        *,
        api_key: str | None = None,
        model: str | None = None,
        client: Any | None = None,
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        self.model = model or os.getenv("DOCS_QA_GENERATION_MODEL", _DEFAULT_MODEL)
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

    async def generate(
        self,
        prompt: str,
        *,
        max_tokens: int = 500,
        temperature: float = 0.3,
    ) -> str:
        if self._client is None:
            raise CapabilityUnavailable("Gemini API key not configured")

        await self.rate_limiter.acquire()
        try:
            response = await self._client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config={
                    "max_output_tokens": max_tokens,
                    "temperature": temperature,
                },
            )
        except Exception as exc:
            logger.warning("Generation with %s failed: %s", self.model, exc)
            raise to_capability_error(
                exc, unknown=GenerationError, prefix="Generation model unavailable"
            ) from exc

        if response.text is None:
            raise GenerationError(f"Empty response from {self.model}")
        return response.text
