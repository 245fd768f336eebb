"""
Configuration helpers.

Every setting resolves in the same order: explicit override, environment
variable, default.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from rich.logging import RichHandler


DEFAULT_DB_PATH = "~/.docs_qa/documents.duckdb"
ENV_DB_PATH = "DOCS_QA_DB_PATH"

ENV_API_KEY = "GEMINI_API_KEY"
ENV_API_KEY_FALLBACK = "GOOGLE_API_KEY"
GEMINI_KEY_PREFIX = "AIza"

DEFAULT_MAX_REQUESTS_PER_MINUTE = 15
ENV_MAX_REQUESTS_PER_MINUTE = "DOCS_QA_MAX_REQUESTS_PER_MINUTE"

DEFAULT_USER = "local"
ENV_USER = "DOCS_QA_USER"

DEFAULT_LOG_LEVEL = "WARNING"
ENV_LOG_LEVEL = "DOCS_QA_LOG_LEVEL"


def resolve_db_path(override_path: str | None = None) -> str:
    """
    Resolve the DuckDB path from CLI override, env var, or default.

    Precedence:
    1) explicit override_path
    2) DOCS_QA_DB_PATH
    3) default path
    """
    raw_path = override_path or os.getenv(ENV_DB_PATH) or DEFAULT_DB_PATH
    resolved = Path(raw_path).expanduser().resolve()
    resolved.parent.mkdir(parents=True, exist_ok=True)
    return str(resolved)


def resolve_api_key(override_key: str | None = None) -> str | None:
    """Return the Gemini API key, preferring GEMINI_API_KEY over GOOGLE_API_KEY."""
    key = override_key or os.getenv(ENV_API_KEY) or os.getenv(ENV_API_KEY_FALLBACK)
    return key.strip() if key else None


def is_gemini_key(key: str | None) -> bool:
    """Gemini API keys are issued with a fixed prefix."""
    return key is not None and key.startswith(GEMINI_KEY_PREFIX)


def resolve_max_requests_per_minute(override: int | None = None) -> int:
    if override is not None:
        return override
    raw = os.getenv(ENV_MAX_REQUESTS_PER_MINUTE)
    if raw is None or not raw.strip():
        return DEFAULT_MAX_REQUESTS_PER_MINUTE
    value = int(raw)
    if value <= 0:
        raise ValueError(f"{ENV_MAX_REQUESTS_PER_MINUTE} must be > 0, got {value}")
    return value


def resolve_default_user(override_user: str | None = None) -> str:
    return override_user or os.getenv(ENV_USER) or DEFAULT_USER


def configure_logging(level: str | int | None = None) -> None:
    """Route library logging through rich for CLI and server use."""
    resolved = level or os.getenv(ENV_LOG_LEVEL) or DEFAULT_LOG_LEVEL
    if isinstance(resolved, str):
        resolved = resolved.upper()
    logging.basicConfig(
        level=resolved,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )
