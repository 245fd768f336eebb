"""
Error taxonomy for retrieval and answer generation.

Capability failures (embedding, generation) are classified once, at the point
where the raw SDK exception is caught, into a `FailureKind`. Callers branch on
the exception type instead of re-reading error messages.
"""

from __future__ import annotations

from enum import Enum

from google.genai import errors as genai_errors


class FailureKind(str, Enum):
    """Classification of a failed capability call."""

    QUOTA = "quota"
    AUTH = "auth"
    OTHER = "other"


class DocsQAError(Exception):
    """Base class for all docs-qa errors."""


class InvalidQuery(DocsQAError, ValueError):
    """Raised when a search query fails validation."""


class CapabilityUnavailable(DocsQAError):
    """Raised when no embedding/generation capability is configured."""


class CapabilityError(DocsQAError):
    """A classified failure returned by the embedding or generation capability."""

    kind: FailureKind = FailureKind.OTHER


class EmbeddingError(CapabilityError):
    """Embedding call failed for an unclassified reason."""


class GenerationError(CapabilityError):
    """Generation call failed for an unclassified reason."""


class QuotaExceeded(CapabilityError):
    """The capability is throttling us; retrying right away will not help."""

    kind = FailureKind.QUOTA


class AuthError(CapabilityError):
    """The configured API key was rejected. Not retryable."""

    kind = FailureKind.AUTH


class SemanticSearchError(DocsQAError):
    """The semantic search path could not produce a result set."""


_QUOTA_STATUSES = frozenset({"RESOURCE_EXHAUSTED"})
_AUTH_STATUSES = frozenset({"UNAUTHENTICATED", "PERMISSION_DENIED"})
_QUOTA_MARKERS: tuple[str, ...] = ("quota", "rate limit", "429", "resource_exhausted")
_AUTH_MARKERS: tuple[str, ...] = ("api key", "401", "unauthenticated")


def classify_failure(exc: BaseException) -> FailureKind:
    """Classify a raw capability exception."""
    if isinstance(exc, CapabilityError):
        return exc.kind

    if isinstance(exc, genai_errors.APIError):
        status = (exc.status or "").upper()
        if exc.code == 429 or status in _QUOTA_STATUSES:
            return FailureKind.QUOTA
        if exc.code in (401, 403) or status in _AUTH_STATUSES:
            return FailureKind.AUTH

    # Gemini reports a malformed key as 400 INVALID_ARGUMENT, so the message
    # is the only signal left for those and for non-SDK transport errors.
    message = str(exc).lower()
    if any(marker in message for marker in _QUOTA_MARKERS):
        return FailureKind.QUOTA
    if any(marker in message for marker in _AUTH_MARKERS):
        return FailureKind.AUTH
    return FailureKind.OTHER


def to_capability_error(
    exc: BaseException,
    *,
    unknown: type[CapabilityError],
    prefix: str,
) -> CapabilityError:
    """Wrap a raw capability exception into the matching typed error."""
    kind = classify_failure(exc)
    if kind is FailureKind.QUOTA:
        return QuotaExceeded("Free API quota exceeded. Please try again in a minute.")
    if kind is FailureKind.AUTH:
        return AuthError("Invalid Gemini API key. Please check your configuration.")
    return unknown(f"{prefix}: {exc}")
